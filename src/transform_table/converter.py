"""Conversion of JSON payloads into tabular rows.

``to_table`` turns JSON-like data into a header row followed by data rows.
``build_table`` adapts a response payload to it, applying the route's
``map_data`` projection and normalizing single objects into Name/Value rows.
"""

import json
import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from transform_table.options import RenderOptions

logger = logging.getLogger(__name__)

NAME_COLUMN = "Name"
VALUE_COLUMN = "Value"

TabularData = list[list[Any]]


def format_value(value: Any) -> Any:
    """Pretty-print nested values as a multi-line block.

    Mappings and lists are rendered as indented JSON inside a ``<pre>``
    element. Scalars are returned unchanged.
    """
    if isinstance(value, (Mapping, list, tuple)):
        formatted = json.dumps(value, indent=2, ensure_ascii=False, default=str)
        return f"<pre>{formatted}</pre>"
    return value


def to_table(data: Any, options: Optional[RenderOptions] = None) -> TabularData:
    """Convert JSON-like data into rows, the first of which is the header.

    Records are flattened before tabulation: nested mappings become dot-path
    columns (``color.r``) and lists become a single pretty-printed cell.
    ``exclude_sub_arrays`` drops list cells, ``include_collection_length``
    adds a ``<key>.length`` column per list. Scalars are tabulated under a
    single ``Value`` column, and nested lists in that column are formatted
    like any other list cell.

    Nested mappings in records are expanded into columns, not formatted into
    one cell; only lists and the values of a single object (see
    ``build_table``) are pretty-printed.

    The header is the union of record keys in first-seen order, or the
    declared ``columns`` when set. It is never empty, so empty input yields a
    header-only table.

    Args:
        data: A list of records or scalars, a single record, or a scalar
        options: Resolved rendering options

    Returns:
        Header row followed by one row per record
    """
    options = options or RenderOptions()

    if isinstance(data, (list, tuple)):
        records = list(data)
    else:
        records = [data]

    flattened = []
    for record in records:
        if isinstance(record, Mapping):
            flattened.append(_flatten(record, options))
        else:
            flattened.append({VALUE_COLUMN: format_value(record)})

    if options.columns:
        header = list(options.columns)
    else:
        header = []
        for row in flattened:
            for column in row:
                if column not in header:
                    header.append(column)
        if not header:
            header = [VALUE_COLUMN]

    table: TabularData = [header]
    for row in flattened:
        table.append([row.get(column, "") for column in header])
    return table


def _flatten(
    record: Mapping[str, Any], options: RenderOptions, prefix: str = ""
) -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in record.items():
        column = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, options, f"{column}."))
        elif isinstance(value, (list, tuple)):
            if not options.exclude_sub_arrays:
                flat[column] = format_value(value)
            if options.include_collection_length:
                flat[f"{column}.length"] = len(value)
        else:
            flat[column] = value
    return flat


def build_table(payload: Any, options: RenderOptions) -> TabularData:
    """Convert a response payload into tabular rows.

    A list payload is projected element-wise through ``map_data`` (when
    configured) and tabulated. A single object is projected through
    ``map_data`` first and then normalized into one Name/Value row per
    top-level key, so nested objects show up as a formatted block in the
    Value cell rather than as further columns.

    Exceptions raised by ``map_data`` propagate to the caller.

    Args:
        payload: Decoded JSON body of the response
        options: Resolved rendering options

    Returns:
        Header row followed by data rows
    """
    if isinstance(payload, list):
        if options.map_data is not None:
            payload = [options.map_data(item) for item in payload]
        table = to_table(payload, options)
    elif isinstance(payload, Mapping):
        if options.map_data is not None:
            payload = options.map_data(payload)
        if isinstance(payload, Mapping):
            rows = [
                {NAME_COLUMN: key, VALUE_COLUMN: format_value(value)}
                for key, value in payload.items()
            ]
            table = to_table(rows, replace(options, columns=(NAME_COLUMN, VALUE_COLUMN)))
        else:
            table = to_table(payload, options)
    else:
        table = to_table(payload, options)

    logger.debug(f"Built table with {len(table) - 1} rows and {len(table[0])} columns")
    return table
