"""Rendering options and their resolution.

Plugin-wide defaults are merged with the settings a route declares through
``route_settings``. The merge always builds a fresh ``RenderOptions`` so that
no response can leak assets into another.
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

# Attribute name under which route settings are stored on a view function
PLUGIN_KEY = "transform_table"

DATATABLES_CSS = "https://cdn.datatables.net/1.10.16/css/jquery.dataTables.min.css"
JQUERY_JS = "https://code.jquery.com/jquery-3.3.1.min.js"
DATATABLES_JS = "https://cdn.datatables.net/1.10.16/js/jquery.dataTables.min.js"
DATATABLE_ID_ATTRIBUTE = 'id="table"'

ID_ATTRIBUTE_RE = re.compile(r"""(?<![\w-])id\s*=\s*("[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)


@dataclass(frozen=True)
class RenderOptions:
    """Resolved configuration for rendering one response.

    Attributes:
        css: Stylesheet URLs, linked in order
        scripts: Script URLs, included in order
        table_attributes: Raw attribute string placed on the <table> tag
        datatable: Whether the DataTables enhancement is injected
        map_data: Optional projection applied to each record before conversion
        include_collection_length: Add a ``<key>.length`` column for lists
        exclude_sub_arrays: Leave list values out of the table
        columns: Declared columns, fixing header order
        title: Optional table caption
    """

    css: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    table_attributes: Optional[str] = None
    datatable: bool = False
    map_data: Optional[Callable[[Any], Any]] = None
    include_collection_length: bool = False
    exclude_sub_arrays: bool = False
    columns: Optional[tuple[str, ...]] = None
    title: Optional[str] = None


OPTION_NAMES = frozenset(f.name for f in fields(RenderOptions))


def resolve_options(
    defaults: Mapping[str, Any], route_settings: Optional[Mapping[str, Any]] = None
) -> RenderOptions:
    """Merge plugin defaults with route settings into one RenderOptions.

    Route settings win over defaults key by key. Nothing is merged below the
    first level, and neither input is modified.

    Args:
        defaults: Plugin-wide defaults
        route_settings: Settings declared by the matched route, if any

    Returns:
        Freshly built RenderOptions
    """
    merged: dict[str, Any] = {**defaults, **(route_settings or {})}

    unknown = sorted(set(merged) - OPTION_NAMES)
    if unknown:
        logger.warning(f"Ignoring unknown table options: {', '.join(unknown)}")
        for key in unknown:
            del merged[key]

    css = tuple(merged.get("css") or ())
    scripts = tuple(merged.get("scripts") or ())
    table_attributes = merged.get("table_attributes")
    datatable = bool(merged.get("datatable", False))

    if datatable:
        css = _append_once(css, DATATABLES_CSS)
        scripts = _append_once(_append_once(scripts, JQUERY_JS), DATATABLES_JS)
        table_attributes = _with_table_id(table_attributes)

    columns = merged.get("columns")
    merged.update(
        css=css,
        scripts=scripts,
        table_attributes=table_attributes,
        datatable=datatable,
        columns=tuple(columns) if columns is not None else None,
    )
    return RenderOptions(**merged)


def _append_once(urls: tuple[str, ...], url: str) -> tuple[str, ...]:
    if url in urls:
        return urls
    return urls + (url,)


def _with_table_id(table_attributes: Optional[str]) -> str:
    if not table_attributes:
        return DATATABLE_ID_ATTRIBUTE
    if DATATABLE_ID_ATTRIBUTE in table_attributes:
        return table_attributes
    # The init snippet selects #table, so an existing id is replaced
    replaced, count = ID_ATTRIBUTE_RE.subn(DATATABLE_ID_ATTRIBUTE, table_attributes, 1)
    if count:
        return replaced
    return f"{DATATABLE_ID_ATTRIBUTE} {table_attributes}"


def route_settings(**settings: Any) -> Callable:
    """Declare table rendering settings for a view function.

    Usage::

        @app.route("/cars")
        @route_settings(datatable=True, css=["/static/cars.css"])
        def cars():
            ...
    """
    unknown = sorted(set(settings) - OPTION_NAMES)
    if unknown:
        raise TypeError(f"Unknown table options: {', '.join(unknown)}")

    def decorator(view: Callable) -> Callable:
        setattr(view, PLUGIN_KEY, dict(settings))
        return view

    return decorator


def get_route_settings(view: Optional[Callable]) -> Optional[Mapping[str, Any]]:
    """Return the settings declared on a view function, if any."""
    if view is None:
        return None
    return getattr(view, PLUGIN_KEY, None)
