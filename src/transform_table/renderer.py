"""HTML rendering for tabular data.

This module renders TabularData as a fixed HTML fragment: a base style block,
stylesheet links, script tags, and one table. It also decides from the Accept
header whether a plain request asks for the HTML rendering.

Cell values are inserted as-is. Routes that serve untrusted content should
escape it through their ``map_data`` projection.
"""

from typing import Any, Literal

from transform_table.converter import TabularData
from transform_table.options import RenderOptions

Format = Literal["json", "html"]

HTML_CONTENT_TYPE = "text/html; charset=utf-8"

LINE_SEPARATOR = "\n"

BASE_STYLE = (
    "<style>"
    "table { border-collapse: collapse; font-family: Helvetica, Arial, sans-serif; } "
    "th, td { border: 1px solid #ddd; padding: 4px 8px; text-align: left; vertical-align: top; } "
    "th { background-color: #f5f5f5; }"
    "</style>"
)

DATATABLE_INIT = (
    "<script>"
    "$(document).ready(function() { "
    "$('#table').DataTable({ pageLength: 50, order: [] }); "
    "});"
    "</script>"
)


class Renderer:
    """Renders tabular data for HTTP responses."""

    def render_html(self, table: TabularData, options: RenderOptions) -> tuple[str, str]:
        """Render tabular data as an HTML table.

        Emits, in order: the base style block, one <link> per stylesheet,
        one <script> per script URL, then the table with a <thead> built
        from the header row and a <tbody> with one row per data row. When
        the DataTables enhancement is enabled its init snippet follows the
        table.

        Args:
            table: Header row followed by data rows
            options: Resolved rendering options

        Returns:
            Tuple of (html_content, content_type)
        """
        header, rows = table[0], table[1:]

        lines = [BASE_STYLE]
        lines.extend(f'<link rel="stylesheet" href="{url}">' for url in options.css)
        lines.extend(f'<script src="{url}"></script>' for url in options.scripts)

        if options.table_attributes:
            lines.append(f"<table {options.table_attributes}>")
        else:
            lines.append("<table>")
        if options.title:
            lines.append(f"<caption>{options.title}</caption>")
        lines.append("<thead>")
        lines.append(_row("th", header))
        lines.append("</thead>")
        lines.append("<tbody>")
        lines.extend(_row("td", row) for row in rows)
        lines.append("</tbody>")
        lines.append("</table>")

        if options.datatable:
            lines.append(DATATABLE_INIT)

        return LINE_SEPARATOR.join(lines), HTML_CONTENT_TYPE

    def determine_format(self, accept_header: str | None) -> Format:
        """Determine output format based on Accept header.

        Only a request that asks for exactly ``text/html`` gets the table.
        Browser defaults such as ``text/html,application/xhtml+xml,...`` keep
        the JSON response, so API clients sending broad Accept headers are
        unaffected.

        Args:
            accept_header: Value of the Accept HTTP header (or None)

        Returns:
            "html" if the client asked for HTML, "json" otherwise
        """
        if accept_header is None:
            return "json"

        if accept_header.strip().lower() == "text/html":
            return "html"

        return "json"


def _row(tag: str, cells: list[Any]) -> str:
    content = "".join(f"<{tag}>{_cell_text(cell)}</{tag}>" for cell in cells)
    return f"<tr>{content}</tr>"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
