"""Flask extension serving JSON routes as HTML tables.

Every route ``P`` becomes reachable as ``P.html``. The PathRewriter maps the
suffixed request onto ``P``; the ``after_request`` hook installed here turns
the route's JSON response into an HTML table, and keeps the ``.html`` suffix
on redirects issued while serving such a request.
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from flask import Flask, Response, current_app, request

from transform_table.converter import build_table
from transform_table.middleware import (
    HTML_SUFFIX,
    NegotiationState,
    PathRewriter,
    get_negotiation_state,
)
from transform_table.options import (
    OPTION_NAMES,
    get_route_settings,
    resolve_options,
    route_settings,
)
from transform_table.renderer import Renderer

# Configure logging
logger = logging.getLogger(__name__)

EXTENSION_KEY = "transform_table"

REDIRECT_CODES = {301, 302, 303, 307, 308}


class TransformTable:
    """Serve JSON route responses as HTML tables on request.

    Usage::

        transform = TransformTable(app, css=["/static/table.css"])

        @app.route("/cars")
        @transform.route_settings(datatable=True)
        def cars():
            return jsonify(CARS)

    Keyword arguments are plugin-wide defaults; route settings override them
    key by key.
    """

    def __init__(
        self,
        app: Optional[Flask] = None,
        renderer: Optional[Renderer] = None,
        **defaults: Any,
    ):
        """Initialize the extension.

        Args:
            app: Flask application to register with (optional)
            renderer: Renderer for HTML output
            **defaults: Plugin-wide rendering defaults

        Raises:
            TypeError: If a default names an unknown option
        """
        unknown = sorted(set(defaults) - OPTION_NAMES)
        if unknown:
            raise TypeError(f"Unknown table options: {', '.join(unknown)}")

        self.defaults = MappingProxyType(dict(defaults))
        self.renderer = renderer or Renderer()

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Install the path rewriter and the response hook on an application."""
        if EXTENSION_KEY in app.extensions:
            logger.debug("Table transform already registered")
            return

        app.wsgi_app = PathRewriter(app.wsgi_app)
        app.after_request(self.transform_response)
        app.extensions[EXTENSION_KEY] = self
        logger.info("Table transform registered")

    route_settings = staticmethod(route_settings)

    def transform_response(self, response: Response) -> Response:
        """Render, redirect-correct, or pass through one response.

        Error responses and non-200 responses other than redirects are
        returned untouched. Exceptions raised while rendering are not
        caught, so the request fails as a server error instead of sending a
        partial page.

        Args:
            response: Response produced by the view

        Returns:
            The same response, possibly with a replaced body or Location
        """
        state = get_negotiation_state(request.environ)
        status = response.status_code

        if status >= 400:
            logger.debug(f"Passing through error response {status}")
            return response

        if status in REDIRECT_CODES:
            if state is not None:
                self._restore_redirect_suffix(response, state)
            return response

        if status != 200:
            logger.debug(f"Passing through non-200 response {status}")
            return response

        if state is None and self.renderer.determine_format(
            request.headers.get("Accept")
        ) != "html":
            return response

        if not response.is_json:
            logger.debug(f"Passing through non-JSON response for {request.path}")
            return response

        options = resolve_options(self.defaults, self._route_settings())
        table = build_table(response.get_json(), options)
        document, content_type = self.renderer.render_html(table, options)

        response.set_data(document)
        response.content_type = content_type
        logger.info(f"Rendered {request.path} as HTML table ({len(table) - 1} rows)")
        return response

    def _route_settings(self) -> Optional[dict[str, Any]]:
        if request.endpoint is None:
            return None
        view: Optional[Callable] = current_app.view_functions.get(request.endpoint)
        return get_route_settings(view)

    def _restore_redirect_suffix(
        self, response: Response, state: NegotiationState
    ) -> None:
        location = response.headers.get("Location")
        if not location:
            return

        rewritten = restore_suffix(location, state.route_path)
        if rewritten != location:
            logger.debug(f"Redirect location {location} rewritten to {rewritten}")
            response.headers["Location"] = rewritten


def restore_suffix(location: str, route_path: str) -> str:
    """Append ``.html`` where a redirect target points back at ``route_path``.

    The Location path is suffixed when it equals the route path. Query
    values are suffixed when they are the route path, literally or
    percent-encoded (as ``url_for`` produces for a ``next`` parameter),
    optionally followed by their own query or fragment. Paths that merely
    contain the route path, such as ``/admin/cars`` for ``/cars`` or
    ``/successful`` for ``/success``, are left alone. The root path is never
    rewritten.

    Args:
        location: Value of the Location header
        route_path: Path the request was dispatched to

    Returns:
        The rewritten location
    """
    if route_path == "/":
        return location

    parts = urlsplit(location)
    path = parts.path
    if path == route_path:
        path += HTML_SUFFIX

    query = parts.query
    if query:
        query = "&".join(_restore_query_param(param, route_path) for param in query.split("&"))

    if path == parts.path and query == parts.query:
        return location
    return urlunsplit(parts._replace(path=path, query=query))


def _restore_query_param(param: str, route_path: str) -> str:
    key, sep, value = param.partition("=")
    if not sep:
        return param

    for candidate in dict.fromkeys((route_path, quote(route_path, safe=""))):
        if not value.startswith(candidate):
            continue
        rest = value[len(candidate):]
        if rest == "" or rest[0] in "?#" or rest[:3].upper() in ("%3F", "%23"):
            return f"{key}={candidate}{HTML_SUFFIX}{rest}"
    return param
