"""WSGI middleware mapping ``.html`` requests onto their JSON routes.

The rewrite has to happen before Flask matches the URL, so it runs at the
WSGI layer rather than in a ``before_request`` hook.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"
HTML_ACCEPT = "text/html"

# WSGI environ key holding the NegotiationState of the current request
NEGOTIATION_ENVIRON_KEY = "transform_table.negotiation"


@dataclass(frozen=True)
class NegotiationState:
    """Record of a request that arrived with a ``.html`` suffix.

    Attributes:
        original_path: Path as received, including the suffix
        route_path: Path dispatched to the route, suffix removed
    """

    original_path: str
    route_path: str


def get_negotiation_state(environ: dict[str, Any]) -> Optional[NegotiationState]:
    """Return the NegotiationState recorded for a request, if any."""
    return environ.get(NEGOTIATION_ENVIRON_KEY)


def rewrite_environ(environ: dict[str, Any]) -> Optional[NegotiationState]:
    """Strip a ``.html`` suffix from the request path in place.

    The query string is left exactly as received. The Accept header is
    forced to ``text/html`` and a NegotiationState is stored in the environ.

    Args:
        environ: WSGI environ of the current request

    Returns:
        The recorded NegotiationState, or None if the path has no suffix
    """
    path = environ.get("PATH_INFO", "")
    if not path.endswith(HTML_SUFFIX):
        return None

    route_path = path[: -len(HTML_SUFFIX)] or "/"
    environ["PATH_INFO"] = route_path

    for key in ("REQUEST_URI", "RAW_URI"):
        if key in environ:
            environ[key] = _strip_uri_suffix(environ[key])

    environ["HTTP_ACCEPT"] = HTML_ACCEPT

    state = NegotiationState(original_path=path, route_path=route_path)
    environ[NEGOTIATION_ENVIRON_KEY] = state
    logger.debug(f"Rewrote {path} to {route_path}")
    return state


def _strip_uri_suffix(uri: str) -> str:
    raw_path, sep, raw_query = uri.partition("?")
    if raw_path.endswith(HTML_SUFFIX):
        raw_path = raw_path[: -len(HTML_SUFFIX)] or "/"
    return f"{raw_path}{sep}{raw_query}"


class PathRewriter:
    """Wrap a WSGI application so ``P.html`` is served by the route ``P``."""

    def __init__(self, wsgi_app: Callable[..., Iterable[bytes]]):
        self.wsgi_app = wsgi_app

    def __call__(
        self, environ: dict[str, Any], start_response: Callable
    ) -> Iterable[bytes]:
        rewrite_environ(environ)
        return self.wsgi_app(environ, start_response)
