"""Tests for the .html path rewriting middleware."""

from hypothesis import given, settings, strategies as st
from werkzeug.test import Client, EnvironBuilder
from werkzeug.wrappers import Request, Response

from transform_table.middleware import (
    NegotiationState,
    PathRewriter,
    get_negotiation_state,
    rewrite_environ,
)


class TestRewriteEnviron:
    """Unit tests for rewrite_environ."""

    def test_plain_path_untouched(self):
        """Test that paths without the suffix pass through."""
        environ = EnvironBuilder(path="/cars", query_string="a=1").get_environ()
        before = dict(environ)

        assert rewrite_environ(environ) is None
        assert environ == before
        assert get_negotiation_state(environ) is None

    def test_suffix_stripped(self):
        """Test that the suffix is removed and the state recorded."""
        environ = EnvironBuilder(path="/cars.html").get_environ()

        state = rewrite_environ(environ)

        assert state == NegotiationState(original_path="/cars.html", route_path="/cars")
        assert environ["PATH_INFO"] == "/cars"
        assert environ["HTTP_ACCEPT"] == "text/html"
        assert get_negotiation_state(environ) is state

    def test_accept_header_overridden(self):
        """Test that an explicit Accept header is replaced."""
        environ = EnvironBuilder(
            path="/cars.html", headers={"Accept": "application/json"}
        ).get_environ()

        rewrite_environ(environ)

        assert environ["HTTP_ACCEPT"] == "text/html"

    def test_query_string_preserved(self):
        """Test that repeated and ordered parameters survive."""
        environ = EnvironBuilder(
            path="/cars.html", query_string="b=2&a=1&b=3"
        ).get_environ()

        rewrite_environ(environ)

        assert environ["QUERY_STRING"] == "b=2&a=1&b=3"

    def test_request_uri_rewritten(self):
        """Test that raw request URIs lose the suffix too."""
        environ = EnvironBuilder(path="/cars.html", query_string="a=1").get_environ()
        environ["REQUEST_URI"] = "/cars.html?a=1"
        environ["RAW_URI"] = "/cars.html?a=1"

        rewrite_environ(environ)

        assert environ["REQUEST_URI"] == "/cars?a=1"
        assert environ["RAW_URI"] == "/cars?a=1"

    def test_bare_suffix_maps_to_root(self):
        """Test that /.html is served by the root route."""
        environ = EnvironBuilder(path="/.html").get_environ()

        state = rewrite_environ(environ)

        assert environ["PATH_INFO"] == "/"
        assert state.route_path == "/"

    def test_only_trailing_suffix_removed(self):
        """Test that .html elsewhere in the path is kept."""
        environ = EnvironBuilder(path="/docs.html/page.html").get_environ()

        rewrite_environ(environ)

        assert environ["PATH_INFO"] == "/docs.html/page"


def echo_app(environ, start_response):
    """WSGI app echoing the path and query it was dispatched with."""
    request = Request(environ)
    body = f"{request.path}|{request.query_string.decode()}|{request.headers.get('Accept')}"
    return Response(body)(environ, start_response)


class TestPathRewriter:
    """Tests for the PathRewriter WSGI wrapper."""

    def test_wrapped_app_sees_rewritten_request(self):
        """Test that the downstream app receives the JSON route."""
        client = Client(PathRewriter(echo_app))

        response = client.get("/cars.html?color=blue")

        assert response.get_data(as_text=True) == "/cars|color=blue|text/html"

    def test_requests_do_not_share_state(self):
        """Test that a rewritten request leaves the next one alone."""
        client = Client(PathRewriter(echo_app))

        client.get("/cars.html")
        response = client.get("/cars", headers={"Accept": "application/json"})

        assert response.get_data(as_text=True) == "/cars||application/json"

    @settings(max_examples=100)
    @given(
        params=st.lists(
            st.tuples(
                st.text(alphabet="abcxyz", min_size=1, max_size=5),
                st.text(alphabet="0123456789abc", max_size=5),
            ),
            max_size=6,
        )
    )
    def test_property_query_parameters_forwarded(self, params):
        """Property: P.html?k=v dispatches with the same query as P?k=v.

        Feature: transform-table, Property: Query forwarding
        """
        client = Client(PathRewriter(echo_app))

        suffixed = client.get("/path1.html", query_string=params)
        direct = client.get("/path1", query_string=params)

        suffixed_path, suffixed_query, _ = suffixed.get_data(as_text=True).split("|")
        direct_path, direct_query, _ = direct.get_data(as_text=True).split("|")
        assert suffixed_path == direct_path == "/path1"
        assert suffixed_query == direct_query
