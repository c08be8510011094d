"""
Unit tests for request routing.
"""

import pytest

from fixturehttpd.config import ServerConfig
from fixturehttpd.handlers.files import FileLoader
from fixturehttpd.http.request import ParsedRequest, RequestParser
from fixturehttpd.http.router import Route, RouteKind, Router
from fixturehttpd.http.status_codes import HTTPStatus


def make_request(path: str, method: str = "get", range_value: str = None) -> ParsedRequest:
    headers = {"range": range_value} if range_value is not None else {}
    return ParsedRequest(method=method, path=path, headers=headers)


@pytest.fixture
def router(serve_dir) -> Router:
    return Router(FileLoader(serve_dir))


class TestRouteTable:
    """Tests for path resolution."""

    def test_default_redirects(self, router: Router):
        assert router.resolve("/redirect") == Route(RouteKind.REDIRECT, "/redirect", "/test_file")
        assert router.resolve("/infinite_redirect").location == "/infinite_redirect"
        assert router.resolve("/relative/redirect").location == "../test_file"

    def test_everything_else_is_file(self, router: Router):
        route = router.resolve("/test_file")

        assert route.kind is RouteKind.FILE
        assert route.location is None

    def test_exact_match_only(self, router: Router):
        assert router.resolve("/redirect/").kind is RouteKind.FILE
        assert router.resolve("/redirectx").kind is RouteKind.FILE

    def test_add_redirect(self, router: Router):
        router.add_redirect(RouteKind.REDIRECT, "/old", "/new")

        assert router.resolve("/old").location == "/new"
        assert router.resolve("/redirect").location == "/test_file"

    def test_cannot_register_file_route(self, router: Router):
        with pytest.raises(ValueError):
            router.add_redirect(RouteKind.FILE, "/x", "/y")

    def test_from_config(self, serve_dir):
        config = ServerConfig(
            root_dir=str(serve_dir),
            redirect_path="/go",
            redirect_target="/data.bin",
        )
        router = Router.from_config(config)

        assert router.resolve("/go").location == "/data.bin"
        assert router.resolve("/redirect").kind is RouteKind.FILE


class TestDispatchRedirects:
    """Tests for redirect fixtures."""

    def test_redirect(self, router: Router):
        response = router.dispatch(make_request("/redirect"))

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.body == b""
        assert response.extra_header == "Location: /test_file"

    def test_infinite_redirect_points_to_itself(self, router: Router):
        for _ in range(3):
            response = router.dispatch(make_request("/infinite_redirect"))
            assert response.status == 301
            assert response.extra_header == "Location: /infinite_redirect"

    def test_relative_redirect(self, router: Router):
        response = router.dispatch(make_request("/relative/redirect"))
        assert response.extra_header == "Location: ../test_file"

    def test_post_redirect(self, router: Router):
        assert router.dispatch(make_request("/redirect", method="post")).status == 301


class TestDispatchFiles:
    """Tests for file responses."""

    def test_whole_file(self, router: Router, serve_dir):
        response = router.dispatch(make_request("/test_file"))

        assert response.status == HTTPStatus.OK
        assert response.body == (serve_dir / "test_file").read_bytes()
        assert response.extra_header is None

    def test_range(self, router: Router, serve_dir):
        response = router.dispatch(make_request("/data.bin", range_value="bytes=100-199"))

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.body == (serve_dir / "data.bin").read_bytes()[100:200]
        assert response.content_length == 100

    def test_range_from_parsed_head(self, router: Router, sample_get_request: bytes):
        response = router.dispatch(RequestParser().feed(sample_get_request).request)
        assert response.status == 206

    def test_empty_file(self, router: Router):
        response = router.dispatch(make_request("/empty"))

        assert response.status == 200
        assert response.body == b""

    def test_gzip_encoding(self, router: Router):
        response = router.dispatch(make_request("/test_file.gz"))

        assert response.status == 200
        assert response.extra_header == "Content-Encoding: gzip"

    def test_gzip_encoding_on_partial(self, router: Router):
        response = router.dispatch(make_request("/test_file.gz", range_value="bytes=0-3"))

        assert response.status == 206
        assert response.body == b"\x1f\x8b\x08\x00"
        assert response.extra_header == "Content-Encoding: gzip"

    def test_missing_file(self, router: Router):
        response = router.dispatch(make_request("/no_such_file"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    def test_outside_root_is_not_found(self, router: Router):
        assert router.dispatch(make_request("/../../etc/passwd")).status == 404

    def test_directory_is_unavailable(self, router: Router):
        assert router.dispatch(make_request("/relative")).status == HTTPStatus.SERVICE_UNAVAILABLE

    def test_too_large_is_unavailable(self, serve_dir):
        router = Router(FileLoader(serve_dir, max_file_size=10))
        assert router.dispatch(make_request("/data.bin")).status == 503

    def test_unparseable_range(self, router: Router):
        response = router.dispatch(make_request("/data.bin", range_value="bytes=100-"))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b""

    def test_unsatisfiable_range(self, router: Router):
        response = router.dispatch(make_request("/data.bin", range_value="bytes=0-5000"))

        assert response.status == HTTPStatus.RANGE_NOT_SATISFIABLE
        assert response.body == b""
        assert response.extra_header == "Content-Range: bytes */1000"

    def test_missing_file_wins_over_bad_range(self, router: Router):
        response = router.dispatch(make_request("/nope", range_value="garbage"))
        assert response.status == 404

    def test_relative_path_through_fixture_dir(self, router: Router):
        """"/relative/../test_file" works because relative/ exists."""
        assert router.dispatch(make_request("/relative/../test_file")).status == 200

    def test_relative_path_without_fixture_dir(self, tmp_path):
        (tmp_path / "test_file").write_bytes(b"x")
        router = Router(FileLoader(tmp_path))

        assert router.dispatch(make_request("/relative/../test_file")).status == 404

    def test_idempotent(self, router: Router):
        first = router.dispatch(make_request("/data.bin", range_value="bytes=10-19"))
        second = router.dispatch(make_request("/data.bin", range_value="bytes=10-19"))

        assert first.head_bytes() == second.head_bytes()
        assert first.body == second.body


class TestUnsupportedMethods:
    """Methods other than GET and POST get no response at all."""

    @pytest.mark.parametrize("method", ["head", "put", "delete", "options", "connect"])
    def test_no_response(self, router: Router, method):
        assert router.dispatch(make_request("/test_file", method=method)) is None
