"""Tests for perch.errors and perch.server.errors."""

import logging

import pytest

from perch.errors import (
    ConfigurationError,
    Forbidden,
    HandlerResolutionError,
    HTTPError,
    InvalidMiddlewareError,
    NotFound,
    PerchError,
    RouteNotFoundError,
)
from perch.http.request import Request
from perch.http.response import Response
from perch.server.errors import (
    call_error_handler,
    default_error_page,
    handle_http_error,
    handle_internal_error,
)


def _request() -> Request:
    return Request(method="GET", path="/broken")


class TestHierarchy:
    def test_http_error_str(self) -> None:
        assert str(HTTPError(status=418, detail="teapot")) == "418: teapot"
        assert str(HTTPError(status=418)) == "418"

    def test_not_found(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert exc.detail == "Not Found"
        assert isinstance(exc, PerchError)

    def test_forbidden(self) -> None:
        assert Forbidden().status == 403

    def test_route_not_found_is_404(self) -> None:
        exc = RouteNotFoundError("No route matches GET '/x'")
        assert isinstance(exc, NotFound)
        assert exc.status == 404
        assert exc.detail == "No route matches GET '/x'"

    def test_handler_resolution_is_500(self) -> None:
        exc = HandlerResolutionError("Controller 'X' not found")
        assert isinstance(exc, HTTPError)
        assert exc.status == 500

    def test_invalid_middleware_is_configuration_error(self) -> None:
        assert issubclass(InvalidMiddlewareError, ConfigurationError)
        assert issubclass(ConfigurationError, PerchError)

    def test_raisable(self) -> None:
        with pytest.raises(NotFound):
            raise RouteNotFoundError("gone")


class TestDefaultPage:
    def test_known_status(self) -> None:
        assert default_error_page(404) == "<h1>404 Not Found</h1>"

    def test_unknown_status(self) -> None:
        assert default_error_page(418) == "<h1>418 Error</h1>"

    def test_detail_escaped(self) -> None:
        page = default_error_page(500, "<script>")
        assert "&lt;script&gt;" in page
        assert "<script>" not in page


class TestCallErrorHandler:
    def test_zero_args(self) -> None:
        assert call_error_handler(lambda: "gone", _request(), NotFound()).text == "gone"

    def test_request_arg(self) -> None:
        response = call_error_handler(lambda request: request.path, _request(), NotFound())
        assert response.text == "/broken"

    def test_request_and_exc(self) -> None:
        response = call_error_handler(
            lambda request, exc: exc.detail, _request(), NotFound("missing")
        )
        assert response.text == "missing"


class TestHandleHttpError:
    def test_default_page_hides_detail(self) -> None:
        response = handle_http_error(RouteNotFoundError("No route"), _request(), {}, debug=False)
        assert response.status == 404
        assert response.text == "<h1>404 Not Found</h1>"

    def test_debug_shows_detail(self) -> None:
        response = handle_http_error(RouteNotFoundError("No route"), _request(), {}, debug=True)
        assert "No route" in response.text

    def test_exception_headers_copied(self) -> None:
        exc = HTTPError(status=401, headers=(("WWW-Authenticate", "Bearer"),))
        response = handle_http_error(exc, _request(), {}, debug=False)
        assert response.header("WWW-Authenticate") == "Bearer"

    def test_status_handler(self) -> None:
        response = handle_http_error(NotFound(), _request(), {404: lambda: "custom"}, debug=False)
        assert response.status == 404
        assert response.text == "custom"

    def test_type_handler_beats_status_handler(self) -> None:
        handlers = {
            404: lambda: "status",
            RouteNotFoundError: lambda: "type",
        }
        response = handle_http_error(RouteNotFoundError("x"), _request(), handlers, debug=False)
        assert response.text == "type"

    def test_handler_status_kept(self) -> None:
        handlers = {404: lambda: Response("moved", status=410)}
        response = handle_http_error(NotFound(), _request(), handlers, debug=False)
        assert response.status == 410


class TestHandleInternalError:
    def test_logs_and_hides_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="perch.server"):
            response = handle_internal_error(
                RuntimeError("secret"), _request(), {}, debug=False
            )
        assert response.status == 500
        assert "secret" not in response.text
        assert "500 GET /broken" in caplog.text

    def test_debug_traceback(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            response = handle_internal_error(exc, _request(), {}, debug=True)
        assert response.status == 500
        assert "RuntimeError: boom" in response.text

    def test_handler_by_type(self) -> None:
        handlers = {KeyError: lambda request, exc: "key missing"}
        response = handle_internal_error(KeyError("k"), _request(), handlers, debug=False)
        assert response.status == 500
        assert response.text == "key missing"

    def test_handler_by_500(self) -> None:
        handlers = {500: lambda: "oops"}
        response = handle_internal_error(ValueError(), _request(), handlers, debug=False)
        assert response.text == "oops"
