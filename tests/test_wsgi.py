"""Tests for perch.server.wsgi: environ parsing and response sending."""

import io

import pytest

from perch.errors import HTTPError
from perch.http.response import Redirect, Response
from perch.server.wsgi import read_body, request_from_environ, send_response


class StartResponseRecorder:
    def __init__(self) -> None:
        self.status: str | None = None
        self.headers: list[tuple[str, str]] = []

    def __call__(self, status: str, headers: list[tuple[str, str]]) -> None:
        self.status = status
        self.headers = headers


def _environ(body: bytes = b"", content_type: str = "", **extra: str) -> dict:
    environ = {
        "REQUEST_METHOD": "POST",
        "PATH_INFO": "/submit",
        "QUERY_STRING": "",
        "CONTENT_TYPE": content_type,
        "CONTENT_LENGTH": str(len(body)) if body else "",
        "wsgi.input": io.BytesIO(body),
    }
    environ.update(extra)
    return environ


class TestReadBody:
    def test_reads_declared_length(self) -> None:
        assert read_body(_environ(b"abc"), max_content_length=10) == b"abc"

    def test_no_length(self) -> None:
        assert read_body(_environ(), max_content_length=10) == b""

    def test_bad_length(self) -> None:
        environ = _environ(b"abc")
        environ["CONTENT_LENGTH"] = "lots"
        assert read_body(environ, max_content_length=10) == b""

    def test_too_large(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            read_body(_environ(b"x" * 11), max_content_length=10)
        assert exc_info.value.status == 413


class TestRequestFromEnviron:
    def test_form_body(self) -> None:
        request = request_from_environ(
            _environ(b"name=Ada", "application/x-www-form-urlencoded")
        )
        assert request.method == "POST"
        assert request.path == "/submit"
        assert request.input("name") == "Ada"

    def test_override(self) -> None:
        request = request_from_environ(
            _environ(b"_method=PUT", "application/x-www-form-urlencoded")
        )
        assert request.method == "PUT"

    def test_mounted_under_script_name(self) -> None:
        environ = _environ(
            SCRIPT_NAME="/api",
            PATH_INFO="/users/7",
            REQUEST_URI="/api/users/7?x=1",
            QUERY_STRING="x=1",
        )
        request = request_from_environ(environ)
        assert request.path == "/users/7"
        assert request.query["x"] == "1"

    def test_decoded_path_info_wins(self) -> None:
        environ = _environ(PATH_INFO="/users/john doe", REQUEST_URI="/users/john%20doe")
        assert request_from_environ(environ).path == "/users/john doe"

    def test_empty_path_info_is_root(self) -> None:
        environ = _environ(SCRIPT_NAME="/api", PATH_INFO="", REQUEST_URI="/api")
        assert request_from_environ(environ).path == "/"


class TestSendResponse:
    def test_html(self) -> None:
        recorder = StartResponseRecorder()
        body = send_response(Response("hi"), recorder)
        assert recorder.status == "200 OK"
        assert ("Content-Type", "text/html; charset=utf-8") in recorder.headers
        assert ("Content-Length", "2") in recorder.headers
        assert list(body) == [b"hi"]

    def test_no_content(self) -> None:
        recorder = StartResponseRecorder()
        body = send_response(Response("ignored", status=204), recorder)
        assert recorder.status == "204 No Content"
        assert all(name != "Content-Type" for name, _ in recorder.headers)
        assert list(body) == [b""]

    def test_redirect_headers(self) -> None:
        recorder = StartResponseRecorder()
        send_response(Redirect("/login").to_response(), recorder)
        assert recorder.status == "302 Found"
        assert ("Location", "/login") in recorder.headers

    def test_unknown_status(self) -> None:
        recorder = StartResponseRecorder()
        send_response(Response(status=599), recorder)
        assert recorder.status == "599 Unknown"
