"""WSGI translation: environ to Request, Response to start_response.

The only component that touches raw WSGI directly.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeAlias

from perch.errors import HTTPError
from perch.http.forms import FormData, parse_form_data
from perch.http.request import Request
from perch.http.response import Response

StartResponse: TypeAlias = Callable[..., Any]

_REASONS: dict[int, str] = {
    200: "OK",
    201: "Created",
    204: "No Content",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Content Too Large",
    422: "Unprocessable Content",
    500: "Internal Server Error",
}


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def read_body(environ: dict[str, Any], max_content_length: int) -> bytes:
    """Read the request body from ``wsgi.input``.

    Raises ``HTTPError(413)`` if the declared length exceeds the limit.
    """
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return b""
    if length > max_content_length:
        raise HTTPError(status=413, detail=f"Request body exceeds {max_content_length} bytes")
    stream = environ.get("wsgi.input")
    if stream is None:
        return b""
    return stream.read(length)


def request_from_environ(
    environ: dict[str, Any],
    *,
    max_content_length: int = 16 * 1024 * 1024,
) -> Request:
    """Build a Request from a WSGI environ, parsing any form body."""
    content_type = environ.get("CONTENT_TYPE") or ""
    body = read_body(environ, max_content_length)
    form = parse_form_data(body, content_type) if body else FormData()
    return Request.from_sources(environ, body=form, path=environ_path(environ))


def environ_path(environ: dict[str, Any]) -> str:
    """The path to route on: ``PATH_INFO``, relative to ``SCRIPT_NAME``."""
    return environ.get("PATH_INFO") or "/"


def send_response(response: Response, start_response: StartResponse) -> Iterable[bytes]:
    """Translate a perch Response into a WSGI ``start_response`` call + body."""
    body = response.body_bytes if _body_allowed(response.status) else b""

    headers: list[tuple[str, str]] = []
    if _body_allowed(response.status):
        headers.append(("Content-Type", response.content_type))
    headers.extend(response.headers)
    headers.append(("Content-Length", str(len(body))))

    reason = _REASONS.get(response.status, "Unknown")
    start_response(f"{response.status} {reason}", headers)
    return [body]
