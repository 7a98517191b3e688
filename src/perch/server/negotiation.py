"""Content negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from perch.errors import ConfigurationError
from perch.http.response import Redirect, Response


def negotiate(value: Any) -> Response:
    """Convert a handler's (or halting middleware's) return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``Redirect``            -> 3xx with Location header
    3. ``None``                -> 204, empty body
    4. ``str``                 -> 200, text/html
    5. ``bytes``               -> 200, application/octet-stream
    6. ``dict`` / ``list``     -> 200, application/json
    7. ``(value, int)``        -> negotiate value, override status
    8. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return value.to_response()
        case None:
            return Response(body="", status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
    msg = (
        f"Handler returned {type(value).__name__!r}, which perch cannot turn into "
        "a response. Return a Response, Redirect, str, bytes, dict, list, or None."
    )
    raise ConfigurationError(msg)
