"""Turning failures into responses.

``HTTPError`` subclasses carry their own status; anything else is an
internal error (500), logged with its traceback on ``perch.server``.
Either way an application handler registered with ``App.error`` gets the
first chance to answer, looked up by exception class (walking the MRO)
and then by status code.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.server")

ErrorHandlers: TypeAlias = Mapping[int | type, Callable[..., Any]]

_TITLES: dict[int, str] = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    413: "Content Too Large",
    500: "Server Error",
}


def default_error_page(status: int, detail: str = "") -> str:
    """``<h1>404 Not Found</h1>``, plus an escaped ``<p>`` when *detail* is set."""
    page = f"<h1>{status} {_TITLES.get(status, 'Error')}</h1>"
    if detail:
        page += f"<p>{html.escape(detail)}</p>"
    return page


def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts."""
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    return negotiate(handler(*args))


def _find_handler(
    error_handlers: ErrorHandlers, exc: Exception, status: int
) -> Callable[..., Any] | None:
    for cls in type(exc).__mro__:
        if cls in error_handlers:
            return error_handlers[cls]
        if cls is HTTPError:
            break
    return error_handlers.get(status)


def _answer(
    handler: Callable[..., Any], request: Request, exc: Exception, status: int
) -> Response:
    response = call_error_handler(handler, request, exc)
    # A plain 200 from an error handler still reports the error status
    return response.with_status(status) if response.status == 200 else response


def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Answer an ``HTTPError``; the detail is shown only in debug mode."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = _find_handler(error_handlers, exc, exc.status)
    if handler is not None:
        return _answer(handler, request, exc, exc.status)

    page = default_error_page(exc.status, exc.detail if debug else "")
    return Response(page, exc.status, headers=exc.headers)


def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Answer an unexpected exception with a 500.

    In debug mode the page shows the escaped traceback.
    """
    logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(error_handlers, exc, 500)
    if handler is not None:
        return _answer(handler, request, exc, 500)

    if debug:
        trace = "".join(traceback.format_exception(exc))
        return Response(f"<h1>Exception</h1><pre>{html.escape(trace)}</pre>", 500)
    return Response(default_error_page(500), 500)
