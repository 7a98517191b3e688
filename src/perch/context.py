"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The ``Request`` being handled by this thread/task.
- ``route_var``: The ``Route`` the dispatcher selected for it.

``request_var`` is set for the whole dispatch (middleware included);
``route_var`` only while the handler runs. Both are reset afterwards, so
concurrent dispatches never see each other's values.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threaded WSGI servers. No locks needed.
"""

from contextvars import ContextVar

from perch.http.request import Request
from perch.routing.route import Route

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The current request. Set by the dispatcher before middleware runs."""

route_var: ContextVar[Route | None] = ContextVar("perch_route", default=None)
"""The route serving the current request, or ``None`` outside a handler."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return request_var.get()


def current_route() -> Route | None:
    """Return the route serving the current request, if any."""
    return route_var.get()
