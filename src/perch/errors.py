"""Perch exception hierarchy.

Shared across the route table, dispatcher, middleware, and hosting layer
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when routes, middleware, or the app are set up incorrectly.

    Typically surfaces at registration time or on the first dispatch.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware, or handlers. The hosting layer
    catches these and renders the matching error page.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing to serve at the requested location."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403: the caller may not access this route."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class RouteNotFoundError(NotFound):
    """No route matched the request, or no route carries the requested name.

    Raised by ``Dispatcher.dispatch`` on a (method, path) miss and by
    ``RouteTable.url_for`` for an unknown route name.
    """


class HandlerResolutionError(HTTPError):
    """500: a controller or controller method named by a route is missing."""

    def __init__(self, detail: str) -> None:
        super().__init__(status=500, detail=detail)


class InvalidMiddlewareError(ConfigurationError):
    """A middleware reference did not resolve to a usable middleware.

    Also raised when a middleware returns something other than ``None``
    or a response.
    """
