"""Perch application class.

Mutable during setup (route registration, middleware aliases, error
handlers). Frozen when the first request is handled.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from perch._internal.types import ErrorHandler, Handler, MiddlewareRef
from perch.config import AppConfig
from perch.errors import ConfigurationError, HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.auth import AuthConfig
from perch.routing.controllers import ControllerRegistry
from perch.routing.dispatcher import Dispatcher
from perch.routing.route import Dispatch
from perch.routing.table import RouteTable
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.negotiation import negotiate
from perch.server.wsgi import (
    StartResponse,
    environ_path,
    request_from_environ,
    send_response,
)

logger = logging.getLogger("perch.server")


class App:
    """The perch application: a WSGI callable around a ``Dispatcher``.

    Usage::

        app = App()

        @app.get("/users/{id}", name="user.show")
        def show_user(request, id):
            return f"user {id}"

        app.post("/users", (UserController, "store"))

        def members(routes):
            routes.get("/dashboard", dashboard, name="dashboard")

        app.group(members, middleware=[(AuthMiddleware, "auth")])

    Route registration reuses the ``RouteTable`` API. ``app.get(path)``
    without a handler returns a decorator.
    """

    __slots__ = ("_error_handlers", "config", "controllers", "dispatcher", "routes")

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        routes: RouteTable | None = None,
        controllers: ControllerRegistry | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.routes: RouteTable = routes or RouteTable()
        self.controllers: ControllerRegistry = controllers or ControllerRegistry()
        self.dispatcher = Dispatcher(self.routes, controllers=self.controllers)
        self._error_handlers: dict[int | type, ErrorHandler] = {}

    # -- Route registration --

    def route(
        self,
        method: str,
        path: str,
        handler: Any = None,
        *,
        middleware: Iterable[MiddlewareRef] = (),
        name: str | None = None,
    ) -> Any:
        """Register *handler* for *method* and *path*.

        Without a handler, returns a decorator that registers the
        decorated function and hands it back unchanged.
        """
        if handler is not None:
            return self.routes.add(method, path, handler, middleware=middleware, name=name)

        def decorator(func: Handler) -> Handler:
            self.routes.add(method, path, func, middleware=middleware, name=name)
            return func

        return decorator

    def get(self, path: str, handler: Any = None, **options: Any) -> Any:
        """Register a GET route (or return a decorator)."""
        return self.route("GET", path, handler, **options)

    def post(self, path: str, handler: Any = None, **options: Any) -> Any:
        """Register a POST route (or return a decorator)."""
        return self.route("POST", path, handler, **options)

    def put(self, path: str, handler: Any = None, **options: Any) -> Any:
        """Register a PUT route (or return a decorator)."""
        return self.route("PUT", path, handler, **options)

    def delete(self, path: str, handler: Any = None, **options: Any) -> Any:
        """Register a DELETE route (or return a decorator)."""
        return self.route("DELETE", path, handler, **options)

    def any(self, path: str, handler: Any, **options: Any) -> None:
        """Register *handler* for GET, POST, PUT, and DELETE."""
        self.routes.any(path, handler, **options)

    def group(
        self,
        block: Callable[[RouteTable], Any],
        *,
        middleware: Iterable[MiddlewareRef] = (),
    ) -> None:
        """Register a route group; see ``RouteTable.group``."""
        self.routes.group(block, middleware=middleware)

    def url_for(self, name: str, /, **params: Any) -> str:
        """Build the path of a named route."""
        return self.routes.url_for(name, **params)

    # -- Middleware and access control --

    def alias_middleware(self, name: str, ref: MiddlewareRef) -> None:
        """Let routes refer to middleware *ref* by the string *name*."""
        self.dispatcher.alias_middleware(name, ref)

    def authenticate_with(self, is_authenticated: Callable[[Request], bool]) -> None:
        """Install the login predicate used by this app's ``AuthMiddleware``.

        Redirect targets come from ``config.login_url`` / ``config.home_url``.
        Other ``App`` instances in the process keep their own predicate.
        """
        if self.routes.frozen:
            msg = "Cannot change authentication after the app has started serving."
            raise ConfigurationError(msg)
        self.dispatcher.auth = AuthConfig(
            is_authenticated=is_authenticated,
            login_url=self.config.login_url,
            home_url=self.config.home_url,
        )

    # -- Error handlers --

    def error(self, code_or_exception: int | type) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Handlers may take ``()``, ``(request)`` or ``(request, exc)``::

            @app.error(404)
            def not_found(request):
                return Response("Nothing here", status=404)
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            if self.routes.frozen:
                msg = "Cannot register error handlers after the app has started serving."
                raise ConfigurationError(msg)
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Request handling --

    def dispatch(self, request: Request) -> Dispatch:
        """Dispatch without error translation; exceptions propagate."""
        return self.dispatcher.dispatch(request)

    def handle(self, request: Request) -> Response:
        """Dispatch *request* and always produce a Response."""
        try:
            outcome = self.dispatcher.dispatch(request)
            return negotiate(outcome.result)
        except HTTPError as exc:
            return handle_http_error(exc, request, self._error_handlers, self.config.debug)
        except Exception as exc:
            return handle_internal_error(exc, request, self._error_handlers, self.config.debug)

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Any:
        """WSGI entry point."""
        try:
            request = request_from_environ(
                environ, max_content_length=self.config.max_content_length
            )
        except HTTPError as exc:
            fallback = Request.from_sources(environ, path=environ_path(environ))
            response = handle_http_error(exc, fallback, self._error_handlers, self.config.debug)
        except ValueError as exc:
            logger.info("Malformed request body: %s", exc)
            fallback = Request.from_sources(environ, path=environ_path(environ))
            bad_request = HTTPError(status=400, detail=str(exc))
            response = handle_http_error(
                bad_request, fallback, self._error_handlers, self.config.debug
            )
        else:
            response = self.handle(request)
        return send_response(response, start_response)
