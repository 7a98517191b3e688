"""Dispatcher: resolve one request to one handler invocation.

Per call::

    SCANNING            first route (registration order) whose method and
                        template both match
    MIDDLEWARE_RUNNING  route middleware in order; any may halt the chain
    HANDLER_RUNNING     handler(request, *captures)
    DONE

Every failure propagates to the caller; nothing is retried.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from perch._internal.types import MiddlewareRef
from perch.context import request_var, route_var
from perch.errors import InvalidMiddlewareError, RouteNotFoundError
from perch.http.request import Request
from perch.http.response import Redirect, Response
from perch.middleware.auth import AuthConfig, auth_config_var
from perch.routing.controllers import ControllerRegistry
from perch.routing.route import BoundHandler, Dispatch, Route
from perch.routing.table import RouteTable

logger = logging.getLogger("perch.routing")


class Dispatcher:
    """Matches requests against a ``RouteTable`` and runs the winner.

    Usage::

        dispatcher = Dispatcher(table)
        outcome = dispatcher.dispatch(request)
        outcome.route, outcome.params, outcome.result

    The table is frozen on the first dispatch; register everything first.
    *auth* is the ``AuthConfig`` that ``AuthMiddleware`` built without one
    falls back to, bound only while this dispatcher runs a request.
    """

    __slots__ = ("_aliases", "auth", "controllers", "table")

    def __init__(
        self,
        table: RouteTable,
        *,
        controllers: ControllerRegistry | None = None,
        auth: AuthConfig | None = None,
    ) -> None:
        self.table = table
        self.controllers = controllers or ControllerRegistry()
        self.auth = auth
        self._aliases: dict[str, MiddlewareRef] = {}

    # -- Configuration --

    def alias_middleware(self, name: str, ref: MiddlewareRef) -> None:
        """Let routes refer to middleware *ref* by the string *name*."""
        if isinstance(ref, str):
            msg = f"Middleware alias {name!r} cannot point at another alias ({ref!r})."
            raise InvalidMiddlewareError(msg)
        self._aliases[name] = ref

    # -- Dispatch --

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str], tuple[str, ...]]:
        """Find the first route matching *method* and *path*.

        Returns ``(route, params, captures)``. Trailing slashes on *path*
        are ignored. Raises ``RouteNotFoundError`` on a miss.
        """
        path = path.rstrip("/") or "/"
        for route in self.table:
            if route.method != method:
                continue
            captures = route.matcher.match_args(path)
            if captures is None:
                continue
            params = dict(zip(route.matcher.param_names, captures, strict=True))
            return route, params, captures
        raise RouteNotFoundError(f"No route matches {method} {path!r}")

    def dispatch(self, request: Request) -> Dispatch:
        """Run the full pipeline for *request*.

        Raises:
            RouteNotFoundError: No route matches the method and path.
            InvalidMiddlewareError: A middleware reference is unusable.
            HandlerResolutionError: A controller or method is missing.
        """
        self.table.freeze()

        route, params, captures = self.match(request.method, request.path)
        logger.debug(
            "%s %s -> %s %s", request.method, request.path, route.method, route.path
        )

        request_token = request_var.set(request)
        auth_token = auth_config_var.set(self.auth)
        try:
            return self._run(route, params, captures, request)
        finally:
            auth_config_var.reset(auth_token)
            request_var.reset(request_token)

    def _run(
        self,
        route: Route,
        params: dict[str, str],
        captures: tuple[str, ...],
        request: Request,
    ) -> Dispatch:
        for ref in route.middleware:
            middleware = self.resolve_middleware(ref)
            decision = middleware(request)
            if decision is None:
                continue
            if isinstance(decision, (Response, Redirect)):
                logger.info(
                    "%s %s halted by %s", request.method, request.path, _label(middleware)
                )
                return Dispatch(route=route, params=params, result=decision, halted=True)
            msg = (
                f"Middleware {_label(middleware)} returned {type(decision).__name__}; "
                "expected None, Response, or Redirect."
            )
            raise InvalidMiddlewareError(msg)

        handler = self.resolve_handler(route)

        route_token = route_var.set(route)
        try:
            result = handler(request, *captures)
        finally:
            route_var.reset(route_token)

        return Dispatch(route=route, params=params, result=result)

    # -- Resolution --

    def resolve_handler(self, route: Route) -> Callable[..., Any]:
        """Turn the route's handler reference into a callable."""
        ref = route.handler
        if isinstance(ref, BoundHandler):
            return self.controllers.resolve(ref)
        return ref.func

    def resolve_middleware(self, ref: MiddlewareRef) -> Callable[[Request], Any]:
        """Turn a middleware reference into a callable.

        - ``"name"``            -> the alias registered under that name
        - ``MiddlewareClass``   -> ``MiddlewareClass()``
        - ``(factory, *args)``  -> ``factory(*args)``
        - anything callable     -> used as-is

        Raises ``InvalidMiddlewareError`` if the result is not callable or
        the reference can't be built.
        """
        if isinstance(ref, str):
            try:
                ref = self._aliases[ref]
            except KeyError:
                raise InvalidMiddlewareError(f"Unknown middleware alias {ref!r}") from None

        if isinstance(ref, tuple):
            if not ref or not callable(ref[0]):
                raise InvalidMiddlewareError(f"Invalid middleware reference {ref!r}")
            factory, args = ref[0], ref[1:]
            middleware = _build(factory, args)
        elif inspect.isclass(ref):
            middleware = _build(ref, ())
        else:
            middleware = ref

        if not callable(middleware):
            msg = f"Middleware {_label(middleware)} is not callable with a request."
            raise InvalidMiddlewareError(msg)
        return middleware


def _build(factory: Callable[..., Any], args: tuple[Any, ...]) -> Any:
    try:
        return factory(*args)
    except TypeError as exc:
        msg = f"Could not construct middleware {_label(factory)}: {exc}"
        raise InvalidMiddlewareError(msg) from exc


def _label(obj: Any) -> str:
    if inspect.isclass(obj):
        return obj.__qualname__
    name = getattr(obj, "__qualname__", None)
    if name is not None:
        return name
    return type(obj).__qualname__
