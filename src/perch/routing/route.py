"""Route, handler reference, and dispatch record dataclasses."""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from perch._internal.types import MiddlewareRef
from perch.errors import ConfigurationError
from perch.routing.pattern import Matcher, compile_pattern


@dataclass(frozen=True, slots=True)
class DirectHandler:
    """A plain callable invoked as ``func(request, *captures)``."""

    func: Callable[..., Any]

    @property
    def label(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True, slots=True)
class BoundHandler:
    """A controller method resolved lazily at dispatch time.

    ``target`` is either a controller class or the name a controller was
    registered under in a ``ControllerRegistry``.
    """

    target: type | str
    method: str

    @property
    def label(self) -> str:
        name = self.target if isinstance(self.target, str) else self.target.__name__
        return f"{name}@{self.method}"


HandlerRef: TypeAlias = DirectHandler | BoundHandler


def to_handler_ref(handler: Any) -> HandlerRef:
    """Coerce a registration-time handler into a ``HandlerRef``.

    Accepted forms::

        show_user                       -> DirectHandler(show_user)
        (UserController, "show")        -> BoundHandler(UserController, "show")
        "UserController@show"           -> BoundHandler("UserController", "show")

    Raises ``ConfigurationError`` for anything else.
    """
    match handler:
        case DirectHandler() | BoundHandler():
            return handler
        case str():
            controller, sep, method = handler.partition("@")
            if not sep or not controller or not method:
                msg = f"Invalid controller action format: {handler!r} (expected 'Controller@method')"
                raise ConfigurationError(msg)
            return BoundHandler(controller, method)
        case (target, str() as method) if isinstance(target, (type, str)):
            return BoundHandler(target, method)
        case _ if callable(handler) and not inspect.isclass(handler):
            return DirectHandler(handler)
    msg = f"Invalid route action: {handler!r}"
    raise ConfigurationError(msg)


def normalize_path(path: str) -> str:
    """Normalize a template so it always begins with ``/``.

    ``""``, ``"/"`` and ``"/."`` all become ``"/"``; surrounding slashes
    are dropped (``"users/"`` -> ``"/users"``).
    """
    normalized = "/" + path.strip("/")
    if normalized == "/.":
        return "/"
    return normalized


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route. Frozen once added to a table."""

    method: str
    path: str
    handler: HandlerRef
    middleware: tuple[MiddlewareRef, ...] = ()
    name: str | None = None

    @property
    def matcher(self) -> Matcher:
        """The compiled matcher for this route's template (cached)."""
        return compile_pattern(self.path)


@dataclass(frozen=True, slots=True)
class Dispatch:
    """Outcome of one ``Dispatcher.dispatch`` call.

    ``result`` is the handler's return value, or the response a middleware
    halted the chain with (``halted=True``).
    """

    route: Route
    params: dict[str, str]
    result: Any = None
    halted: bool = False
