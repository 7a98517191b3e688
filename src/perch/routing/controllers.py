"""Controller registry: resolves ``BoundHandler`` references.

A bound handler names a controller (by class or by registered name) and a
method. The registry turns that into a callable at dispatch time::

    controllers = ControllerRegistry()
    controllers.register(UserController)                  # name "UserController"
    controllers.register(lambda: AdminController(db), name="Admin")

    controllers.resolve(BoundHandler("Admin", "index"))   # bound method

Controller classes referenced directly (``(UserController, "show")``) do
not need registering: they are instantiated with no arguments, once per
dispatch.
"""

import inspect
from collections.abc import Callable
from typing import Any

from perch.errors import HandlerResolutionError
from perch.routing.route import BoundHandler


class ControllerRegistry:
    """Name/class -> controller factory lookup.

    Factories are called once per resolution, so controllers are
    per-request objects unless an instance is registered with
    ``register_instance``.
    """

    __slots__ = ("_factories",)

    def __init__(self) -> None:
        self._factories: dict[type | str, Callable[[], Any]] = {}

    def register(
        self,
        factory: Callable[[], Any],
        *,
        name: str | None = None,
    ) -> None:
        """Register a controller class or zero-argument factory.

        Classes are registered under both the class object and its name;
        factories need an explicit *name*.
        """
        if inspect.isclass(factory):
            self._factories[factory] = factory
            self._factories[name or factory.__name__] = factory
            return
        if name is None:
            msg = "Controller factories need an explicit name."
            raise TypeError(msg)
        self._factories[name] = factory

    def register_instance(self, instance: Any, *, name: str | None = None) -> None:
        """Register a shared controller instance (reused on every dispatch)."""
        cls = type(instance)
        self._factories[cls] = lambda: instance
        self._factories[name or cls.__name__] = lambda: instance

    def __contains__(self, target: object) -> bool:
        return target in self._factories

    def instantiate(self, target: type | str) -> Any:
        """Return a controller instance for *target*.

        Raises ``HandlerResolutionError`` if *target* is an unregistered
        name, or an unregistered class that can't be built without
        arguments.
        """
        factory = self._factories.get(target)
        if factory is not None:
            return factory()
        if not inspect.isclass(target):
            raise HandlerResolutionError(f"Controller {target!r} not found")
        try:
            return target()
        except TypeError as exc:
            msg = f"Could not construct controller {target.__qualname__}: {exc}"
            raise HandlerResolutionError(msg) from exc

    def resolve(self, ref: BoundHandler) -> Callable[..., Any]:
        """Return the bound controller method for *ref*.

        Raises ``HandlerResolutionError`` if the controller or the method
        does not exist.
        """
        controller = self.instantiate(ref.target)
        method = getattr(controller, ref.method, None)
        if method is None or not callable(method):
            name = type(controller).__name__
            raise HandlerResolutionError(f"Method {ref.method} not found in controller {name}")
        return method
