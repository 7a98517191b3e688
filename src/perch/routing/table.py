"""Route table: ordered registration, grouping, and reverse lookup.

Routes are registered during setup and scanned in registration order at
dispatch time: the first route whose method and template match wins, so
the order of ``add`` calls is the only priority rule.

Usage::

    table = RouteTable()
    table.get("/users/new", new_user)
    table.get("/users/{id}", show_user, name="user.show")

    def admin(t: RouteTable) -> None:
        t.get("/admin", dashboard)

    table.group(admin, middleware=[require_login])

    table.url_for("user.show", id=7)  # "/users/7"
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from typing import Any

from perch._internal.types import MiddlewareRef
from perch.errors import ConfigurationError, RouteNotFoundError
from perch.routing.route import Route, normalize_path, to_handler_ref

# Methods registered by ``any()``
ANY_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")


class RouteTable:
    """Ordered route registry with a name index.

    Mutable during setup, read-only once ``freeze()`` is called. There is
    no locking: all registration must finish before concurrent dispatch
    begins.
    """

    __slots__ = ("_frozen", "_named", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._named: dict[str, Route] = {}
        self._frozen = False

    # -- Registration --

    def add(
        self,
        method: str,
        path: str,
        handler: Any,
        *,
        middleware: Iterable[MiddlewareRef] = (),
        name: str | None = None,
    ) -> Route:
        """Append a route. A name replaces any earlier route with that name."""
        self._check_not_frozen()
        route = Route(
            method=method.upper(),
            path=normalize_path(path),
            handler=to_handler_ref(handler),
            middleware=tuple(middleware),
            name=name,
        )
        self._routes.append(route)
        if name:
            self._named[name] = route
        return route

    def get(self, path: str, handler: Any, **options: Any) -> Route:
        """Register a GET route."""
        return self.add("GET", path, handler, **options)

    def post(self, path: str, handler: Any, **options: Any) -> Route:
        """Register a POST route."""
        return self.add("POST", path, handler, **options)

    def put(self, path: str, handler: Any, **options: Any) -> Route:
        """Register a PUT route."""
        return self.add("PUT", path, handler, **options)

    def delete(self, path: str, handler: Any, **options: Any) -> Route:
        """Register a DELETE route."""
        return self.add("DELETE", path, handler, **options)

    def any(self, path: str, handler: Any, **options: Any) -> list[Route]:
        """Register the same handler for GET, POST, PUT, and DELETE."""
        return [self.add(method, path, handler, **options) for method in ANY_METHODS]

    def group(
        self,
        block: Callable[[RouteTable], Any],
        *,
        middleware: Iterable[MiddlewareRef] = (),
    ) -> None:
        """Run *block* and append *middleware* to every route it added.

        Group middleware runs after the route's own middleware. Nested
        groups compose innermost first: a route in an inner group ends up
        with ``route + inner + outer``.

        If *block* raises, the routes and names it registered are removed
        before the exception propagates.
        """
        group_middleware = tuple(middleware)
        start = len(self._routes)
        named = dict(self._named)
        try:
            block(self)
        except Exception:
            del self._routes[start:]
            self._named.clear()
            self._named.update(named)
            raise
        if not group_middleware:
            return

        for index in range(start, len(self._routes)):
            old = self._routes[index]
            new = replace(old, middleware=old.middleware + group_middleware)
            self._routes[index] = new
            # Only repoint the name if a later route hasn't claimed it
            if old.name and self._named.get(old.name) is old:
                self._named[old.name] = new

    # -- Lookup --

    def named(self, name: str) -> Route:
        """Return the route registered under *name*.

        Raises ``RouteNotFoundError`` if no route carries that name.
        """
        try:
            return self._named[name]
        except KeyError:
            raise RouteNotFoundError(f"Named route [{name}] not found") from None

    def url_for(self, name: str, /, **params: Any) -> str:
        """Build a concrete path for the route named *name*.

        Every ``{key}`` is replaced with ``str(params[key])``. Placeholders
        without a value are left as-is; extra params are ignored.
        """
        url = self.named(name).path
        for key, value in params.items():
            url = url.replace("{" + key + "}", str(value))
        return url

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration order."""
        return tuple(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(tuple(self._routes))

    def __len__(self) -> int:
        return len(self._routes)

    # -- Lifecycle --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Stop accepting registrations. Idempotent."""
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot register routes after the route table is frozen."
            raise ConfigurationError(msg)
