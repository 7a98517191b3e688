"""Access-control middleware: ``auth`` and ``guest`` route modes.

Whether the caller is logged in is an opaque predicate supplied by the
application (session lookup, token check, anything). Perch never stores
credentials itself.

Usage::

    from perch.middleware.auth import AuthConfig, AuthMiddleware

    config = AuthConfig(is_authenticated=lambda request: session_has_user())
    dispatcher = Dispatcher(table, auth=config)

    table.group(guest_routes, middleware=[(AuthMiddleware, "guest")])
    table.group(member_routes, middleware=[(AuthMiddleware, "auth")])

``auth`` mode redirects anonymous callers to ``login_url``; ``guest`` mode
redirects logged-in callers to ``home_url`` (e.g. away from ``/login``).
"""

from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Literal, TypeAlias

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Redirect
from perch.middleware.protocol import ChainDecision
from perch.security.audit import emit_security_event

AuthMode: TypeAlias = Literal["auth", "guest"]

_MODES: frozenset[str] = frozenset({"auth", "guest"})


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Authentication middleware configuration.

    Attributes:
        is_authenticated: Predicate telling whether the request comes from
            a logged-in caller.
        login_url: Where ``auth`` mode sends anonymous callers.
        home_url: Where ``guest`` mode sends logged-in callers.
    """

    is_authenticated: Callable[[Request], bool]
    login_url: str = "/login"
    home_url: str = "/dashboard"


auth_config_var: ContextVar[AuthConfig | None] = ContextVar("perch_auth_config", default=None)
"""The ``AuthConfig`` of the dispatcher handling the current request."""


def _active_config() -> AuthConfig:
    config = auth_config_var.get()
    if config is None:
        msg = (
            "AuthMiddleware has no AuthConfig. Pass one explicitly or give the "
            "Dispatcher one (App.authenticate_with)."
        )
        raise ConfigurationError(msg)
    return config


class AuthMiddleware:
    """Redirect callers whose login state doesn't fit the route.

    Route-level usage passes the mode as a constructor argument, so the
    dispatcher builds a fresh instance per request::

        table.get("/dashboard", dashboard, middleware=[(AuthMiddleware, "auth")])
    """

    __slots__ = ("_config", "mode")

    def __init__(self, mode: AuthMode = "auth", config: AuthConfig | None = None) -> None:
        if mode not in _MODES:
            msg = f"Unknown AuthMiddleware mode {mode!r}; expected 'auth' or 'guest'."
            raise ConfigurationError(msg)
        self.mode = mode
        self._config = config

    @property
    def config(self) -> AuthConfig:
        return self._config or _active_config()

    def __call__(self, request: Request) -> ChainDecision:
        config = self.config
        logged_in = bool(config.is_authenticated(request))

        if self.mode == "auth" and not logged_in:
            emit_security_event("auth.required.redirect", request=request)
            return Redirect(config.login_url)

        if self.mode == "guest" and logged_in:
            emit_security_event("auth.guest_only.redirect", request=request)
            return Redirect(config.home_url)

        return None
