"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request) -> Response | Redirect | None

Built-in middleware:
    AuthMiddleware -- ``auth`` / ``guest`` route modes with redirects
"""

from perch.middleware.auth import AuthConfig, AuthMiddleware, auth_config_var
from perch.middleware.protocol import ChainDecision, Middleware

__all__ = [
    "AuthConfig",
    "AuthMiddleware",
    "ChainDecision",
    "Middleware",
    "auth_config_var",
]
