"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler, called as handler(request, *captures)
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Middleware reference as written at registration time: a middleware
# callable, a middleware class, a (factory, *args) tuple, or an alias name
MiddlewareRef: TypeAlias = Callable[..., Any] | type | tuple[Any, ...] | str
