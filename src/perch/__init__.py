"""Perch: a minimal web request dispatcher.

Maps an HTTP request (method + path) to a registered handler, running the
route's access-control middleware first, with path parameters and
named-route URL generation.

Basic usage::

    from perch import App

    app = App()

    @app.get("/users/{id}", name="user.show")
    def show_user(request, id):
        return f"User {id}"

    app.url_for("user.show", id=7)  # "/users/7"

``app`` is a WSGI application; serve it with any WSGI server.
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Dispatcher",
    "Forbidden",
    "HTTPError",
    "HandlerResolutionError",
    "InvalidMiddlewareError",
    "Middleware",
    "NotFound",
    "PerchError",
    "Redirect",
    "Request",
    "Response",
    "RouteNotFoundError",
    "RouteTable",
    "current_route",
    "get_request",
]

# Public name -> defining module, imported on first access
_EXPORTS: dict[str, str] = {
    "App": "perch.app",
    "AppConfig": "perch.config",
    "Dispatcher": "perch.routing.dispatcher",
    "Middleware": "perch.middleware.protocol",
    "Redirect": "perch.http.response",
    "Request": "perch.http.request",
    "Response": "perch.http.response",
    "RouteTable": "perch.routing.table",
    "current_route": "perch.context",
    "get_request": "perch.context",
    **dict.fromkeys(
        (
            "ConfigurationError",
            "Forbidden",
            "HTTPError",
            "HandlerResolutionError",
            "InvalidMiddlewareError",
            "NotFound",
            "PerchError",
            "RouteNotFoundError",
        ),
        "perch.errors",
    ),
}


def __getattr__(name: str) -> object:
    """Resolve public names lazily so ``import perch`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_name), name)
