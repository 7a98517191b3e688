"""Locate the ``App`` named on the command line (``package.module:attr``)."""

import importlib

from perch.app import App

DEFAULT_ATTRIBUTE = "app"


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the perch ``App`` it names.

    ``"myapp"`` is shorthand for ``"myapp:app"``. If the attribute is a
    factory (any callable that is not itself an ``App``), it is called
    with no arguments and must return one.

    Raises:
        ModuleNotFoundError: The module part does not import.
        AttributeError: The module has no such attribute.
        TypeError: The factory failed, or the result is not an ``App``.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or DEFAULT_ATTRIBUTE)

    # An App is itself callable (WSGI), so test for it before treating
    # the target as a factory
    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"App factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target
    msg = f"{import_string!r} is a {type(target).__name__}, not a perch.App instance"
    raise TypeError(msg)
