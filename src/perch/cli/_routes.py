"""``perch routes``: list registered routes.

Resolves an import string to a perch App and prints every route in
registration order (which is also match priority).
"""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.errors import RouteNotFoundError
from perch.routing.route import Route


def _middleware_label(ref: object) -> str:
    if isinstance(ref, str):
        return ref
    if isinstance(ref, tuple) and ref:
        head = getattr(ref[0], "__name__", repr(ref[0]))
        args = ", ".join(repr(a) for a in ref[1:])
        return f"{head}({args})"
    return getattr(ref, "__name__", type(ref).__name__)


def format_routes(routes: list[Route] | tuple[Route, ...]) -> list[str]:
    """Render routes as aligned ``METHOD  PATH  HANDLER  MIDDLEWARE`` lines."""
    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        handler_name = route.handler.label
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        middleware = ", ".join(_middleware_label(ref) for ref in route.middleware)
        rows.append((route.method, route.path, handler_name, middleware))

    max_method = max(max((len(r[0]) for r in rows), default=0), 6)  # "METHOD" header
    max_path = max(max((len(r[1]) for r in rows), default=0), 4)  # "PATH" header
    max_handler = max(max((len(r[2]) for r in rows), default=0), 7)  # "HANDLER" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{:<{max_handler}}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "HANDLER", "MIDDLEWARE").rstrip()]
    lines.append("-" * min(max_method + max_path + max_handler + 16, 80))
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a perch app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.name is not None:
        try:
            routes = (app.routes.named(args.name),)
        except RouteNotFoundError as exc:
            print(f"Error: {exc.detail}", file=sys.stderr)
            raise SystemExit(1) from exc
    else:
        routes = app.routes.routes

    if not routes:
        print("No routes registered.")
        return

    for line in format_routes(routes):
        print(line)
