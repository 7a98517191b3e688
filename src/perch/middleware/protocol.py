"""Middleware protocol and chain decision type.

A middleware is any callable matching::

    def my_mw(request: Request) -> ChainDecision: ...

No base class required. The dispatcher checks the shape, not the lineage.

Returning ``None`` lets the chain continue. Returning a ``Response`` or
``Redirect`` halts the dispatch: later middleware and the handler do not
run, and the returned value becomes the outcome. A middleware may also
raise an ``HTTPError`` (``Forbidden``, ``NotFound``) to abort.
"""

from typing import Protocol, TypeAlias

from perch.http.request import Request
from perch.http.response import Redirect, Response

# What a middleware hands back to the dispatcher
ChainDecision: TypeAlias = Response | Redirect | None


class Middleware(Protocol):
    """Protocol for perch middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def json_only(request: Request) -> ChainDecision:
            if request.header("accept") != "application/json":
                return Response("Not Acceptable", status=406)
            return None

        # Class middleware (configured per route as (RequireRole, "admin"))
        class RequireRole:
            def __init__(self, role: str) -> None:
                self.role = role

            def __call__(self, request: Request) -> ChainDecision:
                ...
    """

    def __call__(self, request: Request) -> ChainDecision: ...
