"""Outbound values: ``Response`` and ``Redirect``.

Both are frozen. ``Response`` is adjusted through ``with_*`` methods that
return copies, so a halting middleware and a handler can share a base
response without affecting each other::

    Response("Saved").with_status(201).with_header("X-Id", "7")
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

HTML = "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """Status, body, content type, and extra headers."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = HTML
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def json(cls, data: Any, status: int = 200) -> Response:
        """Serialize *data* as JSON (non-ASCII text kept verbatim)."""
        return cls(json.dumps(data, ensure_ascii=False), status, "application/json")

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header; existing headers of that name stay."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        return replace(self, headers=self.headers + tuple(headers.items()))

    def header(self, name: str) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """Send the client to *url* (302 unless told otherwise)."""

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()

    def to_response(self) -> Response:
        """Empty-bodied response with ``Location`` ahead of any extra headers."""
        return Response(status=self.status, headers=(("Location", self.url), *self.headers))
