"""Query string parameters (``?page=2&tag=a&tag=b``)."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import parse_qs

from perch._internal.multimap import MultiDict, to_multi


class QueryParams(MultiDict):
    """Immutable query parameters; ``params["tag"]`` is the first value."""

    __slots__ = ()

    @classmethod
    def parse(cls, query_string: str | bytes) -> QueryParams:
        """Parse a raw query string. Blank values are kept as ``""``."""
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        return cls(parse_qs(query_string, keep_blank_values=True))

    @classmethod
    def from_mapping(cls, source: Mapping[str, object] | None) -> QueryParams:
        """Wrap an already-parsed mapping of scalars or lists."""
        return cls(to_multi(source))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """The value as an ``int``; *default* when absent or not a number."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default
