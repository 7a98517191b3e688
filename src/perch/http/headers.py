"""Request headers, looked up case-insensitively.

``Headers`` satisfies the ``MultiValueMapping`` protocol: indexing gives the
first value of a header, ``get_list`` every value in arrival order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

# WSGI/CGI keys that carry headers without the HTTP_ prefix
_UNPREFIXED = {"CONTENT_TYPE": "content-type", "CONTENT_LENGTH": "content-length"}


class Headers(Mapping[str, str]):
    """Immutable header collection keyed by lower-cased name."""

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: Iterable[tuple[str, str]] = ()) -> None:
        pairs = tuple((name.lower(), value) for name, value in raw)
        index: dict[str, list[str]] = {}
        for name, value in pairs:
            index.setdefault(name, []).append(value)
        object.__setattr__(self, "_raw", pairs)
        object.__setattr__(self, "_index", index)

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Headers are immutable"
        raise AttributeError(msg)

    @classmethod
    def from_server(cls, server: Mapping[str, object]) -> Headers:
        """Collect headers from WSGI/CGI server metadata.

        ``HTTP_X_REQUESTED_WITH`` becomes ``x-requested-with``; non-string
        entries such as ``wsgi.input`` are skipped, so sparse or unusual
        metadata simply yields fewer headers.
        """
        pairs: list[tuple[str, str]] = []
        for key, value in server.items():
            if not isinstance(value, str):
                continue
            if key.startswith("HTTP_"):
                pairs.append((key.removeprefix("HTTP_").replace("_", "-"), value))
            elif value and key in _UNPREFIXED:
                pairs.append((_UNPREFIXED[key], value))
        return cls(pairs)

    def __getitem__(self, key: str) -> str:
        values = self._index.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({list(self._raw)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._index.get(key.lower())
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in arrival order."""
        return list(self._index.get(key.lower(), ()))
