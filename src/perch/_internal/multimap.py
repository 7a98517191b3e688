"""Multi-valued string mappings shared by query, form and header access.

``MultiValueMapping`` is the structural interface; ``MultiDict`` is the
immutable ``name -> [values]`` store behind ``QueryParams`` and
``FormData``.
"""

from collections.abc import Iterator, Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """Read-only mapping whose keys may carry several values.

    Indexing yields the first value; ``get_list`` yields all of them.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...


class MultiDict(Mapping[str, str]):
    """Immutable ``name -> [values]`` mapping.

    Subclasses add their own constructors and slots; the stored lists are
    never exposed directly.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_data", data or {})

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{key!r}: {values!r}" for key, values in self._data.items())
        return f"{type(self).__name__}({{{pairs}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """First value stored under *key*, else *default*."""
        values = self._data.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Copy of every value stored under *key* (empty if absent)."""
        return list(self._data.get(key, ()))


def to_multi(source: Mapping[str, object] | None) -> dict[str, list[str]]:
    """Normalize a plain mapping into ``name -> list of values``.

    Scalars become one-element lists, lists and tuples become lists of
    strings. ``None`` values and empty sequences are dropped.
    """
    if source is None:
        return {}
    if isinstance(source, MultiValueMapping):
        return {key: source.get_list(key) for key in source}
    result: dict[str, list[str]] = {}
    for key, value in source.items():
        if value is None:
            continue
        values = [str(v) for v in value] if isinstance(value, (list, tuple)) else [str(value)]
        if values:
            result[key] = values
    return result
