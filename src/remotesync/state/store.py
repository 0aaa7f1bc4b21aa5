"""In-memory props store.

This is the only component allowed to write merged values; the
reconciler commits and evicts through it.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from remotesync.state.merge import Value


class PropsStore:
    """Merged value per path.

    A path is present iff its last merge was non-empty. Committed values
    are deep-copied so that data sources never share nested objects with
    the store.
    """

    def __init__(self) -> None:
        self._props: dict[str, Value] = {}
        self._view: Mapping[str, Value] = MappingProxyType(self._props)

    def get(self, path: str) -> Value | None:
        return self._props.get(path)

    def commit(self, path: str, value: Mapping[str, Any]) -> None:
        self._props[path] = copy.deepcopy(dict(value))

    def evict(self, path: str) -> bool:
        """Drop *path*; returns whether an entry existed."""
        return self._props.pop(path, None) is not None

    @property
    def view(self) -> Mapping[str, Value]:
        """Read-only live view of the props."""
        return self._view

    def as_dict(self) -> dict[str, Value]:
        return copy.deepcopy(self._props)

    def __contains__(self, path: object) -> bool:
        return path in self._props

    def __iter__(self) -> Iterator[str]:
        return iter(self._props)

    def __len__(self) -> int:
        return len(self._props)
