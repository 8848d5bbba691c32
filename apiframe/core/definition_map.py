"""Definition Map — read-only name → definition mapping with a one-time assembly window.

Invariants:
    - Entries can only be attached before freeze(); afterwards the map is read-only
    - Names are unique within one map

Design Decisions:
    - Builders create the owning definition first and fill the map afterwards, so
      object and argument-set graphs may reference themselves
"""

from collections.abc import Iterator, Mapping
from typing import Any

from apiframe.core.errors import DefinitionError


class DefinitionMap(Mapping):
    """Ordered mapping used by definitions for their child entries."""

    def __init__(self, entries: Mapping[str, Any] | None = None):
        self._entries: dict[str, Any] = {}
        self._frozen = False
        if entries is not None:
            for name, value in entries.items():
                self.attach(name, value)
            self.freeze()

    def attach(self, name: str, value: Any) -> None:
        if self._frozen:
            raise DefinitionError(f"Cannot add '{name}': definition is frozen")
        if name in self._entries:
            raise DefinitionError(f"'{name}' is already defined")
        self._entries[name] = value

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._entries)!r})"
