"""Collation — deduplicating walk over every definition reachable from a root.

Invariants:
    - Membership is by definition identity, never by equality or id string
    - A definition is marked visited BEFORE its references are collated, so
      self-referencing and mutually-referencing types terminate
    - None and non-definition values (unresolved types) are skipped
    - Iteration order is discovery order
"""

from collections.abc import Iterator
from typing import Any


class ObjectSet:
    """Ordered identity set filled via each definition's collate_objects()."""

    def __init__(self):
        self._objects: dict[int, Any] = {}

    def add(self, definition: Any) -> None:
        if definition is None or not hasattr(definition, "collate_objects"):
            return
        key = id(definition)
        if key in self._objects:
            return
        self._objects[key] = definition
        definition.collate_objects(self)

    def __contains__(self, definition: object) -> bool:
        return self._objects.get(id(definition)) is definition

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._objects.values()))

    def __len__(self) -> int:
        return len(self._objects)


def collate_objects(root: Any) -> ObjectSet:
    """Every definition reachable from ``root``, including root itself."""
    objects = ObjectSet()
    objects.add(root)
    return objects
