"""Manifest Errors — aggregate report of definition-time validation problems.

Invariants:
    - Entries are keyed by the offending definition (identity), in insertion order
    - validate_all never raises for invalid definitions; it only reports
"""

from dataclasses import dataclass
from typing import Any

from apiframe.core.collation import collate_objects


@dataclass(frozen=True)
class ManifestError:
    code: str
    message: str


class ManifestErrors:
    """Collected validation problems for a set of definitions."""

    def __init__(self):
        self._errors: dict[int, tuple[Any, list[ManifestError]]] = {}

    def add(self, definition: Any, code: str, message: str) -> None:
        _, entries = self._errors.setdefault(id(definition), (definition, []))
        entries.append(ManifestError(code, message))

    def for_definition(self, definition: Any) -> list[str]:
        """Error codes recorded against ``definition``."""
        _, entries = self._errors.get(id(definition), (None, []))
        return [entry.code for entry in entries]

    def messages_for(self, definition: Any) -> list[str]:
        _, entries = self._errors.get(id(definition), (None, []))
        return [entry.message for entry in entries]

    @property
    def empty(self) -> bool:
        return not self._errors

    def __len__(self) -> int:
        return sum(len(entries) for _, entries in self._errors.values())

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        report: dict[str, list[dict[str, str]]] = {}
        for definition, entries in self._errors.values():
            label = getattr(definition, "id", None) or getattr(definition, "name", None)
            report.setdefault(str(label), []).extend(
                {"code": entry.code, "message": entry.message} for entry in entries
            )
        return report


def validate_all(root: Any) -> ManifestErrors:
    """Validate every definition reachable from ``root``."""
    errors = ManifestErrors()
    for definition in collate_objects(root):
        definition.validate(errors)
    return errors
