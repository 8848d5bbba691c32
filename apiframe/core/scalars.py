"""Scalars — named leaf types with parse/validate/cast hooks, plus the built-in set.

Invariants:
    - parse_value(None) is None; without a parse hook the raw value passes through
    - valid() is True when no validator is set
    - cast_value() validates before casting (InvalidScalarValueError on failure)
    - Parse hooks signal bad input by raising ParseError, never a generic fault

Design Decisions:
    - Hooks are plain callables on a frozen dataclass: one definition per scalar,
      shared by every argument and field that references it
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable

from apiframe.core.errors import InvalidScalarValueError, ParseError


@dataclass(frozen=True, eq=False)
class ScalarDefinition:
    """A reusable leaf type."""

    id: str
    name: str | None = None
    description: str | None = None
    cast: Callable[[Any], Any] | None = None
    parse: Callable[[Any], Any] | None = None
    validator: Callable[[Any], bool] | None = None
    schema: bool = True

    def valid(self, value: Any) -> bool:
        if self.validator is None:
            return True
        return bool(self.validator(value))

    def parse_value(self, raw: Any) -> Any:
        if self.parse is None or raw is None:
            return raw
        return self.parse(raw)

    def cast_value(self, value: Any) -> Any:
        if not self.valid(value):
            raise InvalidScalarValueError(self, value)
        if self.cast is None:
            return value
        return self.cast(value)

    def collate_objects(self, objects) -> None:
        """Scalars reference nothing."""

    def validate(self, errors) -> None:
        if not self.id:
            errors.add(self, "MissingID", "An ID must be defined for scalars")
        for hook in ("cast", "parse", "validator"):
            value = getattr(self, hook)
            if value is not None and not callable(value):
                errors.add(
                    self, f"Invalid{hook.capitalize()}",
                    f"The {hook} hook for scalars must be callable",
                )


# ─── Built-in parse hooks ───────────────────────────────────────

def _parse_integer(raw: Any) -> Any:
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            raise ParseError(f"'{raw}' is not an integer") from None
    return raw


def _parse_float(raw: Any) -> Any:
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            raise ParseError(f"'{raw}' is not a number") from None
    return raw


_TRUE_STRINGS = frozenset({"true", "yes", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "0"})


def _parse_boolean(raw: Any) -> Any:
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ParseError(f"'{raw}' is not a boolean")
    return raw


def _parse_date(raw: Any) -> Any:
    if isinstance(raw, str):
        try:
            return date.fromisoformat(raw.strip())
        except ValueError:
            raise ParseError(f"'{raw}' is not a date in YYYY-MM-DD format") from None
    return raw


def _parse_unix_time(raw: Any) -> Any:
    if isinstance(raw, str):
        raw = _parse_float(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ParseError(f"'{raw}' is not a valid timestamp") from None
    return raw


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ─── Built-in scalars ───────────────────────────────────────────

STRING = ScalarDefinition(
    id="string", name="String", description="A string of characters",
    validator=lambda v: isinstance(v, str), cast=str,
)

INTEGER = ScalarDefinition(
    id="integer", name="Integer", description="A whole number",
    parse=_parse_integer, validator=_is_integer, cast=int,
)

FLOAT = ScalarDefinition(
    id="float", name="Float", description="A decimal number",
    parse=_parse_float, validator=_is_number, cast=float,
)

BOOLEAN = ScalarDefinition(
    id="boolean", name="Boolean", description="True or false",
    parse=_parse_boolean, validator=lambda v: isinstance(v, bool), cast=bool,
)

DATE = ScalarDefinition(
    id="date", name="Date", description="A date in YYYY-MM-DD format",
    parse=_parse_date, validator=lambda v: isinstance(v, date),
    cast=lambda v: v.strftime("%Y-%m-%d"),
)

UNIX_TIME = ScalarDefinition(
    id="unix_time", name="Unix Time", description="Seconds since the Unix epoch",
    parse=_parse_unix_time, validator=lambda v: isinstance(v, datetime),
    cast=lambda v: int(v.timestamp()),
)

BUILTIN_SCALARS: dict[str, ScalarDefinition] = {
    scalar.id: scalar
    for scalar in (STRING, INTEGER, FLOAT, BOOLEAN, DATE, UNIX_TIME)
}
