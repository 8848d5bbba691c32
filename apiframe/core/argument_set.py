"""Argument Set Construction — turns a raw untyped mapping into a validated ArgumentSet.

Invariants:
    - Raw input that is not a mapping is an Err(ApiRuntimeError) (fail fast)
    - Keys not declared by the argument set are ignored
    - First failure wins; no partially built ArgumentSet is ever returned
    - All validations for one argument run before its failure is reported
    - Error paths list enclosing arguments outermost first, ending with the failing one
    - Explicit None values are stored as absent (validations skipped, required still enforced)

Design Decisions:
    - Every step returns Ok | Err; recursion into nested argument sets returns the
      nested Err unchanged so its path is never rewritten
    - Hook exceptions are captured at the call site (capture()) and classified:
      ParseError → parse_error issue, anything else → generic runtime error
"""

from collections.abc import Mapping
from typing import Any

from apiframe.core.arguments import ArgumentDefinition, ArgumentSetDefinition
from apiframe.core.enums import EnumDefinition
from apiframe.core.errors import (
    ApiRuntimeError, ArgumentIssue, InvalidArgumentError, MissingArgumentError, ParseError,
)
from apiframe.core.result import Err, Ok, Result, capture
from apiframe.core.scalars import ScalarDefinition


class ArgumentSet:
    """A validated, read-only set of argument values."""

    def __init__(
        self,
        definition: ArgumentSetDefinition,
        values: dict[str, Any],
        path: tuple[ArgumentDefinition, ...] = (),
    ):
        self._definition = definition
        self._values = dict(values)
        self._path = tuple(path)

    @property
    def definition(self) -> ArgumentSetDefinition:
        return self._definition

    @property
    def path(self) -> tuple[ArgumentDefinition, ...]:
        return self._path

    def __getitem__(self, name: str) -> Any:
        """Value for ``name``; None for unknown or absent arguments."""
        return self._values.get(name)

    def get(self, name: str, default: Any = None) -> Any:
        value = self._values.get(name)
        return default if value is None else value

    def __contains__(self, name: object) -> bool:
        return self._values.get(name) is not None

    def keys(self):
        return self._values.keys()

    def dig(self, *keys: Any) -> Any:
        """Walk nested argument sets (and list indexes); None if any step is missing."""
        current: Any = self
        for key in keys:
            if current is None:
                return None
            if isinstance(current, ArgumentSet):
                current = current[key]
            elif isinstance(current, list) and isinstance(key, int):
                current = current[key] if -len(current) <= key < len(current) else None
            else:
                return None
        return current

    def to_dict(self) -> dict[str, Any]:
        return {name: _plain(value) for name, value in self._values.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArgumentSet):
            return NotImplemented
        return self._definition is other._definition and self._values == other._values

    def __repr__(self) -> str:
        return f"ArgumentSet({self._definition.id!r}, {self._values!r})"


def _plain(value: Any) -> Any:
    if isinstance(value, ArgumentSet):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def build_argument_set(
    definition: ArgumentSetDefinition,
    raw: Any,
    path: tuple[ArgumentDefinition, ...] = (),
) -> Result[ArgumentSet]:
    """Parse and validate ``raw`` against ``definition``."""
    if not isinstance(raw, Mapping):
        return Err(ApiRuntimeError(
            f"A mapping was expected for the '{definition.id}' argument set "
            f"(got {type(raw).__name__})",
        ))

    values: dict[str, Any] = {}
    for key, raw_value in raw.items():
        argument = definition.arguments.get(key)
        if argument is None:
            continue
        result = _resolve_argument(argument, raw_value, path + (argument,))
        if isinstance(result, Err):
            return result
        values[argument.name] = result.value

    for argument in definition.arguments.values():
        if argument.required and values.get(argument.name) is None:
            return Err(MissingArgumentError(argument, path=path + (argument,)))

    return Ok(ArgumentSet(definition, values, path))


def _resolve_argument(
    argument: ArgumentDefinition, raw_value: Any, path: tuple,
) -> Result[Any]:
    if raw_value is None:
        return Ok(None)

    if argument.array and isinstance(raw_value, list):
        items = []
        for index, item in enumerate(raw_value):
            result = _resolve_value(argument, item, path, index)
            if isinstance(result, Err):
                return result
            items.append(result.value)
        value: Any = items
    else:
        result = _resolve_value(argument, raw_value, path, None)
        if isinstance(result, Err):
            return result
        value = result.value

    checked = capture(argument.validate_value, value)
    if isinstance(checked, Err):
        return checked
    if checked.value:
        return Err(InvalidArgumentError(
            argument, ArgumentIssue.VALIDATION_ERRORS, errors=checked.value, path=path,
        ))
    return Ok(value)


def _resolve_value(
    argument: ArgumentDefinition, raw: Any, path: tuple, index: int | None,
) -> Result[Any]:
    kind = argument.type

    if isinstance(kind, ScalarDefinition):
        parsed = capture(kind.parse_value, raw)
        if isinstance(parsed, Err):
            if isinstance(parsed.error, ParseError):
                return Err(InvalidArgumentError(
                    argument, ArgumentIssue.PARSE_ERROR,
                    errors=[parsed.error.message], index=index, path=path,
                ))
            return parsed
        valid = capture(kind.valid, parsed.value)
        if isinstance(valid, Err):
            return valid
        if not valid.value:
            return Err(InvalidArgumentError(
                argument, ArgumentIssue.INVALID_SCALAR, index=index, path=path,
            ))
        return parsed

    if isinstance(kind, ArgumentSetDefinition):
        return build_argument_set(kind, raw, path)

    if isinstance(kind, EnumDefinition):
        if not kind.is_valid(raw):
            return Err(InvalidArgumentError(
                argument, ArgumentIssue.INVALID_ENUM_VALUE, index=index, path=path,
            ))
        return Ok(raw)

    return Err(ApiRuntimeError(f"Argument '{argument.name}' does not have a valid type"))
