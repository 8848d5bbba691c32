"""Error Hierarchy — typed failures raised by hooks and captured by the pipeline.

Invariants:
    - Every error has a code (str), description (str), http_status (int) and detail (dict)
    - to_response() always produces {"error": {"code", "description", "detail"}}
    - Foreign exceptions are wrapped, never re-raised past the pipeline boundary

Design Decisions:
    - Single hierarchy rooted at ApiRuntimeError: the executor maps one base type
      to one response envelope (ADR: uniform error shape)
    - from_exception() keeps the raising class name so generic bodies still say
      which fault happened
"""

import traceback
from enum import Enum
from typing import Any


def qualified_class_name(cls: type) -> str:
    """Dotted identity of a class, e.g. 'apiframe.core.errors.ApiRuntimeError'."""
    return f"{cls.__module__}.{cls.__qualname__}"


class ArgumentIssue(str, Enum):
    """Sub-kinds of InvalidArgumentError."""
    PARSE_ERROR = "parse_error"
    INVALID_SCALAR = "invalid_scalar"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    VALIDATION_ERRORS = "validation_errors"


class ApiRuntimeError(Exception):
    """Base exception for all apiframe errors, and the generic runtime fault."""

    code = "generic_runtime_error"
    http_status = 500

    def __init__(self, message: str = "", *, source: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.source = source

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ApiRuntimeError":
        """Return exc itself if it is already typed, otherwise wrap it."""
        if isinstance(exc, ApiRuntimeError):
            return exc
        return cls(str(exc), source=exc)

    @property
    def description(self) -> str:
        return self.message

    @property
    def source_class(self) -> type:
        return type(self.source) if self.source is not None else type(self)

    def detail(self) -> dict[str, Any]:
        return {"class": qualified_class_name(self.source_class)}

    def backtrace(self) -> list[str]:
        exc = self.source if self.source is not None else self
        return [
            line.rstrip("\n")
            for line in traceback.format_exception(type(exc), exc, exc.__traceback__)
        ]

    def to_response(self, include_backtrace: bool = False) -> dict:
        """Convert to the standard error body."""
        detail = self.detail()
        if include_backtrace:
            detail["backtrace"] = self.backtrace()
        return {
            "error": {
                "code": self.code,
                "description": self.description,
                "detail": detail,
            }
        }


class DefinitionError(ApiRuntimeError):
    """Misuse of a builder or registry while assembling definitions."""
    code = "definition_error"


class ParseError(ApiRuntimeError):
    """Raised by a scalar parse hook when raw input cannot be understood."""
    code = "parse_error"


# ─── Output Serialization ───────────────────────────────────────

class InvalidScalarValueError(ApiRuntimeError):
    """A value handed to a scalar for output failed its validator."""
    code = "invalid_scalar_value"

    def __init__(self, scalar: Any, value: Any):
        super().__init__(f"Value {value!r} is not valid for scalar '{scalar.id}'")
        self.scalar = scalar
        self.value = value

    def detail(self) -> dict[str, Any]:
        return {**super().detail(), "scalar": self.scalar.id}


class InvalidEnumValueError(ApiRuntimeError):
    """A value handed to an enum for output is not one of its values."""
    code = "invalid_enum_value"

    def __init__(self, enum: Any, value: Any):
        super().__init__(f"Value {value!r} is not a valid value for enum '{enum.id}'")
        self.enum = enum
        self.value = value

    def detail(self) -> dict[str, Any]:
        return {**super().detail(), "enum": self.enum.id}


class NullFieldValueError(ApiRuntimeError):
    """A non-nullable field resolved to None."""
    code = "null_field_value"

    def __init__(self, field: Any):
        super().__init__(f"Value for field '{field.name}' is null but the field is not nullable")
        self.field = field

    def detail(self) -> dict[str, Any]:
        return {**super().detail(), "field": self.field.name}


class InvalidArrayValueError(ApiRuntimeError):
    """An array field resolved to something other than a list or tuple."""
    code = "invalid_array_value"

    def __init__(self, field: Any, value: Any):
        super().__init__(
            f"Value for field '{field.name}' must be a list but was {type(value).__name__}",
        )
        self.field = field
        self.value = value

    def detail(self) -> dict[str, Any]:
        return {**super().detail(), "field": self.field.name}


# ─── Argument Errors (400-level) ────────────────────────────────

def _argument_summary(argument: Any) -> dict[str, Any]:
    return {"name": argument.name, "description": argument.description}


def _path_names(path: tuple) -> list[str]:
    return [argument.name for argument in path]


class MissingArgumentError(ApiRuntimeError):
    """A required argument is absent after parsing."""
    code = "missing_required_argument"
    http_status = 400

    def __init__(self, argument: Any, path: tuple = ()):
        super().__init__(f"The '{argument.name}' argument is required but is missing")
        self.argument = argument
        self.path = tuple(path)

    def detail(self) -> dict[str, Any]:
        names = _path_names(self.path)
        return {
            "argument": _argument_summary(self.argument),
            "path": names,
            "path_string": ".".join(names),
        }


_ISSUE_DESCRIPTIONS = {
    ArgumentIssue.PARSE_ERROR: "The value for the '{name}' argument could not be parsed",
    ArgumentIssue.INVALID_SCALAR: "The value for the '{name}' argument is not valid",
    ArgumentIssue.INVALID_ENUM_VALUE: (
        "The value for the '{name}' argument is not one of the allowed values"
    ),
    ArgumentIssue.VALIDATION_ERRORS: "The value for the '{name}' argument failed validation",
}


class InvalidArgumentError(ApiRuntimeError):
    """An argument value failed parsing, type checks or validations."""
    code = "invalid_argument"
    http_status = 400

    def __init__(
        self,
        argument: Any,
        issue: ArgumentIssue,
        errors: list[str] | None = None,
        index: int | None = None,
        path: tuple = (),
    ):
        super().__init__(_ISSUE_DESCRIPTIONS[issue].format(name=argument.name))
        self.argument = argument
        self.issue = issue
        self.errors = list(errors or [])
        self.index = index
        self.path = tuple(path)

    def detail(self) -> dict[str, Any]:
        names = _path_names(self.path)
        return {
            "argument": _argument_summary(self.argument),
            "issue": self.issue.value,
            "errors": self.errors,
            "index": self.index,
            "path": names,
            "path_string": ".".join(names),
        }


# ─── User-declared Errors ───────────────────────────────────────

class ErrorException(ApiRuntimeError):
    """Raised by actions/authenticators to emit a declared Error.

    The body is rendered from the Error definition: its code, description,
    status, and a detail payload generated by its field set from ``fields``.
    """

    def __init__(self, error: Any, fields: Any = None):
        super().__init__(error.code or error.id)
        self.error = error
        self.fields = fields if fields is not None else {}

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def http_status(self) -> int:
        return self.error.http_status or 500

    @property
    def description(self) -> str:
        return self.error.description

    def detail(self) -> dict[str, Any]:
        return self.error.fields.generate_hash(self.fields)


# ─── Transport Errors ───────────────────────────────────────────

class InvalidRequestBodyError(ApiRuntimeError):
    """The request body claimed to be JSON but could not be decoded."""
    code = "invalid_json_body"
    http_status = 400

    def __init__(self, message: str = "The request body could not be decoded as JSON"):
        super().__init__(message)

    def detail(self) -> dict[str, Any]:
        return {}
