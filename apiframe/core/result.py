"""Phase Results — Ok | Err values returned by every pipeline phase.

Invariants:
    - Err always carries an ApiRuntimeError (foreign exceptions are wrapped)
    - capture() is the only place hook exceptions are turned into values

Design Decisions:
    - Return values over stack unwinding: the executor branches on isinstance(result, Err)
      and keeps the error path identical to the success path (ADR: uniform phase shape)
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from apiframe.core.errors import ApiRuntimeError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ApiRuntimeError


Result = Union[Ok[T], Err]


def capture(fn: Callable[..., T], *args: Any) -> "Result[T]":
    """Call a user hook, turning any exception into an Err."""
    try:
        return Ok(fn(*args))
    except Exception as exc:
        return Err(ApiRuntimeError.from_exception(exc))
