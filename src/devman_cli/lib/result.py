"""Result type for enrollment steps.

Every fallible step returns Ok or Err instead of raising. Callers match:

    match await provisioner.provision(request):
        case Err(error):
            ...
        case Ok(credential):
            ...
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Step completed; carries its value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Step failed; carries a typed error from lib.errors."""

    error: E


type Result[T, E] = Ok[T] | Err[E]


def is_ok(result: Result[T, E]) -> bool:
    return isinstance(result, Ok)


def is_err(result: Result[T, E]) -> bool:
    return isinstance(result, Err)


def map_err(result: Result[T, E], f: Callable[[E], U]) -> Result[T, U]:
    """Wrap the error of an Err (e.g. into a stage-level error), pass Ok through."""
    match result:
        case Ok() as o:
            return o
        case Err(error):
            return Err(f(error))


def unwrap(result: Result[T, E]) -> T:
    """Extract the value from Ok, or raise ValueError if Err.

    Use sparingly - prefer pattern matching.
    """
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise ValueError(f"Called unwrap on Err: {error}")


def unwrap_err(result: Result[T, E]) -> E:
    """Extract the error from Err, or raise ValueError if Ok."""
    match result:
        case Ok(value):
            raise ValueError(f"Called unwrap_err on Ok: {value}")
        case Err(error):
            return error
