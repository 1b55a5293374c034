"""Result type for explicit error handling in core operations.

Every operation the core exposes returns either ``Ok`` carrying the success
payload or ``Err`` carrying a typed failure. Expected outcomes such as a
missing object, a blocked claim or an ambiguous pattern travel through these
values; raised exceptions are left for storage faults.

Example usage:
    >>> result = get_object(repository, "T-write-docs")
    >>> if is_ok(result):
    ...     print(result.value.title)
    ... else:
    ...     print(result.error.message)
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Outcome of an operation that went through, e.g. the saved object."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Outcome of an operation that was refused.

    ``error`` is a ``TrellisFailure`` everywhere in the core services.
    """

    error: E


# Union: a subscripted generic alias cannot be built with | at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def is_ok(result: Ok[T] | Err[E]) -> bool:
    return isinstance(result, Ok)


def is_err(result: Ok[T] | Err[E]) -> bool:
    return isinstance(result, Err)


def flat_map(result: Ok[T] | Err[E], fn: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
    """Feed an Ok value into the next check, passing an Err straight through.

    Validation steps are chained with this so the first refusal wins:

        >>> flat_map(validate_parent_exists(parent, repository), check_parent_type)
    """
    if isinstance(result, Ok):
        return fn(result.value)
    return result
