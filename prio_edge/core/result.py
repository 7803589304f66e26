"""
Result type for the request pipelines.

Validation and forwarding steps return ``Success(value)`` or
``Failure(error)`` instead of raising, so routers can format every outcome in
one place:

    result = await proxy.handle(request)
    match result:
        case Success(payload):
            ...
        case Failure(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Represents a successful operation result."""

    value: T


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    """Represents a failed operation result."""

    error: E


Result = Union[Success[T], Failure[E]]


def success(value: T) -> Success[T]:
    return Success(value)


def failure(error: E) -> Failure[E]:
    return Failure(error)


__all__ = ["Failure", "Result", "Success", "failure", "success"]
