"""
Explicit outcomes for collaborator calls whose failures are recovered locally.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    reason: str


@dataclass(frozen=True, slots=True)
class NetworkFailure:
    reason: str


Failure = DecodeFailure | NetworkFailure
