"""Tagged results returned by user store operations."""

from dataclasses import dataclass
from enum import StrEnum


class StoreErrorKind(StrEnum):
    """Failure kinds a store operation can report."""

    VALIDATION_FAILED = "validation-failed"
    DUPLICATE_EMAIL = "duplicate-email"
    NOT_FOUND = "not-found"
    STORE_UNAVAILABLE = "store-unavailable"
    STORE_WRITE_FAILED = "store-write-failed"


@dataclass(frozen=True)
class Ok[T]:
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying its kind and a human-readable message."""

    kind: StoreErrorKind
    message: str


type StoreResult[T] = Ok[T] | Err
