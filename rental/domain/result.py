"""
Explicit outcome type for repository operations.

A RepositoryResult is always one of:
- OK: ``value`` holds the payload (possibly an empty list)
- NOT_FOUND: the store answered but the record does not exist
- CONFLICT: the store rejected a write (duplicate key, dangling reference)
- STORAGE_ERROR: the store could not answer at all

``error`` carries the matching RentalError for every non-OK status, so
``unwrap()`` can re-raise it for callers that prefer exceptions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from rental.core.errors import ConflictError, NotFoundError, RentalError, StorageError
from rental.domain.enums import ResultStatus

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class RepositoryResult(Generic[T]):
    status: ResultStatus
    value: T | None = None
    error: RentalError | None = None

    @classmethod
    def ok(cls, value: T) -> RepositoryResult[T]:
        return cls(status=ResultStatus.OK, value=value)

    @classmethod
    def not_found(cls, message: str, **details: Any) -> RepositoryResult[T]:
        return cls(status=ResultStatus.NOT_FOUND, error=NotFoundError(message, details=details))

    @classmethod
    def conflict(cls, message: str, **details: Any) -> RepositoryResult[T]:
        return cls(status=ResultStatus.CONFLICT, error=ConflictError(message, details=details))

    @classmethod
    def storage_error(cls, error: StorageError) -> RepositoryResult[T]:
        return cls(status=ResultStatus.STORAGE_ERROR, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == ResultStatus.OK

    @property
    def is_not_found(self) -> bool:
        return self.status == ResultStatus.NOT_FOUND

    @property
    def is_conflict(self) -> bool:
        return self.status == ResultStatus.CONFLICT

    @property
    def is_storage_error(self) -> bool:
        return self.status == ResultStatus.STORAGE_ERROR

    def unwrap(self) -> T:
        """Return the value, or raise the carried error for non-OK results."""
        if self.is_ok:
            return self.value  # type: ignore[return-value]
        raise self.error or RentalError(f"Result has status {self.status.value}")

    def value_or(self, default: T) -> T:
        return self.value if self.is_ok else default  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> RepositoryResult[U]:
        """Apply ``fn`` to an OK value; non-OK results pass through unchanged."""
        if not self.is_ok:
            return RepositoryResult(status=self.status, error=self.error)
        return RepositoryResult.ok(fn(self.value))  # type: ignore[arg-type]
