"""
Domain-specific exceptions for the rental data-access layer.

Repositories never let driver exceptions escape: store failures are wrapped
in StorageError and carried inside a RepositoryResult. ValidationError is
the exception raised directly, for arguments a caller should never send.
"""

from typing import Any


class RentalError(Exception):
    """Base exception for all rental domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RentalError):
    """
    Raised when input data fails validation.

    Examples:
    - Unknown sort column for a paged query
    - Page number below 1 or non-positive page size
    - Non-positive rental duration
    - Empty order status
    """

    pass


class NotFoundError(RentalError):
    """
    Raised when a requested record does not exist.

    Examples:
    - Order ID not found
    - Unknown user id while resolving a display name
    - Unknown bicycle id while resolving a model
    """

    pass


class ConflictError(RentalError):
    """
    Raised when a write conflicts with the stored state.

    Examples:
    - Duplicate order id
    - Order referencing a user or bicycle that does not exist
    """

    pass


class StorageError(RentalError):
    """
    Raised when the backing store cannot answer.

    Examples:
    - Connection refused or pool timeout
    - Missing table
    - Driver-level SQL error
    """

    pass
