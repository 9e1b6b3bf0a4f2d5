"""
Domain enums for the rental data model.

Order statuses form an open set in storage (the column is plain text);
OrderStatus names the values the application itself writes.
"""

from enum import Enum


class OrderStatus(str, Enum):
    """Lifecycle status of a rental order."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELED = "canceled"


class UserRole(str, Enum):
    """Role of an application user."""

    CLIENT = "client"
    ADMIN = "admin"


class ResultStatus(str, Enum):
    """Outcome tag carried by every repository result."""

    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"
