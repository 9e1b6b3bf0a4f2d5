"""Shared utilities for page-number pagination."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute

from rental.core.errors import ValidationError


def validate_page_size(page_size: int) -> int:
    if page_size < 1:
        raise ValidationError(
            "Invalid page size", details={"page_size": page_size, "message": "must be >= 1"}
        )
    return page_size


def count_pages(total: int, page_size: int) -> int:
    """Number of pages needed to show ``total`` rows, ``page_size`` per page.

    Args:
        total: Row count
        page_size: Rows per page (>= 1)

    Returns:
        ceil(total / page_size)
    """
    validate_page_size(page_size)
    return (total + page_size - 1) // page_size


def page_offset(page_number: int, page_size: int) -> int:
    """Row offset of a 1-based page.

    Raises:
        ValidationError: If page_number < 1 or page_size < 1
    """
    validate_page_size(page_size)
    if page_number < 1:
        raise ValidationError(
            "Invalid page number",
            details={"page_number": page_number, "message": "page numbers start at 1"},
        )
    return (page_number - 1) * page_size


def resolve_sort_column(
    model: Any, column: str, allowed: Mapping[str, str]
) -> InstrumentedAttribute[Any]:
    """Map a caller-supplied column name onto a mapped attribute.

    Only names present in ``allowed`` (public name -> attribute name) are
    accepted, so the caller never reaches the SQL text.

    Raises:
        ValidationError: If the column is not sortable
    """
    attribute = allowed.get(column.strip().lower()) if column else None
    if attribute is None:
        raise ValidationError(
            f"Cannot sort {model.__tablename__} by '{column}'",
            details={"column": column, "allowed": sorted(allowed)},
        )
    return getattr(model, attribute)
