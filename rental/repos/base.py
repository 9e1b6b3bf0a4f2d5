"""
Generic paged repository shared by the order, user and bicycle repositories.

Every call acquires its own session from the session factory and releases it
when the call returns. Driver failures are logged and converted into
STORAGE_ERROR results here, so subclasses only deal with the happy path and
with their own NOT_FOUND / CONFLICT cases.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rental.core.config import settings
from rental.core.db import get_async_sessionmaker
from rental.core.errors import StorageError
from rental.core.observability import db_metrics
from rental.domain.result import RepositoryResult
from rental.repos.pagination import (
    count_pages,
    page_offset,
    resolve_sort_column,
    validate_page_size,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# Failures raised while talking to the store. OSError covers drivers that
# surface connection errors without SQLAlchemy wrapping them.
STORE_ERRORS: tuple[type[Exception], ...] = (SQLAlchemyError, OSError)


class PagedRepository(Generic[ModelT]):
    """find-all / find-by-id / count-pages / find-page over one mapped entity."""

    model: ClassVar[type[Any]]
    entity_name: ClassVar[str]
    # public column name -> mapped attribute name
    sort_columns: ClassVar[Mapping[str, str]] = {"id": "id"}

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        page_size: int | None = None,
    ) -> None:
        self._session_factory = session_factory or get_async_sessionmaker()
        self.page_size = validate_page_size(
            page_size if page_size is not None else settings.default_page_size
        )

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        with db_metrics.track(f"{self.table_name}.{operation}"):
            async with self._session_factory() as session:
                yield session

    def _storage_failure(self, operation: str, exc: Exception) -> RepositoryResult[Any]:
        logger.error(
            f"Database error at {self.table_name}.{operation}: {type(exc).__name__}: {exc}",
            extra={"table": self.table_name, "operation": operation},
        )
        return RepositoryResult.storage_error(
            StorageError(
                f"{self.entity_name} storage is unavailable",
                details={"operation": operation, "error": type(exc).__name__},
            )
        )

    async def _fetch_all(self, operation: str, stmt: Select[Any]) -> RepositoryResult[list[ModelT]]:
        try:
            async with self._session(operation) as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except STORE_ERRORS as e:
            return self._storage_failure(operation, e)
        return RepositoryResult.ok(records)

    async def _fetch_one(
        self, operation: str, stmt: Select[Any], **lookup: Any
    ) -> RepositoryResult[ModelT]:
        try:
            async with self._session(operation) as session:
                result = await session.execute(stmt)
                record = result.scalars().first()
        except STORE_ERRORS as e:
            return self._storage_failure(operation, e)

        if record is None:
            described = ", ".join(f"{key}={value!r}" for key, value in lookup.items())
            logger.warning(f"{self.entity_name} not found: {described}")
            return RepositoryResult.not_found(
                f"{self.entity_name} not found ({described})", **lookup
            )
        return RepositoryResult.ok(record)

    async def find_all(self) -> RepositoryResult[list[ModelT]]:
        """
        Retrieve every record, ordered by id.

        Returns:
            OK with the (possibly empty) list, or STORAGE_ERROR
        """
        result = await self._fetch_all("find_all", select(self.model).order_by(self.model.id))
        if result.is_ok:
            logger.info(f"Retrieved {len(result.value)} rows from {self.table_name}")
        return result

    async def find_by_id(self, record_id: int) -> RepositoryResult[ModelT]:
        """
        Retrieve a single record by primary key.

        Returns:
            OK with the record, NOT_FOUND, or STORAGE_ERROR
        """
        stmt = select(self.model).where(self.model.id == record_id)
        return await self._fetch_one("find_by_id", stmt, id=record_id)

    async def get_count_of_pages(self, page_size: int | None = None) -> int:
        """
        Number of pages of ``page_size`` rows needed to list the whole table.

        Args:
            page_size: Rows per page; defaults to the repository page size

        Returns:
            ceil(row_count / page_size), or 0 when the store fails

        Raises:
            ValidationError: If page_size < 1
        """
        size = validate_page_size(page_size if page_size is not None else self.page_size)
        stmt = select(func.count()).select_from(self.model)
        try:
            async with self._session("count") as session:
                total = (await session.execute(stmt)).scalar_one()
        except STORE_ERRORS as e:
            self._storage_failure("count", e)
            return 0
        return count_pages(total, size)

    async def find_by_page_number(
        self, sort_column: str, page_number: int, page_size: int | None = None
    ) -> RepositoryResult[list[ModelT]]:
        """
        Retrieve one page of records ordered by ``sort_column``.

        Rows with equal sort values are ordered by id, so consecutive pages
        never overlap.

        Args:
            sort_column: Public column name, checked against ``sort_columns``
            page_number: 1-based page index
            page_size: Rows per page; defaults to the repository page size

        Returns:
            OK with at most ``page_size`` records, or STORAGE_ERROR

        Raises:
            ValidationError: For an unknown column, page_number < 1 or page_size < 1
        """
        size = page_size if page_size is not None else self.page_size
        offset = page_offset(page_number, size)
        order_col = resolve_sort_column(self.model, sort_column, self.sort_columns)

        stmt = select(self.model).order_by(order_col, self.model.id).offset(offset).limit(size)
        result = await self._fetch_all("find_page", stmt)
        if result.is_ok:
            logger.debug(
                f"Retrieved page {page_number} of {self.table_name} ({len(result.value)} rows)"
            )
        return result
