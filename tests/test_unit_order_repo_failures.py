"""
Storage failure handling for the repositories.

A database with no tables makes every statement fail inside the driver,
which exercises the STORAGE_ERROR path end to end without patching.
"""

import logging
from datetime import date
from unittest.mock import MagicMock

import pytest

from rental.core.errors import StorageError
from rental.core.observability import metrics
from rental.db.models import Order
from rental.domain.enums import OrderStatus, ResultStatus
from rental.repos.bicycle_repo import BicycleRepository
from rental.repos.order_repo import OrderRepository
from rental.repos.user_repo import UserRepository


def _error_count(operation: str) -> float:
    return metrics.registry.get_sample_value(
        "db_queries_total", {"operation": operation, "status": "error"}
    ) or 0.0


@pytest.fixture
def broken_order_repo(unmigrated_session_factory) -> OrderRepository:
    return OrderRepository(unmigrated_session_factory, page_size=7)


@pytest.mark.unit
class TestStorageErrors:
    @pytest.mark.anyio
    async def test_find_all_reports_storage_error(self, broken_order_repo):
        result = await broken_order_repo.find_all()

        assert result.status == ResultStatus.STORAGE_ERROR
        assert result.value is None
        assert isinstance(result.error, StorageError)
        assert result.error.details["operation"] == "find_all"

    @pytest.mark.anyio
    async def test_storage_error_is_distinct_from_empty_table(
        self, broken_order_repo, order_repo
    ):
        failed = await broken_order_repo.find_all()
        empty = await order_repo.find_all()

        assert failed.is_storage_error
        assert empty.is_ok and empty.value == []

    @pytest.mark.anyio
    async def test_count_of_pages_is_zero_on_failure(self, broken_order_repo):
        assert await broken_order_repo.get_count_of_pages() == 0

    @pytest.mark.anyio
    async def test_find_by_id_reports_storage_error(self, broken_order_repo):
        result = await broken_order_repo.find_by_id(1)

        assert result.is_storage_error
        assert not result.is_not_found

    @pytest.mark.anyio
    async def test_find_page_reports_storage_error(self, broken_order_repo):
        result = await broken_order_repo.find_by_page_number("id", 1)

        assert result.is_storage_error

    @pytest.mark.anyio
    async def test_create_reports_storage_error(self, broken_order_repo):
        order = Order(user_id=1, bicycle_id=1, hours=2, rental_date=date(2024, 5, 1))

        result = await broken_order_repo.create(order)

        assert result.is_storage_error
        with pytest.raises(StorageError):
            result.unwrap()

    @pytest.mark.anyio
    async def test_change_status_reports_storage_error(self, broken_order_repo):
        result = await broken_order_repo.change_status(1, OrderStatus.CANCELED)

        assert result.is_storage_error
        assert result.error.details["operation"] == "change_status"

    @pytest.mark.anyio
    async def test_lookups_report_storage_error(self, broken_order_repo):
        assert (await broken_order_repo.find_user_name(1)).is_storage_error
        assert (await broken_order_repo.find_bicycle_model(1)).is_storage_error
        assert (await broken_order_repo.find_all_orders_by_user_name("alice")).is_storage_error

    @pytest.mark.anyio
    async def test_user_and_bicycle_repos_report_storage_error(self, unmigrated_session_factory):
        users = UserRepository(unmigrated_session_factory)
        bicycles = BicycleRepository(unmigrated_session_factory)

        assert (await users.find_by_login("alice")).is_storage_error
        assert (await bicycles.find_by_place("City Park")).is_storage_error
        assert await bicycles.get_count_of_pages() == 0


@pytest.mark.unit
class TestFailureDiagnostics:
    @pytest.mark.anyio
    async def test_failure_is_logged_with_operation(self, broken_order_repo, caplog):
        with caplog.at_level(logging.ERROR, logger="rental.repos.base"):
            await broken_order_repo.find_all()

        records = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert records
        assert records[0].table == "orders"
        assert records[0].operation == "find_all"
        assert "orders.find_all" in records[0].getMessage()

    @pytest.mark.anyio
    async def test_failure_is_counted_in_metrics(self, broken_order_repo):
        before = _error_count("orders.find_page")

        await broken_order_repo.find_by_page_number("hours", 1)

        assert _error_count("orders.find_page") == before + 1

    @pytest.mark.anyio
    async def test_connection_error_from_driver_is_storage_error(self):
        session = MagicMock()
        session.__aenter__.side_effect = ConnectionRefusedError("connection refused")
        factory = MagicMock(return_value=session)
        repo = OrderRepository(factory, page_size=7)

        result = await repo.find_all()

        assert result.is_storage_error
        assert result.error.details["error"] == "ConnectionRefusedError"

    @pytest.mark.anyio
    async def test_not_found_is_logged_as_warning(self, order_repo, caplog):
        with caplog.at_level(logging.WARNING, logger="rental.repos.base"):
            result = await order_repo.find_by_id(31)

        assert result.is_not_found
        assert any("Order not found" in r.getMessage() for r in caplog.records)
