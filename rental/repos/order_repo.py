"""
Repository layer for rental orders.

Besides the paged reads shared with the other repositories, orders can be
created, have their status changed, and be resolved against the user and
bicycle tables.
"""

import asyncio
import logging

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rental.db.models import Order, User, normalize_status
from rental.domain.enums import OrderStatus
from rental.domain.result import RepositoryResult
from rental.repos.base import STORE_ERRORS, PagedRepository
from rental.repos.bicycle_repo import BicycleRepository
from rental.repos.user_repo import UserRepository

logger = logging.getLogger(__name__)


class OrderRepository(PagedRepository[Order]):
    """
    Orders table access.

    Inserts are serialised through one lock per repository so concurrent
    create() calls never interleave statements. Identifiers come from the
    store's sequence unless the caller sets ``Order.id`` explicitly.
    """

    model = Order
    entity_name = "Order"
    sort_columns = {
        "id": "id",
        "user_id": "user_id",
        "bicycle_id": "bicycle_id",
        "hours": "hours",
        "status": "status",
        "date": "rental_date",
        "rental_date": "rental_date",
    }

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        users: UserRepository | None = None,
        bicycles: BicycleRepository | None = None,
        page_size: int | None = None,
    ) -> None:
        super().__init__(session_factory, page_size=page_size)
        self.users = users or UserRepository(self._session_factory, page_size=self.page_size)
        self.bicycles = bicycles or BicycleRepository(
            self._session_factory, page_size=self.page_size
        )
        self._insert_lock = asyncio.Lock()

    async def create(self, order: Order) -> RepositoryResult[Order]:
        """
        Insert a new order.

        Args:
            order: Fully populated order; ``id`` may be left unset

        Returns:
            OK with the same order (``id`` filled in), CONFLICT when the id is
            taken, the user/bicycle does not exist, or the order was already
            stored or loaded (it has an identity), or STORAGE_ERROR
        """
        if not inspect(order).transient:
            logger.warning(f"Refusing to re-insert stored order: id={order.id}")
            return RepositoryResult.conflict("Order is already stored", id=order.id)

        async with self._insert_lock:
            try:
                async with self._session("create") as session:
                    session.add(order)
                    await session.commit()
            except IntegrityError as e:
                logger.warning(
                    f"Conflict creating order: {e.orig}",
                    extra={"order_id": order.id, "user_id": order.user_id},
                )
                return RepositoryResult.conflict(
                    "Order conflicts with stored data",
                    id=order.id,
                    user_id=order.user_id,
                    bicycle_id=order.bicycle_id,
                )
            except STORE_ERRORS as e:
                return self._storage_failure("create", e)

        logger.info(
            f"Created order: id={order.id}",
            extra={"order_id": order.id, "user_id": order.user_id, "bicycle_id": order.bicycle_id},
        )
        return RepositoryResult.ok(order)

    async def change_status(
        self, order_id: int, status: str | OrderStatus
    ) -> RepositoryResult[Order]:
        """
        Set the status of one order. No other column is written.

        Returns:
            OK with the updated order, NOT_FOUND, or STORAGE_ERROR

        Raises:
            ValidationError: If status is empty
        """
        new_status = normalize_status(status)
        try:
            async with self._session("change_status") as session:
                order = await session.get(Order, order_id)
                if order is not None:
                    order.status = new_status
                    await session.commit()
        except STORE_ERRORS as e:
            return self._storage_failure("change_status", e)

        if order is None:
            logger.warning(f"Order not found for status change: id={order_id}")
            return RepositoryResult.not_found(f"Order not found (id={order_id!r})", id=order_id)

        logger.info(f"Changed order status: id={order_id} status={new_status}")
        return RepositoryResult.ok(order)

    async def find_user_name(self, user_id: int) -> RepositoryResult[str]:
        """Login of the user with ``user_id``; NOT_FOUND for an unknown id."""
        return (await self.users.find_by_id(user_id)).map(lambda user: user.login)

    async def find_bicycle_model(self, bicycle_id: int) -> RepositoryResult[str]:
        """Model name of the bicycle with ``bicycle_id``; NOT_FOUND for an unknown id."""
        return (await self.bicycles.find_by_id(bicycle_id)).map(lambda bicycle: bicycle.model)

    async def find_all_orders_by_user_name(self, name: str) -> RepositoryResult[list[Order]]:
        """
        All orders placed by the user whose login is ``name``, ordered by id.

        An unknown user yields an OK result with an empty list.
        """
        stmt = (
            select(Order)
            .join(User, User.id == Order.user_id)
            .where(User.login == name)
            .order_by(Order.id)
        )
        result = await self._fetch_all("find_by_user_name", stmt)
        if result.is_ok:
            logger.info(f"Retrieved {len(result.value)} orders for user {name!r}")
        return result
