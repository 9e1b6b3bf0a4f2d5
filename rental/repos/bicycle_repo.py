"""Repository for rentable bicycles."""

from sqlalchemy import select

from rental.db.models import Bicycle
from rental.domain.result import RepositoryResult
from rental.repos.base import PagedRepository


class BicycleRepository(PagedRepository[Bicycle]):
    model = Bicycle
    entity_name = "Bicycle"
    sort_columns = {"id": "id", "model": "model", "place": "place"}

    async def find_by_place(self, place: str) -> RepositoryResult[list[Bicycle]]:
        """All bicycles parked at one rental point, ordered by id."""
        stmt = select(Bicycle).where(Bicycle.place == place).order_by(Bicycle.id)
        return await self._fetch_all("find_by_place", stmt)
