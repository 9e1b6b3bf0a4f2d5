"""Repository for application users."""

from sqlalchemy import select

from rental.db.models import User
from rental.domain.result import RepositoryResult
from rental.repos.base import PagedRepository


class UserRepository(PagedRepository[User]):
    model = User
    entity_name = "User"
    sort_columns = {"id": "id", "login": "login", "role": "role"}

    async def find_by_login(self, login: str) -> RepositoryResult[User]:
        """
        Retrieve a user by login name.

        Returns:
            OK with the user, NOT_FOUND, or STORAGE_ERROR
        """
        stmt = select(User).where(User.login == login)
        return await self._fetch_one("find_by_login", stmt, login=login)
