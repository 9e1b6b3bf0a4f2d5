"""Unit tests for UserRepository and BicycleRepository."""

import pytest

from rental.core.errors import ValidationError
from rental.domain.enums import UserRole
from tests.conftest import acreate_bicycle_in_db, acreate_user_in_db


@pytest.mark.unit
class TestUserRepository:
    @pytest.mark.anyio
    async def test_find_by_login(self, user_repo, alice, bob):
        result = await user_repo.find_by_login("bob")

        assert result.is_ok
        assert result.value.id == bob.id

    @pytest.mark.anyio
    async def test_find_by_login_unknown(self, user_repo, alice):
        result = await user_repo.find_by_login("mallory")

        assert result.is_not_found
        assert result.error.details == {"login": "mallory"}

    @pytest.mark.anyio
    async def test_find_by_id(self, user_repo, alice):
        assert (await user_repo.find_by_id(alice.id)).unwrap().login == "alice"

    @pytest.mark.anyio
    async def test_find_all_and_pages(self, user_repo, session_factory):
        for i in range(9):
            await acreate_user_in_db(session_factory, f"user{i:02d}")

        assert len((await user_repo.find_all()).value) == 9
        assert await user_repo.get_count_of_pages() == 2

    @pytest.mark.anyio
    async def test_page_sorted_by_login(self, user_repo, session_factory):
        for login in ("zoe", "mia", "adam"):
            await acreate_user_in_db(session_factory, login)

        result = await user_repo.find_by_page_number("login", 1)

        assert [u.login for u in result.value] == ["adam", "mia", "zoe"]

    @pytest.mark.anyio
    async def test_page_sorted_by_role(self, user_repo, session_factory):
        await acreate_user_in_db(session_factory, "carol", UserRole.CLIENT)
        await acreate_user_in_db(session_factory, "root", UserRole.ADMIN)

        result = await user_repo.find_by_page_number("ROLE", 1)

        assert [u.role for u in result.value] == ["admin", "client"]

    @pytest.mark.anyio
    async def test_order_columns_are_not_sortable_on_users(self, user_repo):
        with pytest.raises(ValidationError) as exc_info:
            await user_repo.find_by_page_number("hours", 1)
        assert exc_info.value.details["allowed"] == ["id", "login", "role"]


@pytest.mark.unit
class TestBicycleRepository:
    @pytest.mark.anyio
    async def test_find_by_place(self, bicycle_repo, session_factory, trek, giant):
        extra = await acreate_bicycle_in_db(session_factory, "Cube Aim Pro", "City Park")

        result = await bicycle_repo.find_by_place("City Park")

        assert [b.id for b in result.value] == [giant.id, extra.id]

    @pytest.mark.anyio
    async def test_find_by_place_without_bicycles(self, bicycle_repo, trek):
        result = await bicycle_repo.find_by_place("Harbour")

        assert result.is_ok
        assert result.value == []

    @pytest.mark.anyio
    async def test_find_by_id_unknown(self, bicycle_repo):
        result = await bicycle_repo.find_by_id(3)

        assert result.is_not_found
        assert result.error.message == "Bicycle not found (id=3)"

    @pytest.mark.anyio
    async def test_page_sorted_by_model(self, bicycle_repo, trek, giant):
        result = await bicycle_repo.find_by_page_number("model", 1)

        assert [b.model for b in result.value] == ["Giant Escape 3", "Trek Marlin 5"]

    @pytest.mark.anyio
    async def test_count_of_pages_on_empty_table(self, bicycle_repo):
        assert await bicycle_repo.get_count_of_pages() == 0
