"""
Snippetbox — User Store Tests
===============================

What:  SqlUserStore against a temporary SQLite database and the in-memory
       double, checked against the same expectations.

What we test:
    ✅ Passwords are stored as bcrypt hashes, never in plain text
    ✅ A second signup with the same email raises DuplicateEmailError
    ✅ authenticate raises the same error for unknown email and wrong password
    ✅ exists / get for present and missing users
    ✅ password_update re-checks the current password
"""

import bcrypt
import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from snippetbox.exceptions import DuplicateEmailError, InvalidCredentialsError, NotFoundError
from snippetbox.models.user import User
from snippetbox.services.memory import InMemoryUserStore
from snippetbox.services.passwords import check_password, hash_password
from snippetbox.services.user_service import SqlUserStore, is_duplicate_email

EMAIL = "alice@example.com"
PASSWORD = "pa$$word123"


@pytest.fixture(params=["sql", "memory"])
def store(request, clock, sql_session_factory):
    if request.param == "sql":
        return SqlUserStore(sql_session_factory, cost=4, clock=clock)
    return InMemoryUserStore(cost=4, clock=clock)


async def signup_and_authenticate(store) -> int:
    await store.insert("Alice", EMAIL, PASSWORD)
    return await store.authenticate(EMAIL, PASSWORD)


class TestInsert:
    @pytest.mark.asyncio
    async def test_duplicate_email(self, store):
        await store.insert("Alice", EMAIL, PASSWORD)
        with pytest.raises(DuplicateEmailError):
            await store.insert("Another Alice", EMAIL, "different-password")

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, clock, sql_session_factory):
        store = SqlUserStore(sql_session_factory, cost=4, clock=clock)
        await store.insert("Alice", EMAIL, PASSWORD)

        async with sql_session_factory() as db:
            hashed = (
                await db.execute(select(User.hashed_password).where(User.email == EMAIL))
            ).scalar_one()

        assert hashed != PASSWORD
        assert len(hashed) == 60
        assert bcrypt.checkpw(PASSWORD.encode(), hashed.encode())


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_correct_credentials(self, store):
        user_id = await signup_and_authenticate(store)
        assert user_id > 0

    @pytest.mark.asyncio
    async def test_wrong_password(self, store):
        await store.insert("Alice", EMAIL, PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await store.authenticate(EMAIL, "not-the-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await store.authenticate("nobody@example.com", PASSWORD)
        assert str(wrong_password.value) == str(unknown_email.value)


class TestLookup:
    @pytest.mark.asyncio
    async def test_exists(self, store):
        user_id = await signup_and_authenticate(store)
        assert await store.exists(user_id)
        assert not await store.exists(user_id + 1000)

    @pytest.mark.asyncio
    async def test_get(self, store, clock):
        user_id = await signup_and_authenticate(store)
        user = await store.get(user_id)
        assert user.id == user_id
        assert user.name == "Alice"
        assert user.email == EMAIL
        assert user.created == clock.now

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(NotFoundError):
            await store.get(42)


class TestPasswordUpdate:
    @pytest.mark.asyncio
    async def test_update(self, store):
        user_id = await signup_and_authenticate(store)

        await store.password_update(user_id, PASSWORD, "brand-new-pa$$")

        assert await store.authenticate(EMAIL, "brand-new-pa$$") == user_id
        with pytest.raises(InvalidCredentialsError):
            await store.authenticate(EMAIL, PASSWORD)

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, store):
        user_id = await signup_and_authenticate(store)

        with pytest.raises(InvalidCredentialsError):
            await store.password_update(user_id, "wrong-current", "brand-new-pa$$")
        assert await store.authenticate(EMAIL, PASSWORD) == user_id

    @pytest.mark.asyncio
    async def test_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            await store.password_update(42, PASSWORD, "brand-new-pa$$")


class TestPasswords:
    @pytest.mark.asyncio
    async def test_long_passwords_are_truncated_consistently(self):
        long_password = "x" * 100
        hashed = await hash_password(long_password, cost=4)
        assert await check_password(long_password, hashed)
        assert await check_password("x" * 72, hashed)

    def test_duplicate_email_markers(self):
        postgres = IntegrityError(
            "INSERT", {}, Exception('duplicate key value violates unique constraint "users_uc_email"')
        )
        sqlite = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        other = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: users.name"))
        assert is_duplicate_email(postgres)
        assert is_duplicate_email(sqlite)
        assert not is_duplicate_email(other)
