"""
Snippetbox — SQL User Store
=============================

What:  UserStore backed by async SQLAlchemy, with bcrypt password hashes.
Who:   Installed on `app.state.users` by create_app() in production.

Duplicate detection:
    insert() does not SELECT first. It lets the INSERT hit the
    `users_uc_email` unique constraint and inspects the IntegrityError.
    PostgreSQL reports the constraint name; SQLite reports the column
    ("UNIQUE constraint failed: users.email"). Both are recognised.

Enumeration resistance:
    authenticate() raises the same InvalidCredentialsError for an unknown
    email and for a wrong password.
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.models.user import User
from snippetbox.schemas.user import UserRecord
from snippetbox.services.base import UserStore, utc_now
from snippetbox.services.passwords import check_password, hash_password

logger = logging.getLogger(__name__)

_DUPLICATE_EMAIL_MARKERS = ("users_uc_email", "users.email")


def is_duplicate_email(error: IntegrityError) -> bool:
    """True if the integrity error came from the unique constraint on users.email."""
    message = str(error.orig) if error.orig is not None else str(error)
    return any(marker in message for marker in _DUPLICATE_EMAIL_MARKERS)


class SqlUserStore(UserStore):
    """
    Args:
        session_factory: Shared async_sessionmaker
        cost: bcrypt work factor for new hashes
        clock: Current UTC time, used for the `created` column
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cost: int = 12,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._cost = cost
        self._clock = clock

    async def insert(self, name: str, email: str, password: str) -> None:
        hashed = await hash_password(password, self._cost)
        user = User(name=name, email=email, hashed_password=hashed, created=self._clock())
        try:
            async with self._session_factory() as db:
                db.add(user)
                await db.commit()
        except IntegrityError as e:
            if is_duplicate_email(e):
                raise DuplicateEmailError(email=email) from e
            logger.error("Integrity error inserting user: %s", str(e))
            raise DatabaseError(
                message="Could not create the account.",
                context={"error_type": type(e).__name__},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error inserting user: %s", str(e))
            raise DatabaseError(
                message="Could not create the account.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User %d signed up", user.id)

    async def authenticate(self, email: str, password: str) -> int:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(User.id, User.hashed_password).where(User.email == email)
                )
                row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error authenticating user: %s", str(e))
            raise DatabaseError(
                message="Could not verify credentials.",
                context={"error_type": type(e).__name__},
            ) from e

        if row is None:
            raise InvalidCredentialsError()

        user_id, hashed_password = row
        if not await check_password(password, hashed_password):
            raise InvalidCredentialsError()

        return user_id

    async def exists(self, user_id: int) -> bool:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(User.id).where(User.id == user_id))
                return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not look up the account.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e

    async def get(self, user_id: int) -> UserRecord:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(User).where(User.id == user_id))
                user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the account.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        return UserRecord.model_validate(user)

    async def password_update(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(User.hashed_password).where(User.id == user_id)
                )
                hashed_password = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error reading password for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the password.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e

        if hashed_password is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        if not await check_password(current_password, hashed_password):
            raise InvalidCredentialsError(context={"user_id": user_id})

        new_hash = await hash_password(new_password, self._cost)
        try:
            async with self._session_factory() as db:
                await db.execute(
                    update(User).where(User.id == user_id).values(hashed_password=new_hash)
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating password for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the password.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Password updated for user %d", user_id)
