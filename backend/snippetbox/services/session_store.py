"""
Snippetbox — Server-Side Sessions
===================================

What:  Session state (`Session`), its persistence (`SessionStore`
       implementations) and the glue that loads/saves it (`SessionManager`).
How:   The browser holds only an opaque random token in a cookie. The
       server keeps the values, JSON-encoded together with an absolute
       deadline, in a store keyed by that token.
Who:   SessionMiddleware loads a Session before the handler runs and saves
       it afterwards; handlers use get/put/pop/remove/renew_token.

Lifetime:
    The deadline is fixed when the session is created (default 12 hours)
    and carried across token renewals, so renewing never extends it.

Token renewal:
    renew_token() swaps in a fresh token and remembers the old one; on save
    the old row is deleted. Login and logout call it so that a token planted
    before a privilege change is useless afterwards (session fixation).
"""

import asyncio
import json
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import DatabaseError
from snippetbox.models.session import SessionRow
from snippetbox.services.base import utc_now

logger = logging.getLogger(__name__)

_MISSING = object()


def generate_token() -> str:
    """32 random bytes, URL-safe base64 (43 characters)."""
    return secrets.token_urlsafe(32)


class SessionStatus(str, Enum):
    UNMODIFIED = "unmodified"
    MODIFIED = "modified"


class Session:
    """
    Key/value state for one browser session.

    A Session with `token=None` is new: nothing is persisted (and no cookie
    is sent) unless a handler or middleware writes to it.
    """

    def __init__(
        self,
        token: Optional[str],
        deadline: datetime,
        values: Optional[Dict[str, Any]] = None,
    ):
        self.token = token
        self.deadline = deadline
        self.status = SessionStatus.UNMODIFIED
        self.replaced_token: Optional[str] = None
        self._values: Dict[str, Any] = dict(values or {})

    # ── Read/write interface ──────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def exists(self, key: str) -> bool:
        return key in self._values

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._touch()

    def pop(self, key: str, default: Any = None) -> Any:
        """Read and delete in one step (flash messages, post-login redirect)."""
        value = self._values.pop(key, _MISSING)
        if value is _MISSING:
            return default
        self._touch()
        return value

    def remove(self, key: str) -> None:
        if key in self._values:
            del self._values[key]
            self._touch()

    def renew_token(self) -> None:
        """Issue a new token for the same data and deadline."""
        if self.token is not None and self.replaced_token is None:
            self.replaced_token = self.token
        self.token = generate_token()
        self._touch()

    def _touch(self) -> None:
        if self.token is None:
            self.token = generate_token()
        self.status = SessionStatus.MODIFIED

    # ── Serialization ─────────────────────────────────────────────────────

    def encode(self) -> str:
        return json.dumps({"deadline": self.deadline.isoformat(), "values": self._values})

    @classmethod
    def decode(cls, token: str, payload: str) -> "Session":
        raw = json.loads(payload)
        return cls(
            token=token,
            deadline=datetime.fromisoformat(raw["deadline"]),
            values=raw.get("values") or {},
        )


# ══════════════════════════════════════════════════════════════════════════
# Stores
# ══════════════════════════════════════════════════════════════════════════


class SessionStore(ABC):
    """Persistence for encoded session payloads, keyed by token."""

    @abstractmethod
    async def find(self, token: str) -> Optional[str]:
        """Payload for `token`, or None when absent or past its expiry."""
        ...

    @abstractmethod
    async def commit(self, token: str, payload: str, expiry: datetime) -> None:
        """Insert or replace the payload stored under `token`."""
        ...

    @abstractmethod
    async def delete(self, token: str) -> None:
        ...

    @abstractmethod
    async def delete_expired(self) -> int:
        """Remove every payload past its expiry; returns how many were removed."""
        ...


class SqlSessionStore(SessionStore):
    """Session rows in the `sessions` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._clock = clock

    async def find(self, token: str) -> Optional[str]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(SessionRow.data).where(
                        SessionRow.token == token,
                        SessionRow.expiry > self._clock(),
                    )
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading session: %s", str(e))
            raise DatabaseError(
                message="Could not load the session.",
                context={"error_type": type(e).__name__},
            ) from e

    async def commit(self, token: str, payload: str, expiry: datetime) -> None:
        try:
            async with self._session_factory() as db:
                await db.merge(SessionRow(token=token, data=payload, expiry=expiry))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error saving session: %s", str(e))
            raise DatabaseError(
                message="Could not save the session.",
                context={"error_type": type(e).__name__},
            ) from e

    async def delete(self, token: str) -> None:
        try:
            async with self._session_factory() as db:
                await db.execute(delete(SessionRow).where(SessionRow.token == token))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting session: %s", str(e))
            raise DatabaseError(
                message="Could not delete the session.",
                context={"error_type": type(e).__name__},
            ) from e

    async def delete_expired(self) -> int:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    delete(SessionRow).where(SessionRow.expiry <= self._clock())
                )
                await db.commit()
                return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error purging expired sessions: %s", str(e))
            raise DatabaseError(
                message="Could not purge expired sessions.",
                context={"error_type": type(e).__name__},
            ) from e


class MemorySessionStore(SessionStore):
    """Dict-backed store for tests and single-process development."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._items: Dict[str, Tuple[str, datetime]] = {}

    async def find(self, token: str) -> Optional[str]:
        item = self._items.get(token)
        if item is None:
            return None
        payload, expiry = item
        if expiry <= self._clock():
            del self._items[token]
            return None
        return payload

    async def commit(self, token: str, payload: str, expiry: datetime) -> None:
        self._items[token] = (payload, expiry)

    async def delete(self, token: str) -> None:
        self._items.pop(token, None)

    async def delete_expired(self) -> int:
        now = self._clock()
        expired = [token for token, (_, expiry) in self._items.items() if expiry <= now]
        for token in expired:
            del self._items[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._items)


# ══════════════════════════════════════════════════════════════════════════
# Manager
# ══════════════════════════════════════════════════════════════════════════


class SessionManager:
    """
    Loads and saves Session objects against a SessionStore.

    Args:
        store: Where payloads live
        lifetime: Absolute lifetime of a new session
        clock: Current UTC time
    """

    def __init__(
        self,
        store: SessionStore,
        lifetime: timedelta = timedelta(hours=12),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.lifetime = lifetime
        self._clock = clock

    def new(self) -> Session:
        return Session(token=None, deadline=self._clock() + self.lifetime)

    async def load(self, token: Optional[str]) -> Session:
        """Session for the cookie token, or a fresh one if unknown/expired/corrupt."""
        if not token:
            return self.new()

        payload = await self.store.find(token)
        if payload is None:
            return self.new()

        try:
            session = Session.decode(token, payload)
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding undecodable session payload")
            return self.new()

        if session.deadline <= self._clock():
            return self.new()
        return session

    async def save(self, session: Session) -> None:
        """Persist a modified session; drop the row of a renewed token."""
        if session.status is not SessionStatus.MODIFIED or session.token is None:
            return

        if session.replaced_token is not None:
            await self.store.delete(session.replaced_token)
            session.replaced_token = None

        await self.store.commit(session.token, session.encode(), session.deadline)
        session.status = SessionStatus.UNMODIFIED

    def seconds_left(self, session: Session) -> int:
        return max(0, int((session.deadline - self._clock()).total_seconds()))


async def purge_expired_sessions(store: SessionStore, interval: float) -> None:
    """
    Delete expired session payloads every `interval` seconds until cancelled.

    A failed purge is logged and retried on the next tick; the loop only
    stops when the lifespan cancels it at shutdown.
    """
    while True:
        try:
            removed = await store.delete_expired()
            if removed:
                logger.info("Purged %d expired sessions", removed)
        except DatabaseError as e:
            logger.error("Expired session purge failed: %s", e.message)
        await asyncio.sleep(interval)
