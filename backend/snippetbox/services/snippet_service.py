"""
Snippetbox — SQL Snippet Store
================================

What:  SnippetStore backed by async SQLAlchemy.
How:   Each operation opens its own session from the shared factory and runs
       a single statement; there are no multi-statement transactions.
Who:   Installed on `app.state.snippets` by create_app() in production.

Query plans:
    get(id):    SELECT ... WHERE id = :id AND expires > :now
                → primary key lookup
    latest(n):  SELECT ... WHERE expires > :now ORDER BY id DESC LIMIT :n
                → idx_snippets_expires + primary key order

Error Handling:
    SQLAlchemyError is wrapped in DatabaseError (generic message, original
    error type in the context). NotFoundError propagates as-is.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import Snippet
from snippetbox.schemas.snippet import SnippetRecord
from snippetbox.services.base import SnippetStore, utc_now

logger = logging.getLogger(__name__)


class SqlSnippetStore(SnippetStore):
    """
    Snippet persistence over a relational database.

    Args:
        session_factory: Shared async_sessionmaker (see database.py)
        clock: Returns the current UTC time; injectable for expiry tests
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._clock = clock

    async def insert(self, title: str, content: str, expires_days: int) -> int:
        now = self._clock()
        snippet = Snippet(
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        try:
            async with self._session_factory() as db:
                db.add(snippet)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", str(e))
            raise DatabaseError(
                message="Could not store the snippet.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Snippet %d created (expires in %d days)", snippet.id, expires_days)
        return snippet.id

    async def get(self, snippet_id: int) -> SnippetRecord:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Snippet).where(
                        Snippet.id == snippet_id,
                        Snippet.expires > self._clock(),
                    )
                )
                snippet = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the snippet.",
                context={"snippet_id": snippet_id, "error_type": type(e).__name__},
            ) from e

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)

        return SnippetRecord.model_validate(snippet)

    async def latest(self, limit: int = 10) -> List[SnippetRecord]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Snippet)
                    .where(Snippet.expires > self._clock())
                    .order_by(desc(Snippet.id))
                    .limit(limit)
                )
                snippets = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets.",
                context={"error_type": type(e).__name__},
            ) from e

        return [SnippetRecord.model_validate(s) for s in snippets]
