"""
Snippetbox — Database Engine Management
=========================================

What:  Async SQLAlchemy engine/session-factory builders and the declarative Base.
How:   `build_engine()` creates an async engine with connection pooling for
       server databases; `build_session_factory()` wraps it in an
       `async_sessionmaker`. The application factory calls both once and
       hands the factory to the SQL-backed stores.
Who:   Used by main.create_app(), Alembic, and the store tests.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:       Persistent connections for normal load
    max_overflow=10:    Temporary connections for traffic spikes
    pool_pre_ping:      Validates connections before use
    pool_recycle=3600:  Recycles connections every hour

    SQLite (tests, local experiments) uses SQLAlchemy's default pool, which
    does not accept the sizing arguments.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snippetbox.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object; Alembic reads it for autogenerate and
    the tests use it for `create_all`.
    """
    pass


def build_engine(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async engine for `url` (defaults to settings.database_url).

    Echoes SQL when the log level is DEBUG.
    """
    url = url or settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.log_level == "DEBUG")

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory shared by every SQL store.

    expire_on_commit=False: row attributes stay readable after commit, since
    stores convert rows to records after the transaction closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables directly from the ORM metadata (tests, local SQLite)."""
    # Register every model with Base.metadata before create_all
    import snippetbox.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
