"""
Snippetbox — Snippet Store Tests
==================================

What:  SqlSnippetStore against a temporary SQLite database, plus the
       in-memory double, checked against the same expectations.

What we test:
    ✅ insert returns the new id and sets expiry from the day count
    ✅ get returns the stored snippet with UTC timestamps
    ✅ get raises NotFoundError for unknown and expired snippets alike
    ✅ latest returns only live snippets, newest first, up to the limit
    ✅ Storage failures surface as DatabaseError
"""

from datetime import timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.services.memory import InMemorySnippetStore
from snippetbox.services.snippet_service import SqlSnippetStore


@pytest.fixture(params=["sql", "memory"])
def store(request, clock, sql_session_factory):
    if request.param == "sql":
        return SqlSnippetStore(sql_session_factory, clock=clock)
    return InMemorySnippetStore(clock=clock)


class TestInsertAndGet:
    @pytest.mark.asyncio
    async def test_round_trip(self, store, clock):
        snippet_id = await store.insert("An old silent pond", "A frog jumps in", 7)
        assert snippet_id > 0

        snippet = await store.get(snippet_id)
        assert snippet.id == snippet_id
        assert snippet.title == "An old silent pond"
        assert snippet.content == "A frog jumps in"
        assert snippet.created == clock.now
        assert snippet.expires == clock.now + timedelta(days=7)
        assert snippet.expires.tzinfo is not None
        assert snippet.expires.utcoffset() == timezone.utc.utcoffset(None)

    @pytest.mark.asyncio
    async def test_ids_increase(self, store):
        first = await store.insert("one", "1", 1)
        second = await store.insert("two", "2", 1)
        assert second > first

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, store):
        with pytest.raises(NotFoundError):
            await store.get(9999)

    @pytest.mark.asyncio
    async def test_expired_snippet_is_not_found(self, store, clock):
        snippet_id = await store.insert("Brief", "Gone tomorrow", 1)

        clock.advance(days=1)
        with pytest.raises(NotFoundError):
            await store.get(snippet_id)

    @pytest.mark.asyncio
    async def test_snippet_visible_until_expiry_instant(self, store, clock):
        snippet_id = await store.insert("Brief", "Still here", 1)

        clock.advance(days=1, seconds=-1)
        assert (await store.get(snippet_id)).title == "Brief"


class TestLatest:
    @pytest.mark.asyncio
    async def test_newest_first(self, store):
        ids = [await store.insert(f"title {i}", "content", 365) for i in range(3)]
        latest = await store.latest()
        assert [s.id for s in latest] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_limit(self, store):
        for i in range(12):
            await store.insert(f"title {i}", "content", 365)
        assert len(await store.latest()) == 10
        assert len(await store.latest(limit=3)) == 3

    @pytest.mark.asyncio
    async def test_expired_snippets_are_skipped(self, store, clock):
        short = await store.insert("short", "1 day", 1)
        long = await store.insert("long", "1 week", 7)

        clock.advance(days=2)
        latest = await store.latest()
        assert [s.id for s in latest] == [long]
        assert short not in [s.id for s in latest]

    @pytest.mark.asyncio
    async def test_empty(self, store):
        assert await store.latest() == []


class TestDatabaseErrors:
    @pytest.mark.asyncio
    async def test_operational_error_is_wrapped(self, clock):
        session = MagicMock()
        session.__aenter__.side_effect = OperationalError("SELECT", {}, Exception("down"))
        store = SqlSnippetStore(MagicMock(return_value=session), clock=clock)

        with pytest.raises(DatabaseError) as exc_info:
            await store.get(1)
        assert exc_info.value.context["error_type"] == "OperationalError"
