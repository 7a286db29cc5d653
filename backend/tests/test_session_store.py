"""
Snippetbox — Session Tests
============================

What we test:
    ✅ Session get/put/pop/remove semantics and modification tracking
    ✅ pop is one-shot (flash messages survive exactly one read)
    ✅ renew_token swaps the token and keeps data and deadline
    ✅ SessionManager load/save round trip, expiry, corrupt payloads
    ✅ Renewal deletes the old token's row
    ✅ SqlSessionStore persists and expires rows
    ✅ Expired rows are purged from both stores, on demand and by the
       lifespan purge loop
"""

import asyncio
from datetime import timedelta

import pytest

from snippetbox.services.session_store import (
    MemorySessionStore,
    Session,
    SessionManager,
    SessionStatus,
    SqlSessionStore,
    purge_expired_sessions,
)


@pytest.fixture
def manager(clock):
    return SessionManager(MemorySessionStore(clock=clock), lifetime=timedelta(hours=12), clock=clock)


class TestSession:
    def test_new_session_has_no_token_until_written(self, manager):
        session = manager.new()
        assert session.token is None
        assert session.status is SessionStatus.UNMODIFIED

        session.put("flash", "hello")
        assert session.token is not None
        assert session.status is SessionStatus.MODIFIED

    def test_reading_does_not_modify(self, manager):
        session = manager.new()
        session.get("missing")
        session.exists("missing")
        assert session.pop("missing") is None
        session.remove("missing")
        assert session.status is SessionStatus.UNMODIFIED

    def test_pop_is_one_shot(self, manager):
        session = manager.new()
        session.put("flash", "Snippet successfully created")
        assert session.pop("flash") == "Snippet successfully created"
        assert session.pop("flash", "") == ""
        assert not session.exists("flash")

    def test_renew_token_keeps_values_and_deadline(self, manager):
        session = manager.new()
        session.put("csrf_token", "abc")
        old_token, deadline = session.token, session.deadline

        session.renew_token()

        assert session.token != old_token
        assert session.replaced_token == old_token
        assert session.deadline == deadline
        assert session.get("csrf_token") == "abc"

    def test_encode_decode(self, manager):
        session = manager.new()
        session.put("authenticated_user_id", 7)
        restored = Session.decode(session.token, session.encode())
        assert restored.get("authenticated_user_id") == 7
        assert restored.deadline == session.deadline


class TestSessionManager:
    @pytest.mark.asyncio
    async def test_save_and_load(self, manager):
        session = manager.new()
        session.put("authenticated_user_id", 1)
        await manager.save(session)
        assert session.status is SessionStatus.UNMODIFIED

        loaded = await manager.load(session.token)
        assert loaded.token == session.token
        assert loaded.get("authenticated_user_id") == 1

    @pytest.mark.asyncio
    async def test_unmodified_session_is_not_saved(self, manager):
        session = manager.new()
        await manager.save(session)
        assert len(manager.store) == 0

    @pytest.mark.asyncio
    async def test_unknown_token_gives_fresh_session(self, manager):
        session = await manager.load("no-such-token")
        assert session.token is None

    @pytest.mark.asyncio
    async def test_expired_session_is_discarded(self, manager, clock):
        session = manager.new()
        session.put("authenticated_user_id", 1)
        await manager.save(session)

        clock.advance(hours=12)
        loaded = await manager.load(session.token)
        assert loaded.token is None
        assert not loaded.exists("authenticated_user_id")

    @pytest.mark.asyncio
    async def test_renewal_does_not_extend_deadline(self, manager, clock):
        session = manager.new()
        session.put("k", "v")
        await manager.save(session)

        clock.advance(hours=6)
        loaded = await manager.load(session.token)
        loaded.renew_token()
        await manager.save(loaded)

        assert manager.seconds_left(loaded) == 6 * 3600

    @pytest.mark.asyncio
    async def test_renewal_deletes_old_token(self, manager):
        session = manager.new()
        session.put("k", "v")
        await manager.save(session)
        old_token = session.token

        session.renew_token()
        await manager.save(session)

        assert (await manager.load(old_token)).token is None
        assert (await manager.load(session.token)).get("k") == "v"
        assert len(manager.store) == 1

    @pytest.mark.asyncio
    async def test_corrupt_payload_gives_fresh_session(self, manager, clock):
        await manager.store.commit("tok", "{not json", clock.now + timedelta(hours=1))
        session = await manager.load("tok")
        assert session.token is None


class TestSqlSessionStore:
    @pytest.mark.asyncio
    async def test_commit_find_delete(self, sql_session_factory, clock):
        store = SqlSessionStore(sql_session_factory, clock=clock)

        await store.commit("tok", '{"deadline": "x"}', clock.now + timedelta(hours=1))
        assert await store.find("tok") == '{"deadline": "x"}'

        await store.commit("tok", "replaced", clock.now + timedelta(hours=1))
        assert await store.find("tok") == "replaced"

        await store.delete("tok")
        assert await store.find("tok") is None

    @pytest.mark.asyncio
    async def test_expired_row_is_not_found(self, sql_session_factory, clock):
        store = SqlSessionStore(sql_session_factory, clock=clock)
        await store.commit("tok", "payload", clock.now + timedelta(minutes=5))

        clock.advance(minutes=5)
        assert await store.find("tok") is None

    @pytest.mark.asyncio
    async def test_manager_over_sql_store(self, sql_session_factory, clock):
        manager = SessionManager(SqlSessionStore(sql_session_factory, clock=clock), clock=clock)
        session = manager.new()
        session.put("flash", "hi")
        await manager.save(session)

        loaded = await manager.load(session.token)
        assert loaded.pop("flash") == "hi"

    @pytest.mark.asyncio
    async def test_delete_expired(self, sql_session_factory, clock):
        store = SqlSessionStore(sql_session_factory, clock=clock)
        for i in range(5):
            await store.commit(f"old-{i}", "payload", clock.now + timedelta(hours=12))
        await store.commit("fresh", "payload", clock.now + timedelta(hours=24))

        clock.advance(hours=13)
        assert await store.delete_expired() == 5
        assert await store.delete_expired() == 0
        assert await store.find("fresh") == "payload"


class TestExpiredSessionPurge:
    @pytest.mark.asyncio
    async def test_memory_store_delete_expired(self, clock):
        store = MemorySessionStore(clock=clock)
        await store.commit("old", "payload", clock.now + timedelta(minutes=5))
        await store.commit("fresh", "payload", clock.now + timedelta(hours=1))

        clock.advance(minutes=5)
        assert await store.delete_expired() == 1
        assert len(store) == 1
        assert await store.find("fresh") == "payload"

    @pytest.mark.asyncio
    async def test_purge_loop_runs_until_cancelled(self, clock):
        store = MemorySessionStore(clock=clock)
        for i in range(3):
            await store.commit(f"tok-{i}", "payload", clock.now + timedelta(minutes=1))
        clock.advance(minutes=1)

        task = asyncio.create_task(purge_expired_sessions(store, interval=0.01))
        for _ in range(100):
            if len(store) == 0:
                break
            await asyncio.sleep(0.01)
        assert len(store) == 0

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
