"""
Snippetbox — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── clock: Controllable UTC clock shared by the in-memory stores
    ├── snippet_store / user_store / session_store: In-memory stores
    ├── app: create_app() wired to the in-memory stores (no database)
    ├── client: HTTPX AsyncClient over ASGITransport (https://testserver)
    ├── sql_session_factory: async_sessionmaker on a temporary SQLite file
    ├── registered_user: An account in user_store, with its credentials
    └── logged_in_client: `client` after a successful login as registered_user

Helpers:
    csrf_token_from(html) pulls the hidden csrf_token field out of a page;
    login(client, email, password) performs a full GET + POST login.
"""

import os
import re
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports: snippetbox.main
# builds a module-level app (and engine) from these on import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_COST"] = "4"

from snippetbox.config import Settings  # noqa: E402
from snippetbox.database import build_engine, build_session_factory, create_schema  # noqa: E402
from snippetbox.main import create_app  # noqa: E402
from snippetbox.services.memory import InMemorySnippetStore, InMemoryUserStore  # noqa: E402
from snippetbox.services.session_store import MemorySessionStore  # noqa: E402

CSRF_FIELD_RX = re.compile(r'<input type="hidden" name="csrf_token" value="([^"]+)">')


def csrf_token_from(html: str) -> str:
    match = CSRF_FIELD_RX.search(html)
    assert match is not None, "page has no csrf_token field"
    return match.group(1)


async def login(client: AsyncClient, email: str, password: str):
    """GET the login form for a token, then POST the credentials."""
    page = await client.get("/user/login")
    return await client.post(
        "/user/login",
        data={
            "email": email,
            "password": password,
            "csrf_token": csrf_token_from(page.text),
        },
    )


class FrozenClock:
    """A clock that only moves when a test tells it to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///./unused.db",
        log_level="WARNING",
        bcrypt_cost=4,
    )


@pytest.fixture
def snippet_store(clock):
    return InMemorySnippetStore(clock=clock)


@pytest.fixture
def user_store(clock):
    return InMemoryUserStore(cost=4, clock=clock)


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def app(test_settings, snippet_store, user_store, session_store):
    """
    The full application with every middleware and route, backed by the
    in-memory stores. No engine is created.
    """
    return create_app(
        test_settings,
        snippets=snippet_store,
        users=user_store,
        session_store=session_store,
    )


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    https base URL so the Secure session cookie is sent back. Redirects are
    not followed; tests assert on the 303s themselves.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def registered_user(user_store):
    await user_store.insert("Alice Jones", "alice@example.com", "pa$$word123")
    return {"name": "Alice Jones", "email": "alice@example.com", "password": "pa$$word123"}


@pytest_asyncio.fixture
async def sql_session_factory(tmp_path, test_settings):
    """async_sessionmaker over a fresh SQLite file with the full schema."""
    engine = build_engine(test_settings, url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_schema(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def logged_in_client(client, registered_user):
    """`client` with a session authenticated as registered_user."""
    response = await login(client, registered_user["email"], registered_user["password"])
    assert response.status_code == 303
    return client
