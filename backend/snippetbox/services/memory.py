"""
Snippetbox — In-Memory Stores
===============================

What:  Deterministic SnippetStore and UserStore implementations kept in dicts.
Who:   Handler tests build create_app() with these instead of a database.

They follow the same contract as the SQL stores (NotFoundError for
expired snippets, DuplicateEmailError on a second signup with the same
email, one InvalidCredentialsError for every login failure), so tests
exercise real behaviour rather than canned answers. Passwords are still
bcrypt-hashed; tests pass a low cost to keep them fast.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from snippetbox.exceptions import DuplicateEmailError, InvalidCredentialsError, NotFoundError
from snippetbox.schemas.snippet import SnippetRecord
from snippetbox.schemas.user import UserRecord
from snippetbox.services.base import SnippetStore, UserStore, utc_now
from snippetbox.services.passwords import check_password, hash_password


class InMemorySnippetStore(SnippetStore):
    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._snippets: Dict[int, SnippetRecord] = {}
        self._next_id = 1

    async def insert(self, title: str, content: str, expires_days: int) -> int:
        now = self._clock()
        snippet_id = self._next_id
        self._next_id += 1
        self._snippets[snippet_id] = SnippetRecord(
            id=snippet_id,
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        return snippet_id

    async def get(self, snippet_id: int) -> SnippetRecord:
        snippet = self._snippets.get(snippet_id)
        if snippet is None or snippet.expires <= self._clock():
            raise NotFoundError(resource="snippet", resource_id=snippet_id)
        return snippet

    async def latest(self, limit: int = 10) -> List[SnippetRecord]:
        now = self._clock()
        live = [s for s in self._snippets.values() if s.expires > now]
        live.sort(key=lambda s: s.id, reverse=True)
        return live[:limit]


@dataclass
class _StoredUser:
    id: int
    name: str
    email: str
    hashed_password: str
    created: datetime


class InMemoryUserStore(UserStore):
    def __init__(self, cost: int = 4, clock: Callable[[], datetime] = utc_now):
        self._cost = cost
        self._clock = clock
        self._users: Dict[int, _StoredUser] = {}
        self._next_id = 1

    def _find_by_email(self, email: str):
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def insert(self, name: str, email: str, password: str) -> None:
        hashed = await hash_password(password, self._cost)
        # Checked after hashing, mirroring the unique-constraint-at-write behaviour
        if self._find_by_email(email) is not None:
            raise DuplicateEmailError(email=email)
        user_id = self._next_id
        self._next_id += 1
        self._users[user_id] = _StoredUser(
            id=user_id,
            name=name,
            email=email,
            hashed_password=hashed,
            created=self._clock(),
        )

    async def authenticate(self, email: str, password: str) -> int:
        user = self._find_by_email(email)
        if user is None or not await check_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return user.id

    async def exists(self, user_id: int) -> bool:
        return user_id in self._users

    async def get(self, user_id: int) -> UserRecord:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserRecord(id=user.id, name=user.name, email=user.email, created=user.created)

    async def password_update(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        if not await check_password(current_password, user.hashed_password):
            raise InvalidCredentialsError(context={"user_id": user_id})
        user.hashed_password = await hash_password(new_password, self._cost)

    def delete(self, user_id: int) -> None:
        """Drop an account; lets tests simulate a session outliving its user."""
        self._users.pop(user_id, None)
