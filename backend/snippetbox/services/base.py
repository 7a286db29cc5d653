"""
Snippetbox — Storage Capability Interfaces
============================================

What:  Abstract base classes for the snippet and user stores.
How:   Concrete implementations inherit and implement every method:
       - SqlSnippetStore / SqlUserStore: async SQLAlchemy (production)
       - InMemorySnippetStore / InMemoryUserStore: deterministic doubles
Who:   Handlers receive an instance through FastAPI dependencies
       (`app.state.snippets`, `app.state.users`).

Contract shared by all implementations:
    - Missing records raise NotFoundError, never return None
    - Authentication failures raise InvalidCredentialsError with no hint of
      which half of the credentials was wrong
    - Storage failures raise DatabaseError
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from snippetbox.schemas.snippet import SnippetRecord
from snippetbox.schemas.user import UserRecord


def utc_now() -> datetime:
    """Default clock for every store."""
    return datetime.now(timezone.utc)


class SnippetStore(ABC):
    """Data access for snippets."""

    @abstractmethod
    async def insert(self, title: str, content: str, expires_days: int) -> int:
        """
        Store a new snippet that expires `expires_days` days from now.

        Returns:
            int: The new snippet's id.

        Raises:
            DatabaseError: The write failed.
        """
        ...

    @abstractmethod
    async def get(self, snippet_id: int) -> SnippetRecord:
        """
        Fetch one snippet.

        Raises:
            NotFoundError: No such id, or the snippet has expired. The two
                cases are indistinguishable to the caller.
        """
        ...

    @abstractmethod
    async def latest(self, limit: int = 10) -> List[SnippetRecord]:
        """Non-expired snippets, newest first by id, at most `limit`."""
        ...


class UserStore(ABC):
    """Data access and credential checks for user accounts."""

    @abstractmethod
    async def insert(self, name: str, email: str, password: str) -> None:
        """
        Create an account; the password is bcrypt-hashed before storage.

        Raises:
            DuplicateEmailError: The email is already registered.
        """
        ...

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> int:
        """
        Returns:
            int: The user id when email and password match.

        Raises:
            InvalidCredentialsError: Unknown email OR wrong password.
        """
        ...

    @abstractmethod
    async def exists(self, user_id: int) -> bool:
        ...

    @abstractmethod
    async def get(self, user_id: int) -> UserRecord:
        """Raises NotFoundError when the account does not exist."""
        ...

    @abstractmethod
    async def password_update(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        """
        Replace the password after re-verifying the current one.

        Raises:
            InvalidCredentialsError: `current_password` does not match.
            NotFoundError: The account does not exist.
        """
        ...
