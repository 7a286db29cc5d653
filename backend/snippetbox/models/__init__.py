"""ORM models. Importing this package registers every table with Base.metadata."""

from snippetbox.models.session import SessionRow
from snippetbox.models.snippet import Snippet
from snippetbox.models.user import User

__all__ = ["SessionRow", "Snippet", "User"]
