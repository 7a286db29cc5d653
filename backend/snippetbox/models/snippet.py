"""
Snippetbox — Snippet SQLAlchemy Model
=======================================

What:  ORM model representing the `snippets` table.
Who:   Used by SqlSnippetStore for inserts and queries, and by Alembic.

Table Design:
    - Integer primary key: snippet URLs are /snippet/view/{id}
    - title: VARCHAR(100), matching the form's 100-character limit
    - created / expires: UTC timestamps; a row is visible only while
      now < expires. Nothing ever deletes expired rows, every query
      filters them out instead.

    Index on expires:
        Both `get` and `latest` filter on expires > now.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class Snippet(Base):
    """
    A stored piece of text with a title and an expiry.

    Lifecycle:
        1. Inserted by the create-snippet handler (expires = created + N days)
        2. Visible on the home page and its view page until expiry
        3. Never updated, never deleted
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_snippets_expires", "expires"),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', expires='{self.expires}')>"
