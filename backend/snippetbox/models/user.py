"""
Snippetbox — User SQLAlchemy Model
====================================

What:  ORM model representing the `users` table.
Who:   Used by SqlUserStore and Alembic.

The unique constraint is named `users_uc_email` so that SqlUserStore can
recognise a duplicate signup by inspecting the integrity error raised by
the INSERT itself (no SELECT-then-INSERT race).
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class User(Base):
    """A registered account. Password stored as a bcrypt hash (60 chars)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    hashed_password: Mapped[str] = mapped_column(String(60), nullable=False)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("email", name="users_uc_email"),
    )

    def __repr__(self) -> str:
        # Never include the hash
        return f"<User(id={self.id}, email='{self.email}')>"
