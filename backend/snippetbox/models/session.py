"""
Snippetbox — Session SQLAlchemy Model
=======================================

What:  ORM model for the `sessions` table owned by SqlSessionStore.

Columns:
    token:  Opaque random token, also the cookie value
    data:   JSON-encoded session payload (deadline + values)
    expiry: Absolute expiry; rows past it are treated as absent
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class SessionRow(Base):
    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)

    data: Mapped[str] = mapped_column(Text, nullable=False)

    expiry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("sessions_expiry_idx", "expiry"),
    )

    def __repr__(self) -> str:
        return f"<SessionRow(expiry='{self.expiry}')>"
