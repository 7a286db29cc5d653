"""
Snippetbox — Snippet Record Schema
====================================

What:  Pydantic record returned by every SnippetStore implementation.
Why:   Handlers and templates work with one plain, typed shape regardless of
       whether the data came from SQLAlchemy rows or the in-memory double.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class SnippetRecord(BaseModel):
    id: int = Field(gt=0, description="Positive snippet identifier")
    title: str
    content: str
    created: datetime
    expires: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created", "expires")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """SQLite hands back naive datetimes; everything stored is UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
