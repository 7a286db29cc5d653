"""
Snippetbox — User Record Schema
=================================

What:  Pydantic record returned by UserStore.get().

Security: the password hash is deliberately not part of the record, so it
can never end up in a template context.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


class UserRecord(BaseModel):
    id: int
    name: str
    email: str
    created: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
