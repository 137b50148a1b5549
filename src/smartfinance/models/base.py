"""Shared column mixins."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Column type for every datetime field; values are naive UTC.
NAIVE_DATETIME = DateTime(timezone=False)


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo so we never store it."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampedModel(SQLModel):
    """Adds created/updated columns to a table model."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NAIVE_DATETIME)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NAIVE_DATETIME)

    def touch(self) -> None:
        self.updated_at = utcnow()
