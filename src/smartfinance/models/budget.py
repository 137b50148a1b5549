"""Budgeting tables."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from .base import TimestampedModel

PERIOD_TYPES = ("monthly", "weekly", "yearly", "custom")
ALERT_CHANNELS = ("email", "push", "sms")


class Budget(TimestampedModel, table=True):
    """A spending limit for one category over a date window."""

    __tablename__: ClassVar[str] = "budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    category: str = Field(nullable=False, index=True, max_length=64)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    amount: float = Field(nullable=False, ge=0)
    spent: float = Field(default=0.0, nullable=False, ge=0)

    period_start: date = Field(nullable=False, index=True)
    period_end: date = Field(nullable=False, index=True)
    period_type: str = Field(nullable=False, max_length=7)

    is_active: bool = Field(default=True, nullable=False, index=True)
    alerts_enabled: bool = Field(default=True, nullable=False)
    alert_threshold: float = Field(default=80.0, nullable=False, ge=0, le=100)
    alert_channels: list[str] = Field(
        default_factory=lambda: ["email"], sa_column=Column(JSON, nullable=False)
    )
    rollover: bool = Field(default=False, nullable=False)

    @property
    def remaining(self) -> float:
        return max(0.0, self.amount - self.spent)

    @property
    def spending_percentage(self) -> float:
        """Share of the limit consumed, 0 when the limit itself is 0."""

        return (self.spent / self.amount) * 100 if self.amount > 0 else 0.0
