"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from .base import NAIVE_DATETIME, TimestampedModel

TRANSACTION_KINDS = ("income", "expense")
RECURRENCE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")
PAYMENT_STATUSES = ("pending", "completed", "failed")


class Transaction(TimestampedModel, table=True):
    """A single income or expense entry.

    Amounts are always stored as positive numbers; ``kind`` carries the sign.
    """

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    kind: str = Field(nullable=False, index=True, max_length=7)
    category: str = Field(nullable=False, index=True, max_length=64)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    amount: float = Field(nullable=False, ge=0)
    description: str = Field(nullable=False, max_length=500)
    occurred_at: datetime = Field(nullable=False, index=True, sa_type=NAIVE_DATETIME)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    recurrence_frequency: Optional[str] = Field(default=None, max_length=7)
    recurrence_interval: Optional[int] = Field(default=None)
    recurrence_end: Optional[datetime] = Field(default=None, sa_type=NAIVE_DATETIME)

    location_name: Optional[str] = Field(default=None, max_length=128)
    location_lat: Optional[float] = Field(default=None)
    location_lng: Optional[float] = Field(default=None)

    # Gateway bookkeeping, populated once a payment is verified
    payment_method: Optional[str] = Field(default=None, max_length=16)
    payment_status: Optional[str] = Field(default=None, max_length=9)
    payment_order_id: Optional[str] = Field(default=None, index=True, max_length=64)
    payment_id: Optional[str] = Field(default=None, index=True, max_length=64)
    payment_signature: Optional[str] = Field(default=None, max_length=128)
    payment_reference: Optional[str] = Field(default=None, max_length=64)

    @property
    def is_expense(self) -> bool:
        return self.kind == "expense"
