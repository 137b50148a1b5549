"""Transaction payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from pydantic import Field, field_validator, model_validator

from ...forms import PayloadForm, naive_utc
from ...models.transaction import RECURRENCE_FREQUENCIES, TRANSACTION_KINDS


class RecurrenceForm(PayloadForm):
    frequency: str
    interval: int = Field(default=1, ge=1)
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, value: str) -> str:
        if value not in RECURRENCE_FREQUENCIES:
            raise ValueError(f"Frequency must be one of: {', '.join(RECURRENCE_FREQUENCIES)}")
        return value

    @field_validator("end_date")
    @classmethod
    def strip_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class CoordinatesForm(PayloadForm):
    lat: Optional[float] = None
    lng: Optional[float] = None


class LocationForm(PayloadForm):
    name: Optional[str] = Field(default=None, max_length=128)
    coordinates: CoordinatesForm = Field(default_factory=CoordinatesForm)


class _TransactionFields(PayloadForm):
    kind: Optional[str] = Field(default=None, alias="type")
    category: Optional[str] = Field(default=None, max_length=64)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    amount: Optional[float] = None
    description: Optional[str] = Field(default=None, max_length=500)
    occurred_at: Optional[datetime] = Field(default=None, alias="date")
    tags: Optional[list[str]] = None
    is_recurring: Optional[bool] = Field(default=None, alias="isRecurring")
    recurring: Optional[RecurrenceForm] = Field(default=None, alias="recurringDetails")
    location: Optional[LocationForm] = None

    @field_validator("occurred_at")
    @classmethod
    def strip_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: str | Iterable[str] | None) -> list[str] | Iterable[str] | None:
        """Convert comma-separated tag strings into a list."""

        if isinstance(value, str):
            return [tag for tag in (part.strip() for part in value.split(",")) if tag]
        return value

    def column_values(self) -> dict[str, object]:
        """Map the fields that were sent onto ``Transaction`` column names."""

        sent = self.model_fields_set
        values: dict[str, object] = {}
        for name in ("kind", "category", "subcategory", "amount", "description", "occurred_at", "tags"):
            if name in sent:
                values[name] = getattr(self, name)
        if "tags" in values and values["tags"] is None:
            values["tags"] = []
        if values.get("occurred_at", True) is None:
            del values["occurred_at"]

        if self.is_recurring is False:
            values.update(recurrence_frequency=None, recurrence_interval=None, recurrence_end=None)
        elif self.recurring is not None:
            values.update(
                recurrence_frequency=self.recurring.frequency,
                recurrence_interval=self.recurring.interval,
                recurrence_end=self.recurring.end_date,
            )
        if "location" in sent:
            location = self.location
            values.update(
                location_name=location.name if location else None,
                location_lat=location.coordinates.lat if location else None,
                location_lng=location.coordinates.lng if location else None,
            )
        return values


class TransactionForm(_TransactionFields):
    """Body of ``POST /api/transactions``."""

    @model_validator(mode="after")
    def ensure_required(self) -> "TransactionForm":
        if not self.kind or not self.category or self.amount is None or not self.description:
            raise ValueError("Type, category, amount, and description are required")
        if self.kind not in TRANSACTION_KINDS:
            raise ValueError("Type must be either income or expense")
        if self.amount <= 0:
            raise ValueError("Amount must be greater than 0")
        return self


class TransactionUpdateForm(_TransactionFields):
    """Body of ``PUT /api/transactions/<id>``; every field is optional."""

    @model_validator(mode="after")
    def ensure_valid_changes(self) -> "TransactionUpdateForm":
        sent = self.model_fields_set
        if "kind" in sent and self.kind not in TRANSACTION_KINDS:
            raise ValueError("Type must be either income or expense")
        if "amount" in sent and (self.amount is None or self.amount <= 0):
            raise ValueError("Amount must be greater than 0")
        for name in ("category", "description"):
            if name in sent and not getattr(self, name):
                raise ValueError(f"{name.capitalize()} cannot be empty")
        return self


__all__ = ["TransactionForm", "TransactionUpdateForm"]
