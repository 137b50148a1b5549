"""Budget payloads."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from ...forms import PayloadForm, coerce_date
from ...models.budget import ALERT_CHANNELS, PERIOD_TYPES


class PeriodForm(PayloadForm):
    start: date
    end: date
    type: str

    @field_validator("start", "end", mode="before")
    @classmethod
    def accept_timestamps(cls, value: Any) -> Any:
        return coerce_date(value)

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if value not in PERIOD_TYPES:
            raise ValueError(f"Period type must be one of: {', '.join(PERIOD_TYPES)}")
        return value

    @model_validator(mode="after")
    def ensure_ordered(self) -> "PeriodForm":
        if self.end < self.start:
            raise ValueError("Period end must not be before period start")
        return self


class AlertsForm(PayloadForm):
    enabled: bool = True
    threshold: float = Field(default=80.0, ge=0, le=100)
    notifications: list[str] = Field(default_factory=lambda: ["email"])

    @field_validator("notifications")
    @classmethod
    def validate_channels(cls, value: list[str]) -> list[str]:
        unknown = [channel for channel in value if channel not in ALERT_CHANNELS]
        if unknown:
            raise ValueError(f"Unsupported notification channel: {', '.join(unknown)}")
        return value


class BudgetForm(PayloadForm):
    """Body of ``POST /api/budgets``."""

    name: str = Field(max_length=100)
    category: str = Field(max_length=64)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    amount: float
    period: PeriodForm
    alerts: AlertsForm = Field(default_factory=AlertsForm)
    rollover: bool = False

    @field_validator("name", "category")
    @classmethod
    def require_text(cls, value: str) -> str:
        if not value:
            raise ValueError("This field cannot be empty")
        return value

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Budget amount must be greater than 0")
        return value


class BudgetUpdateForm(PayloadForm):
    """Body of ``PUT /api/budgets/<id>``; only sent fields are applied."""

    name: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = Field(default=None, max_length=64)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    amount: Optional[float] = Field(default=None, gt=0)
    spent: Optional[float] = Field(default=None, ge=0)
    period: Optional[PeriodForm] = None
    alerts: Optional[AlertsForm] = None
    rollover: Optional[bool] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @model_validator(mode="after")
    def reject_nulls(self) -> "BudgetUpdateForm":
        for name in self.model_fields_set - {"subcategory"}:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


def budget_columns(form: BudgetForm | BudgetUpdateForm) -> dict[str, Any]:
    """Flatten nested period/alert payloads onto ``Budget`` column names."""

    sent = form.model_fields_set
    values: dict[str, Any] = {}
    for name in ("name", "category", "subcategory", "amount", "spent", "rollover", "is_active"):
        if name in sent and hasattr(form, name):
            values[name] = getattr(form, name)
    if isinstance(form, BudgetForm):
        values.setdefault("subcategory", form.subcategory)
        values.setdefault("rollover", form.rollover)
    if form.period is not None:
        values.update(
            period_start=form.period.start,
            period_end=form.period.end,
            period_type=form.period.type,
        )
    if form.alerts is not None:
        values.update(
            alerts_enabled=form.alerts.enabled,
            alert_threshold=form.alerts.threshold,
            alert_channels=list(form.alerts.notifications),
        )
    return values


__all__ = ["AlertsForm", "BudgetForm", "BudgetUpdateForm", "PeriodForm", "budget_columns"]
