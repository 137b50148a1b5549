"""Goal payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from ...forms import PayloadForm, naive_utc
from ...models.base import utcnow
from ...models.goal import (
    AUTO_CONTRIBUTION_FREQUENCIES,
    GOAL_PRIORITIES,
    GOAL_TYPES,
    GoalMilestone,
)


class MilestoneForm(PayloadForm):
    amount: float = Field(gt=0)
    description: str = Field(min_length=1, max_length=255)

    def to_model(self) -> GoalMilestone:
        return GoalMilestone(amount=self.amount, description=self.description)


class AutoContributionForm(PayloadForm):
    enabled: bool = False
    amount: float = Field(default=0.0, ge=0)
    frequency: str = "monthly"
    source: str = Field(default="", max_length=64)

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, value: str) -> str:
        if value not in AUTO_CONTRIBUTION_FREQUENCIES:
            raise ValueError(
                f"Frequency must be one of: {', '.join(AUTO_CONTRIBUTION_FREQUENCIES)}"
            )
        return value


class _GoalFields(PayloadForm):
    title: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    goal_type: Optional[str] = Field(default=None, alias="type")
    target_amount: Optional[float] = Field(default=None, alias="targetAmount")
    target_date: Optional[datetime] = Field(default=None, alias="targetDate")
    priority: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=64)
    milestones: Optional[list[MilestoneForm]] = None
    auto_contribution: Optional[AutoContributionForm] = Field(
        default=None, alias="autoContribution"
    )

    @field_validator("target_date")
    @classmethod
    def strip_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    def _check_values(self) -> None:
        sent = self.model_fields_set
        if "goal_type" in sent and self.goal_type not in GOAL_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(GOAL_TYPES)}")
        if "priority" in sent and self.priority not in GOAL_PRIORITIES:
            raise ValueError(f"Priority must be one of: {', '.join(GOAL_PRIORITIES)}")
        if "target_amount" in sent and (self.target_amount is None or self.target_amount <= 0):
            raise ValueError("Target amount must be greater than 0")
        if "target_date" in sent and (self.target_date is None or self.target_date <= utcnow()):
            raise ValueError("Target date must be in the future")

    def column_values(self) -> dict[str, Any]:
        """Map sent fields onto ``Goal`` columns; milestones are handled separately."""

        sent = self.model_fields_set
        values: dict[str, Any] = {}
        for name in ("title", "description", "goal_type", "target_amount", "target_date", "priority", "category"):
            if name in sent:
                values[name] = getattr(self, name)
        if self.auto_contribution is not None:
            values.update(
                auto_enabled=self.auto_contribution.enabled,
                auto_amount=self.auto_contribution.amount,
                auto_frequency=self.auto_contribution.frequency,
                auto_source=self.auto_contribution.source,
            )
        return values

    def milestone_models(self) -> Optional[list[GoalMilestone]]:
        if self.milestones is None:
            return None
        return [milestone.to_model() for milestone in self.milestones]


class GoalForm(_GoalFields):
    """Body of ``POST /api/goals``."""

    @model_validator(mode="after")
    def ensure_required(self) -> "GoalForm":
        if (
            not self.title
            or not self.goal_type
            or self.target_amount is None
            or self.target_date is None
            or not self.category
        ):
            raise ValueError("Title, type, target amount, target date, and category are required")
        self._check_values()
        return self

    def column_values(self) -> dict[str, Any]:
        values = super().column_values()
        values["priority"] = self.priority or "medium"
        return values


class GoalUpdateForm(_GoalFields):
    """Body of ``PUT /api/goals/<id>``; progress fields are not editable."""

    @model_validator(mode="after")
    def ensure_valid_changes(self) -> "GoalUpdateForm":
        for name in ("title", "goal_type", "category"):
            if name in self.model_fields_set and not getattr(self, name):
                raise ValueError(f"{name.replace('_', ' ').capitalize()} cannot be empty")
        self._check_values()
        return self


class ContributionForm(PayloadForm):
    """Body of ``POST /api/goals/<id>/contribute``; values are checked by the service."""

    amount: Any = None
    source: Any = None
    description: Optional[str] = Field(default=None, max_length=255)


__all__ = ["ContributionForm", "GoalForm", "GoalUpdateForm", "MilestoneForm"]
