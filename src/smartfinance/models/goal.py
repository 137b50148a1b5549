"""Savings goals with milestones and contribution history."""

from __future__ import annotations

import math
from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .base import NAIVE_DATETIME, TimestampedModel, utcnow

GOAL_TYPES = ("savings", "debt_payment", "investment", "purchase", "emergency_fund")
GOAL_PRIORITIES = ("low", "medium", "high")
AUTO_CONTRIBUTION_FREQUENCIES = ("weekly", "monthly")


class Goal(TimestampedModel, table=True):
    """A target amount the user saves towards."""

    __tablename__: ClassVar[str] = "goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    goal_type: str = Field(nullable=False, index=True, max_length=16)
    target_amount: float = Field(nullable=False, ge=0)
    current_amount: float = Field(default=0.0, nullable=False, ge=0)
    target_date: datetime = Field(nullable=False, index=True, sa_type=NAIVE_DATETIME)
    is_completed: bool = Field(default=False, nullable=False, index=True)
    priority: str = Field(default="medium", nullable=False, index=True, max_length=6)
    category: str = Field(nullable=False, max_length=64)

    # Stored for display; nothing schedules these yet
    auto_enabled: bool = Field(default=False, nullable=False)
    auto_amount: float = Field(default=0.0, nullable=False, ge=0)
    auto_frequency: str = Field(default="monthly", nullable=False, max_length=7)
    auto_source: str = Field(default="", nullable=False, max_length=64)

    milestones: list["GoalMilestone"] = Relationship(
        back_populates="goal",
        sa_relationship=relationship(
            "GoalMilestone",
            back_populates="goal",
            order_by="GoalMilestone.position",
            cascade="all, delete-orphan",
        ),
    )
    contributions: list["GoalContribution"] = Relationship(
        back_populates="goal",
        sa_relationship=relationship(
            "GoalContribution",
            back_populates="goal",
            order_by="GoalContribution.id",
            cascade="all, delete-orphan",
        ),
    )

    @property
    def progress_percentage(self) -> float:
        return (self.current_amount / self.target_amount) * 100 if self.target_amount > 0 else 0.0

    @property
    def amount_remaining(self) -> float:
        return max(0.0, self.target_amount - self.current_amount)

    def days_remaining(self, now: datetime | None = None) -> int:
        delta = self.target_date - (now or utcnow())
        return math.ceil(delta.total_seconds() / 86400)


class GoalMilestone(SQLModel, table=True):
    """Intermediate amount within a goal."""

    __tablename__: ClassVar[str] = "goal_milestone"

    id: Optional[int] = Field(default=None, primary_key=True)
    goal_id: int = Field(foreign_key="goal.id", nullable=False, index=True)
    position: int = Field(default=0, nullable=False)
    amount: float = Field(nullable=False, ge=0)
    description: str = Field(nullable=False, max_length=255)
    achieved: bool = Field(default=False, nullable=False)
    achieved_at: Optional[datetime] = Field(default=None, sa_type=NAIVE_DATETIME)

    goal: "Goal" = Relationship(
        back_populates="milestones",
        sa_relationship=relationship("Goal", back_populates="milestones"),
    )


class GoalContribution(SQLModel, table=True):
    """One entry in a goal's append-only contribution history."""

    __tablename__: ClassVar[str] = "goal_contribution"

    id: Optional[int] = Field(default=None, primary_key=True)
    goal_id: int = Field(foreign_key="goal.id", nullable=False, index=True)
    amount: float = Field(nullable=False, ge=0)
    contributed_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NAIVE_DATETIME)
    source: str = Field(nullable=False, max_length=64)
    description: str = Field(default="", max_length=255)

    goal: "Goal" = Relationship(
        back_populates="contributions",
        sa_relationship=relationship("Goal", back_populates="contributions"),
    )
