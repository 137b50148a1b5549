"""Goal contributions, milestone tracking, and completion."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..errors import ContributionError, GoalCompletedError, NotFoundError
from ..infra.database import SessionFactory
from ..infra.repositories.goal import load_goal
from ..logging_config import get_logger
from ..models.base import utcnow
from ..models.goal import Goal, GoalContribution, GoalMilestone

logger = get_logger(__name__)


@dataclass(slots=True)
class ContributionResult:
    """The goal after a contribution plus what the contribution unlocked."""

    goal: Goal
    contribution: GoalContribution
    milestones_achieved: list[GoalMilestone] = field(default_factory=list)
    completed_now: bool = False


def validate_contribution(amount: object, source: object) -> tuple[float, str]:
    """Return a clean (amount, source) pair or raise :class:`ContributionError`."""

    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        raise ContributionError("Valid contribution amount is required")
    if not isinstance(source, str) or not source.strip():
        raise ContributionError("Contribution source is required")
    return float(amount), source.strip()


def apply_contribution(
    goal: Goal, contribution: GoalContribution, *, now: datetime
) -> tuple[list[GoalMilestone], bool]:
    """Append ``contribution`` and update totals, completion, and milestones in place.

    Returns the milestones newly achieved and whether the goal completed with
    this contribution. Completion and milestone flags only ever flip to True.
    """

    if goal.is_completed:
        raise GoalCompletedError("Cannot contribute to a completed goal")

    goal.contributions.append(contribution)
    goal.current_amount += contribution.amount

    completed_now = False
    if goal.current_amount >= goal.target_amount:
        goal.is_completed = True
        completed_now = True

    achieved: list[GoalMilestone] = []
    for milestone in goal.milestones:
        if not milestone.achieved and goal.current_amount >= milestone.amount:
            milestone.achieved = True
            milestone.achieved_at = now
            achieved.append(milestone)

    goal.updated_at = now
    return achieved, completed_now


def contribute(
    goal_id: int,
    *,
    user_id: int,
    amount: object,
    source: object,
    description: Optional[str] = None,
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
) -> ContributionResult:
    """Record a contribution against one of the user's goals in a single commit."""

    clean_amount, clean_source = validate_contribution(amount, source)
    moment = now or utcnow()

    with session_factory() as session:
        goal = load_goal(session, goal_id, user_id=user_id)
        if goal is None:
            raise NotFoundError("Goal not found")

        contribution = GoalContribution(
            amount=clean_amount,
            contributed_at=moment,
            source=clean_source,
            description=(description or "").strip(),
        )
        achieved, completed_now = apply_contribution(goal, contribution, now=moment)
        session.add(goal)
        session.commit()

    logger.info(
        "Goal contribution recorded",
        extra={
            "goal_id": goal_id,
            "amount": clean_amount,
            "current_amount": goal.current_amount,
            "milestones_achieved": [m.amount for m in achieved],
            "completed": goal.is_completed,
        },
    )
    return ContributionResult(
        goal=goal,
        contribution=contribution,
        milestones_achieved=achieved,
        completed_now=completed_now,
    )


__all__ = ["ContributionResult", "apply_contribution", "contribute", "validate_contribution"]
