"""Goal contribution rule: history, running total, milestones, completion."""

from __future__ import annotations

from datetime import datetime

import pytest

from smartfinance.errors import ContributionError, GoalCompletedError, NotFoundError
from smartfinance.models import Goal, GoalContribution, GoalMilestone
from smartfinance.services import goals


def test_contribution_reaches_milestone_then_completes(goal_factory, goal_repo, session_factory, user):
    goal = goal_factory(target_amount=1000.0, current_amount=800.0, milestones=[(900.0, "Almost")])

    first = goals.contribute(
        goal.id, user_id=user.id, amount=150.0, source="Salary", session_factory=session_factory
    )
    assert first.goal.current_amount == 950.0
    assert first.goal.is_completed is False
    assert first.completed_now is False
    assert [m.amount for m in first.milestones_achieved] == [900.0]
    assert first.goal.milestones[0].achieved is True
    assert first.goal.milestones[0].achieved_at is not None

    second = goals.contribute(
        goal.id, user_id=user.id, amount=100.0, source="Bonus", session_factory=session_factory
    )
    assert second.goal.current_amount == 1050.0
    assert second.goal.is_completed is True
    assert second.completed_now is True
    assert second.milestones_achieved == []

    stored = goal_repo.get_by_id(goal.id, user_id=user.id)
    assert stored.current_amount == 1050.0
    assert stored.is_completed is True
    assert [(c.amount, c.source) for c in stored.contributions] == [(150.0, "Salary"), (100.0, "Bonus")]


def test_milestone_achieved_timestamp_is_not_overwritten(goal_factory, session_factory, user):
    goal = goal_factory(target_amount=1000.0, milestones=[(100.0, "Start")])
    first_moment = datetime(2024, 1, 1, 10, 0)

    goals.contribute(
        goal.id, user_id=user.id, amount=150.0, source="Cash",
        session_factory=session_factory, now=first_moment,
    )
    result = goals.contribute(
        goal.id, user_id=user.id, amount=50.0, source="Cash",
        session_factory=session_factory, now=datetime(2024, 2, 1, 10, 0),
    )

    assert result.milestones_achieved == []
    assert result.goal.milestones[0].achieved_at == first_moment


def test_single_contribution_can_cross_several_milestones(goal_factory, session_factory, user):
    goal = goal_factory(
        target_amount=500.0,
        milestones=[(100.0, "First"), (250.0, "Half"), (400.0, "Most")],
    )

    result = goals.contribute(
        goal.id, user_id=user.id, amount=600.0, source="Windfall", session_factory=session_factory
    )

    assert [m.amount for m in result.milestones_achieved] == [100.0, 250.0, 400.0]
    assert result.completed_now is True
    assert all(m.achieved for m in result.goal.milestones)


def test_completed_goal_rejects_contribution_without_changes(goal_factory, goal_repo, session_factory, user):
    goal = goal_factory(target_amount=100.0, current_amount=100.0, is_completed=True)

    with pytest.raises(GoalCompletedError):
        goals.contribute(
            goal.id, user_id=user.id, amount=10.0, source="Cash", session_factory=session_factory
        )

    stored = goal_repo.get_by_id(goal.id, user_id=user.id)
    assert stored.current_amount == 100.0
    assert stored.contributions == []


@pytest.mark.parametrize(
    ("amount", "source"),
    [(0, "Cash"), (-5.0, "Cash"), ("10", "Cash"), (None, "Cash"), (True, "Cash"), (10.0, ""), (10.0, "   ")],
)
def test_invalid_contribution_is_rejected(goal_factory, goal_repo, session_factory, user, amount, source):
    goal = goal_factory()

    with pytest.raises(ContributionError):
        goals.contribute(
            goal.id, user_id=user.id, amount=amount, source=source, session_factory=session_factory
        )

    assert goal_repo.get_by_id(goal.id, user_id=user.id).current_amount == 0.0


def test_unknown_or_foreign_goal_is_not_found(goal_factory, session_factory, user):
    from smartfinance.services import auth

    other = auth.create_user(
        name="Other", email="other@example.com", password="pass-word", session_factory=session_factory
    )
    goal = goal_factory(owner=other)

    with pytest.raises(NotFoundError):
        goals.contribute(goal.id, user_id=user.id, amount=5.0, source="Cash", session_factory=session_factory)
    with pytest.raises(NotFoundError):
        goals.contribute(9999, user_id=user.id, amount=5.0, source="Cash", session_factory=session_factory)


def test_apply_contribution_mutates_in_memory_goal():
    goal = Goal(
        title="Bike",
        goal_type="purchase",
        target_amount=300.0,
        current_amount=0.0,
        target_date=datetime(2030, 1, 1),
        category="Fun",
        user_id=1,
    )
    goal.milestones = [GoalMilestone(amount=150.0, description="Half", position=0)]
    goal.contributions = []
    moment = datetime(2024, 6, 1)

    achieved, completed = goals.apply_contribution(
        goal, GoalContribution(amount=150.0, source="Cash", contributed_at=moment), now=moment
    )

    assert completed is False
    assert achieved == goal.milestones
    assert goal.milestones[0].achieved_at == moment
    assert len(goal.contributions) == 1


def test_validate_contribution_normalises_values():
    assert goals.validate_contribution(25, "  Savings ") == (25.0, "Savings")
