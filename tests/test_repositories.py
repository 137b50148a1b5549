from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import DateTime

from smartfinance.models import Goal, GoalContribution, GoalMilestone, Transaction, User
from smartfinance.models.base import utcnow


def test_increment_spent_is_additive(budget_factory, budget_repo):
    budget = budget_factory(spent=10.0)

    budget_repo.increment_spent(budget.id, 5.5)
    updated = budget_repo.increment_spent(budget.id, 4.5)

    assert updated.spent == 20.0
    assert updated.updated_at >= budget.updated_at


def test_increment_spent_missing_budget(budget_repo):
    with pytest.raises(LookupError):
        budget_repo.increment_spent(12345, 1.0)


def test_find_matching_honours_subcategory(budget_factory, budget_repo, user):
    general = budget_factory(category="Food")
    groceries = budget_factory(category="Food", subcategory="Groceries")

    def ids(subcategory):
        return [
            b.id
            for b in budget_repo.find_matching(
                user_id=user.id, category="Food", subcategory=subcategory, on=date(2024, 3, 10)
            )
        ]

    assert ids(None) == [general.id, groceries.id]
    assert ids("Groceries") == [groceries.id]
    assert ids("Dining") == []


def test_budget_update_does_not_reset_spent(budget_factory, budget_repo, user):
    budget = budget_factory(spent=120.0)
    budget.name = "Renamed"

    saved = budget_repo.update(budget, user_id=user.id)

    assert saved.name == "Renamed"
    assert saved.spent == 120.0


def test_transaction_search_clamps_paging(transaction_factory, transaction_repo, user):
    for day in range(1, 4):
        transaction_factory(float(day), occurred_at=datetime(2024, 3, day))

    rows, total = transaction_repo.search(user_id=user.id, page=0, per_page=500)

    assert total == 3
    assert [r.amount for r in rows] == [3.0, 2.0, 1.0]


def test_filter_by_date_range_is_half_open(transaction_factory, transaction_repo, user):
    transaction_factory(1.0, occurred_at=datetime(2024, 3, 1))
    transaction_factory(2.0, occurred_at=datetime(2024, 3, 31, 23, 59))
    transaction_factory(3.0, occurred_at=datetime(2024, 4, 1))

    rows = transaction_repo.filter_by_date_range(datetime(2024, 3, 1), datetime(2024, 4, 1), user_id=user.id)

    assert [r.amount for r in rows] == [1.0, 2.0]


def test_goal_listing_orders_by_priority_rank(goal_factory, goal_repo, user):
    soon = utcnow() + timedelta(days=10)
    later = utcnow() + timedelta(days=100)
    goal_factory(title="low", priority="low", target_date=soon)
    goal_factory(title="high-later", priority="high", target_date=later)
    goal_factory(title="medium", priority="medium", target_date=soon)
    goal_factory(title="high-soon", priority="high", target_date=soon)

    titles = [g.title for g in goal_repo.list_all(user_id=user.id)]

    assert titles == ["high-soon", "high-later", "medium", "low"]


def test_goal_delete_cascades_children(goal_factory, goal_repo, session_factory, user):
    from sqlmodel import select

    from smartfinance.models import GoalMilestone

    goal = goal_factory(milestones=[(100.0, "a"), (200.0, "b")])

    assert goal_repo.delete(goal.id, user_id=user.id) is True
    assert goal_repo.delete(goal.id, user_id=user.id) is False
    with session_factory() as session:
        assert session.exec(select(GoalMilestone)).all() == []


@pytest.mark.parametrize("model", [User, Transaction, Goal, GoalMilestone, GoalContribution])
def test_datetime_columns_store_naive_utc(model):
    columns = [c for c in model.__table__.columns if isinstance(c.type, DateTime)]

    assert columns
    assert all(c.type.timezone is False for c in columns)


def test_naive_timestamps_round_trip(transaction_factory, transaction_repo, user):
    occurred = datetime(2024, 3, 15, 9, 30)
    created = transaction_factory(12.0, occurred_at=occurred)

    loaded = transaction_repo.get_by_id(created.id, user_id=user.id)

    assert loaded.occurred_at == occurred
    assert loaded.occurred_at.tzinfo is None
    assert loaded.created_at.tzinfo is None
