"""Demo data for local development."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Optional

from .errors import ConflictError
from .infra.database import SessionFactory
from .infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelTransactionRepository,
)
from .logging_config import get_logger
from .models import Budget, Goal, GoalMilestone, Transaction
from .services import auth
from .services.budgeting import apply_expense

logger = get_logger(__name__)

DEMO_EMAIL = "demo@smartfinance.local"
DEMO_PASSWORD = "demo-password"

# (day of month, kind, category, subcategory, amount, description)
_MONTHLY_ENTRIES = (
    (1, "income", "Salary", None, 4200.0, "Monthly salary"),
    (3, "expense", "Housing", "Rent", 1400.0, "Apartment rent"),
    (5, "expense", "Food", "Groceries", 126.4, "Weekly groceries"),
    (9, "expense", "Transport", None, 45.0, "Transit pass top-up"),
    (12, "expense", "Food", "Dining", 62.5, "Dinner out"),
    (15, "income", "Freelance", None, 350.0, "Design gig"),
    (19, "expense", "Utilities", None, 89.9, "Power bill"),
    (24, "expense", "Food", "Groceries", 98.2, "Weekly groceries"),
)


def _month_start(day: date, back: int) -> date:
    index = day.year * 12 + (day.month - 1) - back
    return date(index // 12, index % 12 + 1, 1)


def run_demo_seed(session_factory: SessionFactory, *, today: Optional[date] = None) -> Optional[str]:
    """Create a demo user with three months of activity.

    Returns the demo email, or ``None`` when the demo user already exists.
    """

    today = today or date.today()
    try:
        user = auth.create_user(
            name="Demo User",
            email=DEMO_EMAIL,
            password=DEMO_PASSWORD,
            session_factory=session_factory,
        )
    except ConflictError:
        logger.info("Demo user already present; skipping seed")
        return None

    budgets = SQLModelBudgetRepository(session_factory)
    transactions = SQLModelTransactionRepository(session_factory)
    goals = SQLModelGoalRepository(session_factory)

    month_start = _month_start(today, 0)
    month_end = month_start.replace(day=monthrange(month_start.year, month_start.month)[1])
    for name, category, subcategory, amount in (
        ("Groceries this month", "Food", "Groceries", 400.0),
        ("Transport this month", "Transport", None, 120.0),
        ("Utilities this month", "Utilities", None, 150.0),
    ):
        budgets.create(
            Budget(
                name=name,
                category=category,
                subcategory=subcategory,
                amount=amount,
                period_start=month_start,
                period_end=month_end,
                period_type="monthly",
            ),
            user_id=user.id,  # type: ignore[arg-type]
        )

    created = 0
    for back in (2, 1, 0):
        start = _month_start(today, back)
        for day, kind, category, subcategory, amount, description in _MONTHLY_ENTRIES:
            occurred = datetime(start.year, start.month, day, 12, 0)
            if occurred.date() > today:
                continue
            transaction = transactions.create(
                Transaction(
                    kind=kind,
                    category=category,
                    subcategory=subcategory,
                    amount=amount,
                    description=description,
                    occurred_at=occurred,
                ),
                user_id=user.id,  # type: ignore[arg-type]
            )
            apply_expense(transaction, repository=budgets)
            created += 1

    goals.create(
        Goal(
            title="Emergency fund",
            description="Three months of expenses",
            goal_type="emergency_fund",
            target_amount=6000.0,
            target_date=datetime.combine(today + timedelta(days=365), datetime.min.time()),
            priority="high",
            category="Savings",
        ),
        [
            GoalMilestone(amount=1500.0, description="First month covered"),
            GoalMilestone(amount=3000.0, description="Halfway there"),
        ],
        user_id=user.id,  # type: ignore[arg-type]
    )

    logger.info("Demo data seeded", extra={"user_id": user.id, "transactions": created})
    return DEMO_EMAIL


__all__ = ["DEMO_EMAIL", "DEMO_PASSWORD", "run_demo_seed"]
