"""Budget consumption: charging expenses against matching budgets."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from ..logging_config import get_logger
from ..models.budget import Budget
from ..models.transaction import Transaction

logger = get_logger(__name__)


class BudgetRepository(Protocol):
    """Persistence operations the consumption rule relies on."""

    def find_matching(
        self, *, user_id: int, category: str, subcategory: Optional[str], on: date
    ) -> Sequence[Budget]:  # pragma: no cover - interface
        ...

    def increment_spent(self, budget_id: int, amount: float) -> Budget:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class BudgetAlert:
    """Payload for a threshold-exceeded notification."""

    recipient: str
    budget_id: int
    budget_name: str
    category: Optional[str]
    spent: float
    amount: float
    percentage: float
    threshold: float


class AlertNotifier(Protocol):
    def notify_budget_threshold(self, alert: BudgetAlert) -> bool:  # pragma: no cover
        """Return True only when the alert was actually delivered."""
        ...


@dataclass(frozen=True, slots=True)
class BudgetUpdate:
    """Outcome of charging one expense against one budget."""

    budget: Budget
    percentage: float
    alerted: bool


def spending_percentage(spent: float, amount: float) -> float:
    """Share of ``amount`` consumed by ``spent``; 0 for a zero limit."""

    return (spent / amount) * 100 if amount > 0 else 0.0


def should_alert(budget: Budget, percentage: float) -> bool:
    """Email alerts fire on every expense that leaves the budget at or over threshold.

    A zero-limit budget reports 0% and never alerts, whatever its threshold.
    """

    return (
        budget.amount > 0
        and budget.alerts_enabled
        and "email" in (budget.alert_channels or [])
        and percentage >= budget.alert_threshold
    )


def apply_expense(
    transaction: Transaction,
    *,
    repository: BudgetRepository,
    notifier: Optional[AlertNotifier] = None,
    recipient: Optional[str] = None,
) -> list[BudgetUpdate]:
    """Charge an expense against every active budget it falls into.

    Each matching budget is incremented independently. Alert delivery is
    best-effort: a notifier failure is logged and never undoes an increment.
    """

    if not transaction.is_expense:
        return []

    matches = repository.find_matching(
        user_id=transaction.user_id,
        category=transaction.category,
        subcategory=transaction.subcategory,
        on=transaction.occurred_at.date(),
    )

    updates: list[BudgetUpdate] = []
    for match in matches:
        budget = repository.increment_spent(match.id, transaction.amount)  # type: ignore[arg-type]
        percentage = spending_percentage(budget.spent, budget.amount)
        alerted = False
        if should_alert(budget, percentage) and notifier is not None and recipient:
            alert = BudgetAlert(
                recipient=recipient,
                budget_id=budget.id,  # type: ignore[arg-type]
                budget_name=budget.name,
                category=budget.category,
                spent=budget.spent,
                amount=budget.amount,
                percentage=percentage,
                threshold=budget.alert_threshold,
            )
            try:
                alerted = bool(notifier.notify_budget_threshold(alert))
            except Exception:
                logger.warning(
                    "Budget alert dispatch failed",
                    exc_info=True,
                    extra={"budget_id": budget.id},
                )
        logger.info(
            "Expense applied to budget",
            extra={
                "budget_id": budget.id,
                "transaction_id": transaction.id,
                "spent": budget.spent,
                "percentage": round(percentage, 2),
                "alerted": alerted,
            },
        )
        updates.append(BudgetUpdate(budget=budget, percentage=percentage, alerted=alerted))
    return updates


__all__ = [
    "AlertNotifier",
    "BudgetAlert",
    "BudgetRepository",
    "BudgetUpdate",
    "apply_expense",
    "should_alert",
    "spending_percentage",
]
