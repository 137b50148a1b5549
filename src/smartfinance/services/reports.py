"""Aggregate analytics over transactions, budgets, and goals."""

from __future__ import annotations

from calendar import month_abbr
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Sequence

from ..models.budget import Budget
from ..models.goal import Goal
from ..models.transaction import Transaction
from .budgeting import spending_percentage

RANGES = ("month", "quarter", "year")
TREND_MONTHS = 6


@dataclass(frozen=True, slots=True)
class ReportWindow:
    start: datetime
    end: datetime


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def window_for(range_name: str, today: date) -> ReportWindow:
    """Calendar window ending at the start of next month.

    ``month`` is the current month, ``quarter`` the current month plus the
    two before it, and ``year`` runs from January 1st.
    """

    if range_name not in RANGES:
        raise ValueError(f"Unsupported range: {range_name}")
    end_year, end_month = _shift_month(today.year, today.month, 1)
    end = datetime(end_year, end_month, 1)
    if range_name == "month":
        start = datetime(today.year, today.month, 1)
    elif range_name == "quarter":
        y, m = _shift_month(today.year, today.month, -2)
        start = datetime(y, m, 1)
    else:
        start = datetime(today.year, 1, 1)
    return ReportWindow(start=start, end=end)


def trend_window(today: date, months: int = TREND_MONTHS) -> ReportWindow:
    y, m = _shift_month(today.year, today.month, -(months - 1))
    end_year, end_month = _shift_month(today.year, today.month, 1)
    return ReportWindow(start=datetime(y, m, 1), end=datetime(end_year, end_month, 1))


def compute_totals(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Income, expenses, and net for the provided transactions."""

    income = 0.0
    expenses = 0.0
    for tx in transactions:
        if tx.kind == "income":
            income += tx.amount
        elif tx.kind == "expense":
            expenses += tx.amount
    return {
        "income": round(income, 2),
        "expenses": round(expenses, 2),
        "net": round(income - expenses, 2),
    }


def top_categories(transactions: Iterable[Transaction], limit: int = 5) -> list[dict[str, object]]:
    """Largest expense categories with their share of total expenses."""

    totals: dict[str, float] = defaultdict(float)
    for tx in transactions:
        if tx.kind == "expense":
            totals[tx.category] += tx.amount
    grand_total = sum(totals.values())
    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [
        {
            "category": category,
            "amount": round(amount, 2),
            "percentage": round(amount / grand_total * 100, 2) if grand_total else 0.0,
        }
        for category, amount in ranked
    ]


def spending_trend(
    transactions: Iterable[Transaction], today: date, months: int = TREND_MONTHS
) -> list[dict[str, object]]:
    """Per-month income/expense totals for the trailing ``months`` months, oldest first."""

    keys = [_shift_month(today.year, today.month, -offset) for offset in range(months - 1, -1, -1)]
    buckets: dict[tuple[int, int], dict[str, float]] = {
        key: {"income": 0.0, "expenses": 0.0} for key in keys
    }
    for tx in transactions:
        key = (tx.occurred_at.year, tx.occurred_at.month)
        bucket = buckets.get(key)
        if bucket is None:
            continue
        if tx.kind == "income":
            bucket["income"] += tx.amount
        elif tx.kind == "expense":
            bucket["expenses"] += tx.amount
    return [
        {
            "month": f"{month_abbr[m]} {y}",
            "income": round(buckets[(y, m)]["income"], 2),
            "expenses": round(buckets[(y, m)]["expenses"], 2),
        }
        for y, m in keys
    ]


def budget_performance(budgets: Sequence[Budget]) -> list[dict[str, object]]:
    return [
        {
            "id": budget.id,
            "name": budget.name,
            "category": budget.category,
            "budgeted": budget.amount,
            "spent": budget.spent,
            "percentage": round(spending_percentage(budget.spent, budget.amount), 2),
        }
        for budget in budgets
    ]


def goal_progress(goals: Sequence[Goal]) -> list[dict[str, object]]:
    return [
        {
            "id": goal.id,
            "title": goal.title,
            "current": goal.current_amount,
            "target": goal.target_amount,
            "percentage": round(goal.progress_percentage, 2),
            "isCompleted": goal.is_completed,
        }
        for goal in goals
    ]


def build_summary(
    *,
    range_name: str,
    today: date,
    range_transactions: Sequence[Transaction],
    trend_transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    goals: Sequence[Goal],
) -> dict[str, object]:
    """Assemble the analytics payload served by the dashboard."""

    window = window_for(range_name, today)
    totals = compute_totals(range_transactions)
    return {
        "range": range_name,
        "start": window.start.date().isoformat(),
        "end": window.end.date().isoformat(),
        "income": totals["income"],
        "expenses": totals["expenses"],
        "netIncome": totals["net"],
        "topCategories": top_categories(range_transactions),
        "spendingTrend": spending_trend(trend_transactions, today),
        "budgetPerformance": budget_performance(budgets),
        "goalProgress": goal_progress(goals),
    }
