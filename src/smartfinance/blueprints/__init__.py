"""Blueprint exports."""

from . import analytics, auth, budgets, goals, home, payments, settings, transactions

__all__ = [
    "analytics",
    "auth",
    "budgets",
    "goals",
    "home",
    "payments",
    "settings",
    "transactions",
]
