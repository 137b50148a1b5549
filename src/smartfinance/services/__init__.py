"""Service module exports."""

from . import auth, budgeting, goals, mailer, payments, reports

__all__ = [
    "auth",
    "budgeting",
    "goals",
    "mailer",
    "payments",
    "reports",
]
