"""SQLModel table exports."""

from .base import TimestampedModel, utcnow
from .budget import ALERT_CHANNELS, PERIOD_TYPES, Budget
from .goal import GOAL_PRIORITIES, GOAL_TYPES, Goal, GoalContribution, GoalMilestone
from .transaction import PAYMENT_STATUSES, RECURRENCE_FREQUENCIES, TRANSACTION_KINDS, Transaction
from .user import User

__all__ = [
    "ALERT_CHANNELS",
    "Budget",
    "GOAL_PRIORITIES",
    "GOAL_TYPES",
    "Goal",
    "GoalContribution",
    "GoalMilestone",
    "PAYMENT_STATUSES",
    "PERIOD_TYPES",
    "RECURRENCE_FREQUENCIES",
    "TRANSACTION_KINDS",
    "TimestampedModel",
    "Transaction",
    "User",
    "utcnow",
]
