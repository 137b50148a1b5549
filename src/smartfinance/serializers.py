"""camelCase JSON views of the persisted records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from .models.base import utcnow
from .models.budget import Budget
from .models.goal import Goal, GoalContribution, GoalMilestone
from .models.transaction import Transaction
from .models.user import User
from .services.budgeting import BudgetUpdate


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "preferences": {
            "currency": user.currency,
            "dateFormat": user.date_format,
            "theme": user.theme,
        },
        "createdAt": _iso(user.created_at),
    }


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    recurring = None
    if transaction.recurrence_frequency:
        recurring = {
            "frequency": transaction.recurrence_frequency,
            "interval": transaction.recurrence_interval,
            "endDate": _iso(transaction.recurrence_end),
        }
    location = None
    if transaction.location_name:
        location = {
            "name": transaction.location_name,
            "coordinates": {"lat": transaction.location_lat, "lng": transaction.location_lng},
        }
    payment = None
    if transaction.payment_method or transaction.payment_status:
        payment = {
            "method": transaction.payment_method,
            "status": transaction.payment_status,
            "razorpayOrderId": transaction.payment_order_id,
            "razorpayPaymentId": transaction.payment_id,
            "transactionId": transaction.payment_reference,
        }
    return {
        "id": transaction.id,
        "type": transaction.kind,
        "category": transaction.category,
        "subcategory": transaction.subcategory,
        "amount": transaction.amount,
        "description": transaction.description,
        "date": _iso(transaction.occurred_at),
        "tags": list(transaction.tags or []),
        "isRecurring": recurring is not None,
        "recurringDetails": recurring,
        "location": location,
        "paymentDetails": payment,
        "createdAt": _iso(transaction.created_at),
        "updatedAt": _iso(transaction.updated_at),
    }


def budget_to_dict(budget: Budget) -> dict[str, Any]:
    return {
        "id": budget.id,
        "name": budget.name,
        "category": budget.category,
        "subcategory": budget.subcategory,
        "amount": budget.amount,
        "spent": budget.spent,
        "remaining": budget.remaining,
        "spendingPercentage": round(budget.spending_percentage, 2),
        "period": {
            "start": _iso(budget.period_start),
            "end": _iso(budget.period_end),
            "type": budget.period_type,
        },
        "isActive": budget.is_active,
        "alerts": {
            "enabled": budget.alerts_enabled,
            "threshold": budget.alert_threshold,
            "notifications": list(budget.alert_channels or []),
        },
        "rollover": budget.rollover,
        "createdAt": _iso(budget.created_at),
    }


def budget_update_to_dict(update: BudgetUpdate) -> dict[str, Any]:
    return {
        "budgetId": update.budget.id,
        "name": update.budget.name,
        "spent": update.budget.spent,
        "percentage": round(update.percentage, 2),
        "alerted": update.alerted,
    }


def milestone_to_dict(milestone: GoalMilestone) -> dict[str, Any]:
    return {
        "id": milestone.id,
        "amount": milestone.amount,
        "description": milestone.description,
        "achieved": milestone.achieved,
        "achievedDate": _iso(milestone.achieved_at),
    }


def contribution_to_dict(contribution: GoalContribution) -> dict[str, Any]:
    return {
        "id": contribution.id,
        "amount": contribution.amount,
        "date": _iso(contribution.contributed_at),
        "source": contribution.source,
        "description": contribution.description,
    }


def goal_to_dict(goal: Goal, *, now: Optional[datetime] = None) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "description": goal.description,
        "type": goal.goal_type,
        "targetAmount": goal.target_amount,
        "currentAmount": goal.current_amount,
        "targetDate": _iso(goal.target_date),
        "isCompleted": goal.is_completed,
        "priority": goal.priority,
        "category": goal.category,
        "progressPercentage": round(goal.progress_percentage, 2),
        "amountRemaining": goal.amount_remaining,
        "daysRemaining": goal.days_remaining(now or utcnow()),
        "milestones": [milestone_to_dict(m) for m in goal.milestones],
        "contributions": [contribution_to_dict(c) for c in goal.contributions],
        "autoContribution": {
            "enabled": goal.auto_enabled,
            "amount": goal.auto_amount,
            "frequency": goal.auto_frequency,
            "source": goal.auto_source,
        },
        "createdAt": _iso(goal.created_at),
    }
