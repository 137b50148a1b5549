"""Analytics routes."""

from __future__ import annotations

from datetime import date

from flask import jsonify, request
from flask_login import login_required

from ...errors import ValidationFailed
from ...extensions import (
    budget_repository,
    current_user_id,
    goal_repository,
    transaction_repository,
)
from ...services import reports
from . import bp


@bp.get("/summary")
@login_required
def summary():
    range_name = request.args.get("range", "month")
    if range_name not in reports.RANGES:
        raise ValidationFailed(f"Range must be one of: {', '.join(reports.RANGES)}")

    user_id = current_user_id()
    today = date.today()
    window = reports.window_for(range_name, today)
    trend = reports.trend_window(today)
    transactions = transaction_repository()
    payload = reports.build_summary(
        range_name=range_name,
        today=today,
        range_transactions=transactions.filter_by_date_range(window.start, window.end, user_id=user_id),
        trend_transactions=transactions.filter_by_date_range(trend.start, trend.end, user_id=user_id),
        budgets=budget_repository().list_all(user_id=user_id, is_active=True),
        goals=goal_repository().list_all(user_id=user_id),
    )
    return jsonify(payload)
