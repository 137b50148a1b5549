"""Budget routes."""

from __future__ import annotations

from flask import jsonify, request
from flask_login import login_required

from ...errors import NotFoundError
from ...extensions import budget_repository, current_user_id
from ...forms import parse_bool_arg, parse_payload
from ...logging_config import get_logger
from ...models.budget import Budget
from ...serializers import budget_to_dict
from . import bp
from .forms import BudgetForm, BudgetUpdateForm, budget_columns

logger = get_logger(__name__)


@bp.get("")
@login_required
def list_budgets():
    budgets = budget_repository().list_all(
        user_id=current_user_id(),
        is_active=parse_bool_arg(request.args.get("isActive")),
        category=request.args.get("category") or None,
    )
    return jsonify({"budgets": [budget_to_dict(budget) for budget in budgets]})


@bp.get("/<int:budget_id>")
@login_required
def get_budget(budget_id: int):
    budget = budget_repository().get_by_id(budget_id, user_id=current_user_id())
    if budget is None:
        raise NotFoundError("Budget not found")
    return jsonify({"budget": budget_to_dict(budget)})


@bp.post("")
@login_required
def create_budget():
    form = parse_payload(BudgetForm, request.get_json(silent=True))
    budget = budget_repository().create(Budget(**budget_columns(form)), user_id=current_user_id())
    logger.info("Budget created", extra={"budget_id": budget.id, "category": budget.category})
    return jsonify({"message": "Budget created successfully", "budget": budget_to_dict(budget)}), 201


@bp.put("/<int:budget_id>")
@login_required
def update_budget(budget_id: int):
    """Apply a partial edit, including an explicit ``spent`` override."""

    user_id = current_user_id()
    repository = budget_repository()
    budget = repository.get_by_id(budget_id, user_id=user_id)
    if budget is None:
        raise NotFoundError("Budget not found")

    form = parse_payload(BudgetUpdateForm, request.get_json(silent=True))
    for key, value in budget_columns(form).items():
        setattr(budget, key, value)
    budget = repository.update(budget, user_id=user_id)
    return jsonify({"message": "Budget updated successfully", "budget": budget_to_dict(budget)})


@bp.delete("/<int:budget_id>")
@login_required
def delete_budget(budget_id: int):
    if not budget_repository().delete(budget_id, user_id=current_user_id()):
        raise NotFoundError("Budget not found")
    logger.info("Budget deleted", extra={"budget_id": budget_id})
    return jsonify({"message": "Budget deleted successfully"})
