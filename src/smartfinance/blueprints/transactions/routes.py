"""Transaction routes."""

from __future__ import annotations

import math

from flask import jsonify, request
from flask_login import current_user, login_required

from ...errors import NotFoundError
from ...extensions import budget_repository, current_user_id, get_mailer, transaction_repository
from ...forms import parse_datetime_arg, parse_int_arg, parse_payload
from ...logging_config import get_logger
from ...models.base import utcnow
from ...models.transaction import Transaction
from ...serializers import budget_update_to_dict, transaction_to_dict
from ...services.budgeting import apply_expense
from . import bp
from .forms import TransactionForm, TransactionUpdateForm

logger = get_logger(__name__)


@bp.get("")
@login_required
def list_transactions():
    """Paginated, filterable transaction history (newest first)."""

    args = request.args
    page = max(parse_int_arg(args.get("page"), 1), 1)
    limit = min(max(parse_int_arg(args.get("limit"), 10), 1), 100)
    rows, total = transaction_repository().search(
        user_id=current_user_id(),
        kind=args.get("type") or None,
        category=args.get("category") or None,
        start_date=parse_datetime_arg(args.get("startDate"), field="startDate"),
        end_date=parse_datetime_arg(args.get("endDate"), field="endDate"),
        page=page,
        per_page=limit,
    )
    return jsonify(
        {
            "transactions": [transaction_to_dict(row) for row in rows],
            "totalPages": math.ceil(total / limit),
            "currentPage": page,
            "total": total,
        }
    )


@bp.get("/<int:transaction_id>")
@login_required
def get_transaction(transaction_id: int):
    transaction = transaction_repository().get_by_id(transaction_id, user_id=current_user_id())
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return jsonify({"transaction": transaction_to_dict(transaction)})


@bp.post("")
@login_required
def create_transaction():
    """Record a transaction and charge expenses against matching budgets."""

    form = parse_payload(TransactionForm, request.get_json(silent=True))
    values = form.column_values()
    values.setdefault("occurred_at", utcnow())
    user_id = current_user_id()

    transaction = transaction_repository().create(Transaction(**values), user_id=user_id)
    logger.info(
        "Transaction created",
        extra={"transaction_id": transaction.id, "kind": transaction.kind, "amount": transaction.amount},
    )

    updates = apply_expense(
        transaction,
        repository=budget_repository(),
        notifier=get_mailer(),
        recipient=current_user.email,
    )
    return (
        jsonify(
            {
                "message": "Transaction created successfully",
                "transaction": transaction_to_dict(transaction),
                "budgetUpdates": [budget_update_to_dict(update) for update in updates],
            }
        ),
        201,
    )


@bp.put("/<int:transaction_id>")
@login_required
def update_transaction(transaction_id: int):
    """Edit a transaction; budgets are left untouched."""

    repository = transaction_repository()
    transaction = repository.get_by_id(transaction_id, user_id=current_user_id())
    if transaction is None:
        raise NotFoundError("Transaction not found")

    form = parse_payload(TransactionUpdateForm, request.get_json(silent=True))
    for key, value in form.column_values().items():
        setattr(transaction, key, value)
    transaction = repository.update(transaction)
    return jsonify(
        {"message": "Transaction updated successfully", "transaction": transaction_to_dict(transaction)}
    )


@bp.delete("/<int:transaction_id>")
@login_required
def delete_transaction(transaction_id: int):
    if not transaction_repository().delete(transaction_id, user_id=current_user_id()):
        raise NotFoundError("Transaction not found")
    logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
    return jsonify({"message": "Transaction deleted successfully"})
