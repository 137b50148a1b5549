"""Razorpay checkout and webhook routes."""

from __future__ import annotations

import json

from flask import jsonify, request
from flask_login import login_required

from ...errors import SignatureError, ValidationFailed
from ...extensions import current_user_id, get_gateway, transaction_repository
from ...forms import parse_payload
from ...logging_config import get_logger
from ...services import payments
from . import bp
from .forms import CreateOrderForm, VerifyPaymentForm

logger = get_logger(__name__)


@bp.post("/create-order")
@login_required
def create_order():
    form = parse_payload(CreateOrderForm, request.get_json(silent=True))
    gateway = get_gateway()
    notes = {"description": form.description, "userId": str(current_user_id())}
    if form.transaction_id is not None:
        notes["transactionId"] = str(form.transaction_id)
    order = gateway.create_order(
        amount=form.amount,
        receipt=payments.build_receipt(form.transaction_id),
        notes=notes,
    )
    logger.info("Payment order created", extra={"order_id": order.get("id")})
    return jsonify({"success": True, "order": order, "key": gateway.key_id})


@bp.post("/verify")
@login_required
def verify_payment():
    form = parse_payload(VerifyPaymentForm, request.get_json(silent=True))
    summary = payments.verify_and_record(
        gateway=get_gateway(),
        repository=transaction_repository(),
        user_id=current_user_id(),
        order_id=form.razorpay_order_id,
        payment_id=form.razorpay_payment_id,
        signature=form.razorpay_signature,
        transaction_id=form.transaction_id,
    )
    return jsonify(
        {"success": True, "message": "Payment verified successfully", "payment": summary.as_dict()}
    )


@bp.post("/webhook")
def webhook():
    """Gateway callback; authenticated by signature rather than session."""

    body = request.get_data(cache=True)
    if not get_gateway().verify_webhook_signature(
        body, request.headers.get("X-Razorpay-Signature")
    ):
        logger.warning("Rejected webhook with invalid signature")
        raise SignatureError("Invalid signature")
    try:
        event = json.loads(body or b"{}")
    except ValueError as exc:
        raise ValidationFailed("Webhook body must be JSON") from exc
    if not isinstance(event, dict):
        raise ValidationFailed("Webhook body must be a JSON object")
    payments.handle_webhook_event(event, repository=transaction_repository())
    return jsonify({"status": "ok"})
