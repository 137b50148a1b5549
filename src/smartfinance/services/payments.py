"""Razorpay order creation, signature checks, and webhook handling."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import razorpay
from razorpay.errors import (
    BadRequestError,
    GatewayError,
    ServerError,
    SignatureVerificationError,
)

from ..config import BaseConfig
from ..errors import NotFoundError, PaymentError, SignatureError, ValidationFailed
from ..infra.repositories.transaction import SQLModelTransactionRepository
from ..logging_config import get_logger
from ..models.transaction import Transaction

logger = get_logger(__name__)

DEFAULT_CURRENCY = "INR"
GATEWAY_NAME = "razorpay"
_GATEWAY_ERRORS = (BadRequestError, GatewayError, ServerError, OSError)


def to_subunits(amount: float) -> int:
    """Rupees to paise."""

    return int(round(amount * 100))


def from_subunits(amount: int | float) -> float:
    return amount / 100


@dataclass(frozen=True, slots=True)
class PaymentSummary:
    id: str
    status: str
    amount: float
    currency: str
    method: Optional[str]
    captured: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "amount": self.amount,
            "currency": self.currency,
            "method": self.method,
            "captured": self.captured,
        }


class RazorpayGateway:
    """Forwards order, payment, and signature calls to the Razorpay SDK."""

    def __init__(
        self,
        *,
        key_id: str,
        key_secret: str,
        webhook_secret: str = "",
        client: Any = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.client = client if client is not None else razorpay.Client(auth=(key_id, key_secret))

    @classmethod
    def from_config(cls, config: BaseConfig, *, client: Any = None) -> "RazorpayGateway":
        return cls(
            key_id=config.RAZORPAY_KEY_ID,
            key_secret=config.RAZORPAY_KEY_SECRET,
            webhook_secret=config.RAZORPAY_WEBHOOK_SECRET,
            client=client,
        )

    def create_order(
        self,
        *,
        amount: float,
        receipt: str,
        currency: str = DEFAULT_CURRENCY,
        notes: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any]:
        payload = {
            "amount": to_subunits(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": dict(notes or {}),
        }
        try:
            return self.client.order.create(data=payload)
        except _GATEWAY_ERRORS as exc:
            logger.error("Error creating Razorpay order", exc_info=True, extra={"receipt": receipt})
            raise PaymentError("Failed to create payment order") from exc

    def fetch_payment(self, payment_id: str) -> dict[str, Any]:
        try:
            return self.client.payment.fetch(payment_id)
        except _GATEWAY_ERRORS as exc:
            logger.error("Error fetching payment details", exc_info=True)
            raise PaymentError("Failed to fetch payment details") from exc

    def verify_payment_signature(self, *, order_id: str, payment_id: str, signature: str) -> bool:
        """Checkout signature over ``order_id|payment_id``, keyed with the API secret."""

        try:
            return bool(
                self.client.utility.verify_payment_signature(
                    {
                        "razorpay_order_id": order_id,
                        "razorpay_payment_id": payment_id,
                        "razorpay_signature": signature or "",
                    }
                )
            )
        except SignatureVerificationError:
            logger.warning("Payment signature mismatch", extra={"order_id": order_id})
            return False

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        if not signature or not self.webhook_secret:
            return False
        try:
            payload = body.decode("utf-8")
        except UnicodeDecodeError:
            return False
        try:
            return bool(
                self.client.utility.verify_webhook_signature(
                    payload, signature, self.webhook_secret
                )
            )
        except SignatureVerificationError:
            logger.warning("Webhook signature mismatch")
            return False


def build_receipt(transaction_id: Optional[Any]) -> str:
    return f"txn_{transaction_id or int(time.time() * 1000)}"


def summarize_payment(details: Mapping[str, Any]) -> PaymentSummary:
    return PaymentSummary(
        id=str(details.get("id", "")),
        status=str(details.get("status", "")),
        amount=from_subunits(details.get("amount", 0) or 0),
        currency=str(details.get("currency", DEFAULT_CURRENCY)),
        method=details.get("method"),
        captured=bool(details.get("captured", False)),
    )


def verify_and_record(
    *,
    gateway: RazorpayGateway,
    repository: SQLModelTransactionRepository,
    user_id: int,
    order_id: str,
    payment_id: str,
    signature: str,
    transaction_id: Optional[int] = None,
) -> PaymentSummary:
    """Check a checkout signature, pull payment details, and stamp the transaction."""

    if not order_id or not payment_id or not signature:
        raise ValidationFailed("Payment verification data is incomplete")
    if not gateway.verify_payment_signature(
        order_id=order_id, payment_id=payment_id, signature=signature
    ):
        raise SignatureError("Invalid payment signature")

    summary = summarize_payment(gateway.fetch_payment(payment_id))

    if transaction_id is not None:
        transaction = repository.get_by_id(transaction_id, user_id=user_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        transaction.payment_method = GATEWAY_NAME
        transaction.payment_status = "completed" if summary.status == "captured" else "failed"
        transaction.payment_order_id = order_id
        transaction.payment_id = payment_id
        transaction.payment_signature = signature
        transaction.payment_reference = summary.id
        repository.update(transaction)
    return summary


def _mark(
    repository: SQLModelTransactionRepository,
    transaction: Optional[Transaction],
    status: str,
    **fields: Any,
) -> Optional[Transaction]:
    if transaction is None:
        return None
    transaction.payment_status = status
    for key, value in fields.items():
        setattr(transaction, key, value)
    return repository.update(transaction)


def handle_webhook_event(
    event: Mapping[str, Any], *, repository: SQLModelTransactionRepository
) -> Optional[Transaction]:
    """Apply a verified webhook event; returns the transaction it touched, if any."""

    name = event.get("event")
    payload = event.get("payload") or {}
    if name == "payment.captured":
        payment = (payload.get("payment") or {}).get("entity") or {}
        updated = _mark(
            repository,
            repository.find_by_payment_id(str(payment.get("id"))),
            "completed",
            payment_reference=payment.get("id"),
        )
    elif name == "payment.failed":
        payment = (payload.get("payment") or {}).get("entity") or {}
        updated = _mark(repository, repository.find_by_payment_id(str(payment.get("id"))), "failed")
    elif name == "order.paid":
        order = (payload.get("order") or {}).get("entity") or {}
        updated = _mark(repository, repository.find_by_order_id(str(order.get("id"))), "completed")
    else:
        logger.info("Unhandled webhook event", extra={"event": name})
        return None

    if updated is not None:
        logger.info("Webhook applied", extra={"event": name, "transaction_id": updated.id})
    return updated
