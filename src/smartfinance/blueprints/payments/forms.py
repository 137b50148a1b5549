"""Payment payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from ...forms import PayloadForm


class CreateOrderForm(PayloadForm):
    amount: float
    description: str = Field(default="", max_length=255)
    transaction_id: Optional[int] = Field(default=None, alias="transactionId")

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Valid amount is required")
        return value


class VerifyPaymentForm(PayloadForm):
    razorpay_order_id: str = ""
    razorpay_payment_id: str = ""
    razorpay_signature: str = ""
    transaction_id: Optional[int] = Field(default=None, alias="transactionId")


__all__ = ["CreateOrderForm", "VerifyPaymentForm"]
