"""Pydantic schemas for the payments API."""

from decimal import Decimal

from pydantic import Field

from src.pt_common.response import CamelModel, Money


class CreatePaymentIntentRequest(CamelModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="USD")


class CreatePaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str


class ConfirmPaymentRequest(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)


class PaymentStatusResponse(CamelModel):
    status: str
    amount: Money
    paid: bool
    new_balance: Money | None = None
    credited: bool | None = None
