"""Domain models for pt_payment.

A deposit intent is owned by the payment provider; these dataclasses are the
slice of it this service reads. Nothing here is persisted except through
ProcessedDepositRepository (the credited-once record).
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DepositIntent:
    id: str
    status: str
    amount: Decimal               # USD charged, converted from provider cents
    user_id: str | None           # metadata.userId
    metadata_amount: str | None   # metadata.amount, USD as a string
    client_secret: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    intent: DepositIntent | None  # set for payment_intent.* events only


@dataclass(frozen=True)
class DepositCredit:
    credited: bool   # False when this intent had already been credited
    balance: Decimal
