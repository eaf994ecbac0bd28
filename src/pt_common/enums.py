"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class DepositSource(str, Enum):
    """Which reconciliation path credited a deposit first."""
    WEBHOOK = "webhook"
    POLL = "poll"


class PaymentIntentStatus(str, Enum):
    """Stripe PaymentIntent statuses this service reacts to."""
    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    CANCELED = "canceled"


class WebhookEventType(str, Enum):
    PAYMENT_SUCCEEDED = "payment_intent.succeeded"
    PAYMENT_FAILED = "payment_intent.payment_failed"
