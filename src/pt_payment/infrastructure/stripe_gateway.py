"""Stripe adapter for PaymentGatewayProtocol.

The Stripe SDK is synchronous; API calls run in Starlette's threadpool so
they do not block the event loop. Webhook verification is a local HMAC check
and runs inline.
"""

import logging
from decimal import Decimal
from typing import Any

import stripe
from starlette.concurrency import run_in_threadpool

from config.settings import settings
from src.pt_common.errors import (
    PaymentNotConfiguredError,
    PaymentProviderError,
    WebhookSignatureError,
)
from src.pt_common.money import cents_to_usd, usd_to_cents
from src.pt_payment.domain.models import DepositIntent, WebhookEvent

logger = logging.getLogger(__name__)

CURRENCY = "usd"


def _metadata_value(metadata: Any, key: str) -> str | None:
    if metadata is None:
        return None
    try:
        value = metadata[key]
    except (KeyError, TypeError):
        return None
    return str(value) if value is not None else None


def intent_from_stripe(obj: Any) -> DepositIntent:
    metadata = getattr(obj, "metadata", None)
    return DepositIntent(
        id=obj.id,
        status=obj.status,
        amount=cents_to_usd(int(obj.amount)),
        user_id=_metadata_value(metadata, "userId"),
        metadata_amount=_metadata_value(metadata, "amount"),
        client_secret=getattr(obj, "client_secret", None),
    )


class StripePaymentGateway:
    def __init__(self, api_key: str, webhook_secret: str = "") -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret

    async def create_intent(self, user_id: str, amount: Decimal) -> DepositIntent:
        try:
            obj = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self._api_key,
                amount=usd_to_cents(amount),
                currency=CURRENCY,
                metadata={"userId": user_id, "amount": str(amount)},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            logger.error("Stripe create PaymentIntent failed: %s", exc)
            raise PaymentProviderError(str(exc.user_message or exc)) from exc
        return intent_from_stripe(obj)

    async def retrieve_intent(self, intent_id: str) -> DepositIntent:
        try:
            obj = await run_in_threadpool(
                stripe.PaymentIntent.retrieve, intent_id, api_key=self._api_key
            )
        except stripe.StripeError as exc:
            logger.error("Stripe retrieve PaymentIntent %s failed: %s", intent_id, exc)
            raise PaymentProviderError(str(exc.user_message or exc)) from exc
        return intent_from_stripe(obj)

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if not self._webhook_secret:
            raise PaymentNotConfiguredError()
        try:
            event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning("Webhook signature verification failed: %s", exc)
            raise WebhookSignatureError(str(exc)) from exc
        intent = None
        if event.type.startswith("payment_intent."):
            intent = intent_from_stripe(event.data.object)
        return WebhookEvent(id=event.id, type=event.type, intent=intent)


def get_payment_gateway() -> StripePaymentGateway:
    """Gateway from settings; raises when Stripe is not configured."""
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentNotConfiguredError()
    return StripePaymentGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
