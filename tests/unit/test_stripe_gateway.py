"""Stripe adapter: SDK calls patched, no network."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from src.pt_common.errors import (
    PaymentNotConfiguredError,
    PaymentProviderError,
    WebhookSignatureError,
)
from src.pt_payment.infrastructure.stripe_gateway import (
    StripePaymentGateway,
    get_payment_gateway,
    intent_from_stripe,
)


def _stripe_intent(**overrides: object) -> SimpleNamespace:
    data: dict[str, object] = {
        "id": "pi_123",
        "status": "succeeded",
        "amount": 5000,
        "metadata": {"userId": "user-1", "amount": "50"},
        "client_secret": "pi_123_secret_abc",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestIntentFromStripe:
    def test_converts_cents_and_metadata(self) -> None:
        intent = intent_from_stripe(_stripe_intent())
        assert intent.amount == Decimal("50.00")
        assert intent.user_id == "user-1"
        assert intent.metadata_amount == "50"
        assert intent.client_secret == "pi_123_secret_abc"

    def test_missing_metadata(self) -> None:
        intent = intent_from_stripe(_stripe_intent(metadata={}))
        assert intent.user_id is None
        assert intent.metadata_amount is None


class TestCreateIntent:
    async def test_sends_cents_and_metadata(self) -> None:
        gateway = StripePaymentGateway("sk_test_123")
        with patch("stripe.PaymentIntent.create", return_value=_stripe_intent()) as create:
            intent = await gateway.create_intent("user-1", Decimal("50"))

        assert intent.id == "pi_123"
        kwargs = create.call_args.kwargs
        assert kwargs["amount"] == 5000
        assert kwargs["currency"] == "usd"
        assert kwargs["metadata"] == {"userId": "user-1", "amount": "50"}
        assert kwargs["api_key"] == "sk_test_123"

    async def test_provider_error_is_wrapped(self) -> None:
        gateway = StripePaymentGateway("sk_test_123")
        with (
            patch("stripe.PaymentIntent.create", side_effect=stripe.StripeError("card declined")),
            pytest.raises(PaymentProviderError, match="card declined"),
        ):
            await gateway.create_intent("user-1", Decimal("50"))


class TestRetrieveIntent:
    async def test_retrieve(self) -> None:
        gateway = StripePaymentGateway("sk_test_123")
        with patch("stripe.PaymentIntent.retrieve", return_value=_stripe_intent()) as retrieve:
            intent = await gateway.retrieve_intent("pi_123")

        retrieve.assert_called_once_with("pi_123", api_key="sk_test_123")
        assert intent.status == "succeeded"


class TestConstructEvent:
    def test_payment_intent_event(self) -> None:
        gateway = StripePaymentGateway("sk_test_123", "whsec_abc")
        event = SimpleNamespace(
            id="evt_1",
            type="payment_intent.succeeded",
            data=SimpleNamespace(object=_stripe_intent()),
        )
        with patch("stripe.Webhook.construct_event", return_value=event) as construct:
            parsed = gateway.construct_event(b"{}", "t=1,v1=abc")

        construct.assert_called_once_with(b"{}", "t=1,v1=abc", "whsec_abc")
        assert parsed.type == "payment_intent.succeeded"
        assert parsed.intent is not None
        assert parsed.intent.user_id == "user-1"

    def test_other_event_has_no_intent(self) -> None:
        gateway = StripePaymentGateway("sk_test_123", "whsec_abc")
        event = SimpleNamespace(
            id="evt_2", type="customer.created", data=SimpleNamespace(object=object())
        )
        with patch("stripe.Webhook.construct_event", return_value=event):
            assert gateway.construct_event(b"{}", "sig").intent is None

    def test_bad_signature(self) -> None:
        gateway = StripePaymentGateway("sk_test_123", "whsec_abc")
        error = stripe.SignatureVerificationError("No signatures found", "sig")
        with (
            patch("stripe.Webhook.construct_event", side_effect=error),
            pytest.raises(WebhookSignatureError, match="Webhook Error"),
        ):
            gateway.construct_event(b"{}", "sig")

    def test_malformed_payload(self) -> None:
        gateway = StripePaymentGateway("sk_test_123", "whsec_abc")
        with (
            patch("stripe.Webhook.construct_event", side_effect=ValueError("bad json")),
            pytest.raises(WebhookSignatureError),
        ):
            gateway.construct_event(b"not json", "sig")

    def test_missing_secret(self) -> None:
        with pytest.raises(PaymentNotConfiguredError):
            StripePaymentGateway("sk_test_123").construct_event(b"{}", "sig")


def test_factory_requires_secret_key() -> None:
    with (
        patch("src.pt_payment.infrastructure.stripe_gateway.settings.STRIPE_SECRET_KEY", ""),
        pytest.raises(PaymentNotConfiguredError),
    ):
        get_payment_gateway()
