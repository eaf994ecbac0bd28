"""Payment provider port. The Stripe adapter lives in infrastructure."""

from decimal import Decimal
from typing import Protocol

from src.pt_payment.domain.models import DepositIntent, WebhookEvent


class PaymentGatewayProtocol(Protocol):
    async def create_intent(self, user_id: str, amount: Decimal) -> DepositIntent: ...

    async def retrieve_intent(self, intent_id: str) -> DepositIntent: ...

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the provider signature and parse the event.

        Raises WebhookSignatureError on a bad signature or malformed payload.
        """
        ...
