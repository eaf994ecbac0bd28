"""DepositService: funding accounts through the payment provider.

Two independent signals can report that a deposit succeeded:

  * the provider webhook (push, asynchronous, retried by the provider)
  * the client's status poll after finishing the payment form

Both call ``_credit_once``: the processed_deposits claim and the balance
credit share one DB transaction, so whichever path lands second is a no-op.
"""

import logging
from collections.abc import Callable
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pt_account.domain.repository import AccountRepositoryProtocol
from src.pt_account.infrastructure.persistence import AccountRepository
from src.pt_common.enums import DepositSource, PaymentIntentStatus, WebhookEventType
from src.pt_common.errors import (
    AccountNotFoundError,
    InvalidPaymentAmountError,
    PaymentForbiddenError,
    ValidationError,
)
from src.pt_common.money import ZERO, quantize, to_decimal, usd_to_display
from src.pt_payment.application.schemas import (
    CreatePaymentIntentResponse,
    PaymentStatusResponse,
)
from src.pt_payment.domain.gateway import PaymentGatewayProtocol
from src.pt_payment.domain.models import DepositCredit, DepositIntent
from src.pt_payment.domain.repository import ProcessedDepositRepositoryProtocol
from src.pt_payment.infrastructure.persistence import ProcessedDepositRepository
from src.pt_payment.infrastructure.stripe_gateway import get_payment_gateway

logger = logging.getLogger(__name__)


def deposit_amount(intent: DepositIntent) -> Decimal:
    """USD to credit: metadata.amount, else the charged amount."""
    if intent.metadata_amount is None:
        amount = intent.amount
    else:
        try:
            amount = to_decimal(intent.metadata_amount)
        except ValueError:
            raise InvalidPaymentAmountError(intent.metadata_amount) from None
    if not amount.is_finite() or amount <= ZERO:
        raise InvalidPaymentAmountError(intent.metadata_amount)
    try:
        return quantize(amount)
    except ValueError:
        raise InvalidPaymentAmountError(intent.metadata_amount) from None


class DepositService:
    def __init__(
        self,
        gateway_factory: Callable[[], PaymentGatewayProtocol] = get_payment_gateway,
        accounts: AccountRepositoryProtocol | None = None,
        deposits: ProcessedDepositRepositoryProtocol | None = None,
        min_deposit: Decimal = settings.MIN_DEPOSIT_USD,
    ) -> None:
        self._gateway_factory = gateway_factory
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._deposits: ProcessedDepositRepositoryProtocol = (
            deposits or ProcessedDepositRepository()
        )
        self._min_deposit = min_deposit

    async def create_deposit_intent(
        self, user_id: str, amount: Decimal
    ) -> CreatePaymentIntentResponse:
        if amount < self._min_deposit:
            raise ValidationError([f"Minimum amount is {usd_to_display(self._min_deposit)}"])

        intent = await self._gateway_factory().create_intent(user_id, amount)
        logger.info("PaymentIntent %s created: user=%s amount=%s", intent.id, user_id, amount)
        return CreatePaymentIntentResponse(
            client_secret=intent.client_secret or "",
            payment_intent_id=intent.id,
        )

    async def on_provider_webhook(
        self, db: AsyncSession, payload: bytes, signature: str
    ) -> None:
        event = self._gateway_factory().construct_event(payload, signature)
        intent = event.intent

        if event.type == WebhookEventType.PAYMENT_SUCCEEDED.value and intent is not None:
            if not intent.user_id:
                logger.warning("PaymentIntent %s succeeded without userId metadata", intent.id)
                return
            try:
                await self._credit_once(
                    db, intent, intent.user_id, deposit_amount(intent), DepositSource.WEBHOOK
                )
            except (AccountNotFoundError, InvalidPaymentAmountError) as exc:
                # Provider retries cannot fix these; acknowledge the event
                logger.warning("PaymentIntent %s not credited: %s", intent.id, exc.message)
        elif event.type == WebhookEventType.PAYMENT_FAILED.value and intent is not None:
            logger.info("Payment failed for PaymentIntent %s (user %s)", intent.id, intent.user_id)
        else:
            logger.debug("Ignoring webhook event %s (%s)", event.id, event.type)

    async def poll_deposit_status(
        self, db: AsyncSession, user_id: str, intent_id: str
    ) -> PaymentStatusResponse:
        intent = await self._owned_intent(user_id, intent_id)

        if intent.status != PaymentIntentStatus.SUCCEEDED.value:
            return PaymentStatusResponse(status=intent.status, amount=intent.amount, paid=False)

        credit = await self._credit_once(
            db, intent, user_id, deposit_amount(intent), DepositSource.POLL
        )
        return PaymentStatusResponse(
            status=intent.status,
            amount=intent.amount,
            paid=True,
            new_balance=credit.balance,
            credited=credit.credited,
        )

    async def confirm_payment(self, user_id: str, intent_id: str) -> PaymentStatusResponse:
        """Read-only status check; never credits."""
        intent = await self._owned_intent(user_id, intent_id)
        return PaymentStatusResponse(
            status=intent.status,
            amount=intent.amount,
            paid=intent.status == PaymentIntentStatus.SUCCEEDED.value,
        )

    async def _owned_intent(self, user_id: str, intent_id: str) -> DepositIntent:
        intent = await self._gateway_factory().retrieve_intent(intent_id)
        if intent.user_id != user_id:
            logger.warning(
                "PaymentIntent %s belongs to %s, requested by %s",
                intent_id, intent.user_id, user_id,
            )
            raise PaymentForbiddenError()
        return intent

    async def _credit_once(
        self,
        db: AsyncSession,
        intent: DepositIntent,
        user_id: str,
        amount: Decimal,
        source: DepositSource,
    ) -> DepositCredit:
        try:
            claimed = await self._deposits.claim(db, intent.id, user_id, amount, source)
            if claimed:
                account = await self._accounts.credit(db, user_id, amount)
            else:
                existing = await self._accounts.get_account_by_user_id(db, user_id)
                if existing is None:
                    raise AccountNotFoundError(user_id)
                account = existing
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if claimed:
            logger.info(
                "Deposit credited via %s: intent=%s user=%s amount=%s balance=%s",
                source.value, intent.id, user_id, amount, account.balance,
            )
        else:
            logger.info("Deposit %s already credited, %s is a no-op", intent.id, source.value)
        return DepositCredit(credited=claimed, balance=account.balance)
