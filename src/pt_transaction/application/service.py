"""TransactionService: executes buy/sell orders against the ledger.

One order = one database transaction spanning three writes:

  1. balance debit on buy, credit on sell (atomic conditional UPDATE)
  2. ledger entry insert (append-only)
  3. position create / update / delete (version-guarded)

Any failure rolls the whole transaction back, so a failed position write
never leaves a moved balance or a dangling ledger entry behind. Version
conflicts on the position are retried with exponential backoff.
"""

import asyncio
import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pt_account.domain.models import Position
from src.pt_account.domain.repository import (
    AccountRepositoryProtocol,
    PositionRepositoryProtocol,
)
from src.pt_account.infrastructure.persistence import AccountRepository, PositionRepository
from src.pt_common.enums import TransactionType
from src.pt_common.errors import (
    ConcurrentUpdateError,
    InsufficientHoldingsError,
    TransactionNotFoundError,
)
from src.pt_common.id_generator import generate_id
from src.pt_common.money import ZERO, trade_value
from src.pt_transaction.application.schemas import (
    TransactionListResponse,
    TransactionResponse,
)
from src.pt_transaction.domain.models import LedgerEntry, OrderRequest, OrderResult
from src.pt_transaction.domain.repository import LedgerRepositoryProtocol
from src.pt_transaction.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        ledger: LedgerRepositoryProtocol | None = None,
        max_attempts: int = settings.ORDER_MAX_RETRIES,
        base_delay: float = settings.ORDER_RETRY_BASE_DELAY,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._ledger: LedgerRepositoryProtocol = ledger or LedgerRepository()
        self._max_attempts = max(1, max_attempts)
        self._base_delay = base_delay

    async def execute_order(
        self, db: AsyncSession, user_id: str, order: OrderRequest
    ) -> OrderResult:
        """Execute ``order`` all-or-nothing, retrying on version conflicts."""
        attempt = 1
        while True:
            try:
                result = await self._execute_once(db, user_id, order)
                await db.commit()
            except ConcurrentUpdateError as exc:
                await db.rollback()
                if attempt >= self._max_attempts:
                    logger.warning(
                        "Order gave up after %d attempts: user=%s %s %s",
                        attempt, user_id, order.type.value, order.crypto_id,
                    )
                    raise
                delay = self._base_delay * (2 ** (attempt - 1))
                logger.warning(
                    "Order retry %d/%d in %.3fs: %s",
                    attempt, self._max_attempts, delay, exc.message,
                )
                await asyncio.sleep(delay)
                attempt += 1
                continue
            except Exception:
                await db.rollback()
                raise

            logger.info(
                "Order executed: user=%s %s %s %s @ %s = %s (balance %s)",
                user_id,
                order.type.value,
                order.amount,
                order.crypto_symbol,
                order.price,
                result.entry.total_value,
                result.new_balance,
            )
            return result

    async def _execute_once(
        self, db: AsyncSession, user_id: str, order: OrderRequest
    ) -> OrderResult:
        total = trade_value(order.amount, order.price)
        position = await self._positions.get_position(db, user_id, order.crypto_id)

        # Step 1: move cash (fails without side effects when the order is not covered)
        if order.type is TransactionType.BUY:
            account = await self._accounts.debit(db, user_id, total)
        else:
            if position is None or position.quantity < order.amount:
                held = position.quantity if position is not None else ZERO
                raise InsufficientHoldingsError(order.crypto_id, order.amount, held)
            account = await self._accounts.credit(db, user_id, total)

        # Step 2: ledger entry
        entry = await self._ledger.insert_entry(
            db,
            LedgerEntry(
                id=generate_id(),
                user_id=user_id,
                type=order.type.value,
                crypto_id=order.crypto_id,
                crypto_symbol=order.crypto_symbol,
                crypto_name=order.crypto_name,
                amount=order.amount,
                price=order.price,
                total_value=total,
            ),
        )

        # Step 3: position
        if position is None:
            position = Position.open(
                user_id,
                order.crypto_id,
                order.crypto_symbol,
                order.crypto_name,
                order.amount,
                order.price,
            )
        elif order.type is TransactionType.BUY:
            position.apply_buy(order.amount, order.price)
        else:
            position.apply_sell(order.amount)
        await self._positions.save_position(db, position)

        return OrderResult(entry=entry, new_balance=account.balance)

    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> TransactionResponse:
        entry = await self._ledger.get_entry(db, user_id, transaction_id)
        if entry is None:
            raise TransactionNotFoundError(transaction_id)
        return TransactionResponse.from_domain(entry)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        crypto_id: str | None,
        entry_type: str | None,
        limit: int,
        page: int,
    ) -> TransactionListResponse:
        entries, total = await self._ledger.list_entries(
            db, user_id, crypto_id, entry_type, limit, (page - 1) * limit
        )
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(e) for e in entries],
            count=len(entries),
            total=total,
            page=page,
            pages=math.ceil(total / limit) if limit else 0,
        )
