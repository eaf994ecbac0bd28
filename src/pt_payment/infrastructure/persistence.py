"""ProcessedDepositRepository: one row per credited payment intent.

The insert runs in the same transaction as the balance credit, so the
primary key on payment_intent_id is what makes crediting exactly-once.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.enums import DepositSource

_CLAIM_SQL = text("""
    INSERT INTO processed_deposits (payment_intent_id, user_id, amount, source)
    VALUES (:intent_id, :user_id, :amount, :source)
    ON CONFLICT (payment_intent_id) DO NOTHING
    RETURNING payment_intent_id
""")


class ProcessedDepositRepository:
    async def claim(
        self,
        db: AsyncSession,
        intent_id: str,
        user_id: str,
        amount: Decimal,
        source: DepositSource,
    ) -> bool:
        result = await db.execute(
            _CLAIM_SQL,
            {
                "intent_id": intent_id,
                "user_id": user_id,
                "amount": amount,
                "source": source.value,
            },
        )
        return result.fetchone() is not None
