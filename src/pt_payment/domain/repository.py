"""Processed-deposit (idempotency) repository Protocol."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.enums import DepositSource


class ProcessedDepositRepositoryProtocol(Protocol):
    async def claim(
        self,
        db: AsyncSession,
        intent_id: str,
        user_id: str,
        amount: Decimal,
        source: DepositSource,
    ) -> bool:
        """Record ``intent_id`` as credited. False if it already was."""
        ...
