"""Ledger entry repository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_transaction.domain.models import LedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def insert_entry(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry: ...

    async def get_entry(
        self, db: AsyncSession, user_id: str, entry_id: str
    ) -> LedgerEntry | None: ...

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        crypto_id: str | None,
        entry_type: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[LedgerEntry], int]: ...
