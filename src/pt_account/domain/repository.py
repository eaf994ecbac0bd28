"""Repository Protocols: dependency inversion for testability.

Unit tests inject a mock (or an in-memory fake) that conforms to these
Protocols. Infrastructure provides the PostgreSQL implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_account.domain.models import Account, Position


class AccountRepositoryProtocol(Protocol):
    async def create_account(self, db: AsyncSession, user_id: str) -> Account: ...

    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None: ...

    async def debit(self, db: AsyncSession, user_id: str, amount: Decimal) -> Account: ...

    async def credit(self, db: AsyncSession, user_id: str, amount: Decimal) -> Account: ...


class PositionRepositoryProtocol(Protocol):
    async def get_position(
        self, db: AsyncSession, user_id: str, crypto_id: str
    ) -> Position | None: ...

    async def list_positions(self, db: AsyncSession, user_id: str) -> list[Position]: ...

    async def save_position(self, db: AsyncSession, position: Position) -> Position | None: ...
