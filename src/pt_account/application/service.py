"""PortfolioService: read-only joins of the account and position stores."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_account.application.schemas import (
    PortfolioResponse,
    PortfolioSummaryResponse,
    PositionResponse,
)
from src.pt_account.domain.models import PortfolioSummary
from src.pt_account.domain.repository import (
    AccountRepositoryProtocol,
    PositionRepositoryProtocol,
)
from src.pt_account.infrastructure.persistence import AccountRepository, PositionRepository
from src.pt_common.errors import AccountNotFoundError

logger = logging.getLogger(__name__)


class PortfolioService:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()

    async def get_portfolio(self, db: AsyncSession, user_id: str) -> PortfolioResponse:
        positions = await self._positions.list_positions(db, user_id)
        return PortfolioResponse(
            count=len(positions),
            items=[PositionResponse.from_domain(p) for p in positions],
        )

    async def get_summary(self, db: AsyncSession, user_id: str) -> PortfolioSummaryResponse:
        account = await self._accounts.get_account_by_user_id(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        positions = await self._positions.list_positions(db, user_id)
        summary = PortfolioSummary(cash_balance=account.balance, positions=positions)
        logger.debug(
            "Portfolio summary for user %s: cash=%s assets=%d",
            user_id,
            summary.cash_balance,
            summary.total_cryptos,
        )
        return PortfolioSummaryResponse.from_domain(summary)
