"""Pydantic schemas for the portfolio API."""

from datetime import datetime

from src.pt_account.domain.models import PortfolioSummary, Position
from src.pt_common.response import CamelModel, Money


class PositionResponse(CamelModel):
    crypto_id: str
    symbol: str
    name: str
    quantity: Money
    average_cost: Money
    total_invested: Money
    last_updated: datetime | None

    @classmethod
    def from_domain(cls, position: Position) -> "PositionResponse":
        return cls(
            crypto_id=position.crypto_id,
            symbol=position.crypto_symbol,
            name=position.crypto_name,
            quantity=position.quantity,
            average_cost=position.average_cost,
            total_invested=position.total_invested,
            last_updated=position.last_updated,
        )


class PortfolioResponse(CamelModel):
    count: int
    items: list[PositionResponse]


class PortfolioSummaryResponse(CamelModel):
    cash_balance: Money
    total_cryptos: int
    total_invested: Money
    cryptos: list[PositionResponse]

    @classmethod
    def from_domain(cls, summary: PortfolioSummary) -> "PortfolioSummaryResponse":
        return cls(
            cash_balance=summary.cash_balance,
            total_cryptos=summary.total_cryptos,
            total_invested=summary.total_invested,
            cryptos=[PositionResponse.from_domain(p) for p in summary.positions],
        )
