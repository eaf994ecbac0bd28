"""Domain models for pt_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pt_common.money import ZERO, quantize, trade_value


@dataclass
class Account:
    id: str
    user_id: str
    balance: Decimal
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Position:
    """Aggregate holding of one asset by one user, weighted-average cost basis.

    ``version`` is the row version read from the DB; writes are accepted only
    if it is still current. A new, unsaved position has ``version = 0`` and
    ``is_new = True``.
    """

    user_id: str
    crypto_id: str
    crypto_symbol: str
    crypto_name: str
    quantity: Decimal = ZERO
    average_cost: Decimal = ZERO
    total_invested: Decimal = ZERO
    version: int = 0
    is_new: bool = False
    last_updated: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def open(
        cls,
        user_id: str,
        crypto_id: str,
        crypto_symbol: str,
        crypto_name: str,
        quantity: Decimal,
        price: Decimal,
    ) -> "Position":
        return cls(
            user_id=user_id,
            crypto_id=crypto_id,
            crypto_symbol=crypto_symbol.upper(),
            crypto_name=crypto_name,
            quantity=quantity,
            average_cost=price,
            total_invested=trade_value(quantity, price),
            is_new=True,
        )

    @property
    def is_closed(self) -> bool:
        return self.quantity == ZERO

    def apply_buy(self, quantity: Decimal, price: Decimal) -> None:
        """Blend a purchase into the average cost."""
        self.total_invested = self.total_invested + trade_value(quantity, price)
        self.quantity = self.quantity + quantity
        self.average_cost = quantize(self.total_invested / self.quantity)

    def apply_sell(self, quantity: Decimal) -> None:
        """Reduce the holding; the average cost of what remains is unchanged."""
        if quantity > self.quantity:
            raise ValueError(
                f"Cannot sell {quantity} {self.crypto_symbol}, only {self.quantity} held"
            )
        self.quantity = self.quantity - quantity
        self.total_invested = trade_value(self.quantity, self.average_cost)


@dataclass
class PortfolioSummary:
    cash_balance: Decimal
    positions: list[Position]

    @property
    def total_cryptos(self) -> int:
        return len(self.positions)

    @property
    def total_invested(self) -> Decimal:
        return sum((p.total_invested for p in self.positions), ZERO)
