"""Domain models for pt_transaction: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pt_common.enums import TransactionType


@dataclass(frozen=True)
class OrderRequest:
    """A validated buy/sell instruction at a client-quoted price."""

    type: TransactionType
    crypto_id: str
    crypto_symbol: str
    crypto_name: str
    amount: Decimal
    price: Decimal


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable record of one executed buy or sell."""

    id: str
    user_id: str
    type: str  # TransactionType value
    crypto_id: str
    crypto_symbol: str
    crypto_name: str
    amount: Decimal
    price: Decimal
    total_value: Decimal
    timestamp: datetime | None = None


@dataclass(frozen=True)
class OrderResult:
    entry: LedgerEntry
    new_balance: Decimal
