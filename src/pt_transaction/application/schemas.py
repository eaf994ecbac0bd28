"""Pydantic schemas for the transactions API."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from src.pt_common.enums import TransactionType
from src.pt_common.money import ZERO, quantize
from src.pt_common.response import CamelModel, Money
from src.pt_transaction.domain.models import LedgerEntry, OrderRequest

# amount * price stays within the 20 integer digits of NUMERIC(28, 8)
MAX_ORDER_AMOUNT = Decimal("10000000000")
MAX_ORDER_PRICE = Decimal("1000000000")


class CreateTransactionRequest(CamelModel):
    type: TransactionType
    crypto_id: str = Field(..., min_length=1, max_length=64)
    crypto_symbol: str = Field(..., min_length=1, max_length=16)
    crypto_name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, le=MAX_ORDER_AMOUNT, description="Units of the asset")
    price: Decimal = Field(..., gt=0, le=MAX_ORDER_PRICE, description="USD per unit")

    @field_validator("crypto_id", "crypto_symbol", "crypto_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("amount", "price")
    @classmethod
    def eight_decimals(cls, v: Decimal) -> Decimal:
        v = quantize(v)
        if v <= ZERO:
            raise ValueError("must be greater than 0 after rounding to 8 decimal places")
        return v

    def to_domain(self) -> OrderRequest:
        return OrderRequest(
            type=self.type,
            crypto_id=self.crypto_id,
            crypto_symbol=self.crypto_symbol.upper(),
            crypto_name=self.crypto_name,
            amount=self.amount,
            price=self.price,
        )


class TransactionResponse(CamelModel):
    id: str
    type: str
    crypto_id: str
    crypto_symbol: str
    crypto_name: str
    amount: Money
    price: Money
    total_value: Money
    timestamp: datetime | None

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "TransactionResponse":
        return cls(
            id=entry.id,
            type=entry.type,
            crypto_id=entry.crypto_id,
            crypto_symbol=entry.crypto_symbol,
            crypto_name=entry.crypto_name,
            amount=entry.amount,
            price=entry.price,
            total_value=entry.total_value,
            timestamp=entry.timestamp,
        )


class CreateTransactionResponse(CamelModel):
    transaction: TransactionResponse
    new_balance: Money


class TransactionListResponse(CamelModel):
    items: list[TransactionResponse]
    count: int
    total: int
    page: int
    pages: int
