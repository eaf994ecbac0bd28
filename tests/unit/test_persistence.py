"""Unit tests for the raw-SQL repositories using a mocked AsyncSession."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import DataError

from src.pt_account.domain.models import Position
from src.pt_account.infrastructure.persistence import AccountRepository, PositionRepository
from src.pt_common.enums import DepositSource
from src.pt_common.errors import (
    AccountNotFoundError,
    BalanceLimitError,
    ConcurrentUpdateError,
    InsufficientFundsError,
)
from src.pt_payment.infrastructure.persistence import ProcessedDepositRepository
from src.pt_transaction.infrastructure.persistence import LedgerRepository


def _account_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "acct-1")
    row.user_id = kwargs.get("user_id", "user-1")
    row.balance = kwargs.get("balance", Decimal("100"))
    row.version = kwargs.get("version", 1)
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _position_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.user_id = "user-1"
    row.crypto_id = "bitcoin"
    row.crypto_symbol = "BTC"
    row.crypto_name = "Bitcoin"
    row.quantity = kwargs.get("quantity", Decimal("1"))
    row.average_cost = kwargs.get("average_cost", Decimal("50"))
    row.total_invested = kwargs.get("total_invested", Decimal("50"))
    row.version = kwargs.get("version", 1)
    row.last_updated = datetime.now(UTC)
    row.created_at = datetime.now(UTC)
    return row


def _db_returning(*rows: Any) -> AsyncMock:
    """AsyncSession whose successive execute() calls fetch ``rows`` in order."""
    results = []
    for row in rows:
        result = MagicMock()
        result.fetchone.return_value = row
        results.append(result)
    db = AsyncMock()
    db.execute = AsyncMock(side_effect=results)
    return db


def _position(**kwargs: Any) -> Position:
    return Position(
        user_id="user-1",
        crypto_id="bitcoin",
        crypto_symbol="BTC",
        crypto_name="Bitcoin",
        quantity=kwargs.get("quantity", Decimal("1")),
        average_cost=Decimal("50"),
        total_invested=kwargs.get("total_invested", Decimal("50")),
        version=kwargs.get("version", 1),
        is_new=kwargs.get("is_new", False),
    )


class TestAccountRepository:
    async def test_debit_returns_updated_account(self) -> None:
        db = _db_returning(_account_row(balance=Decimal("50")))
        account = await AccountRepository().debit(db, "user-1", Decimal("50"))
        assert account.balance == Decimal("50")
        params = db.execute.await_args.args[1]
        assert params == {"user_id": "user-1", "amount": Decimal("50")}

    async def test_debit_insufficient(self) -> None:
        db = _db_returning(None, _account_row(balance=Decimal("10")))
        with pytest.raises(InsufficientFundsError, match="available 10"):
            await AccountRepository().debit(db, "user-1", Decimal("50"))

    async def test_debit_missing_account(self) -> None:
        db = _db_returning(None, None)
        with pytest.raises(AccountNotFoundError):
            await AccountRepository().debit(db, "user-1", Decimal("50"))

    async def test_credit_missing_account(self) -> None:
        db = _db_returning(None)
        with pytest.raises(AccountNotFoundError):
            await AccountRepository().credit(db, "user-1", Decimal("50"))

    async def test_credit_over_column_limit_skips_query(self) -> None:
        db = _db_returning()
        with pytest.raises(BalanceLimitError):
            await AccountRepository().credit(db, "user-1", Decimal("1e21"))
        db.execute.assert_not_awaited()

    async def test_credit_numeric_overflow_maps_to_balance_limit(self) -> None:
        db = AsyncMock()
        db.execute = AsyncMock(
            side_effect=DataError("UPDATE accounts", {}, Exception("numeric field overflow"))
        )
        with pytest.raises(BalanceLimitError):
            await AccountRepository().credit(db, "user-1", Decimal("50"))

    async def test_get_account_none(self) -> None:
        db = _db_returning(None)
        assert await AccountRepository().get_account_by_user_id(db, "user-1") is None


class TestPositionRepository:
    async def test_insert_new_position(self) -> None:
        db = _db_returning(_position_row())
        saved = await PositionRepository().save_position(db, _position(is_new=True, version=0))
        assert saved is not None
        assert saved.version == 1
        assert "INSERT INTO positions" in str(db.execute.await_args.args[0])

    async def test_insert_conflict(self) -> None:
        db = _db_returning(None)
        with pytest.raises(ConcurrentUpdateError):
            await PositionRepository().save_position(db, _position(is_new=True, version=0))

    async def test_update_with_version_guard(self) -> None:
        db = _db_returning(_position_row(version=3))
        saved = await PositionRepository().save_position(db, _position(version=2))
        assert saved is not None
        assert saved.version == 3
        assert db.execute.await_args.args[1]["version"] == 2

    async def test_update_stale_version(self) -> None:
        db = _db_returning(None)
        with pytest.raises(ConcurrentUpdateError):
            await PositionRepository().save_position(db, _position(version=2))

    async def test_zero_quantity_deletes(self) -> None:
        result = MagicMock()
        result.rowcount = 1
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        saved = await PositionRepository().save_position(
            db, _position(quantity=Decimal("0"), total_invested=Decimal("0"))
        )

        assert saved is None
        assert "DELETE FROM positions" in str(db.execute.await_args.args[0])

    async def test_delete_stale_version(self) -> None:
        result = MagicMock()
        result.rowcount = 0
        db = AsyncMock()
        db.execute = AsyncMock(return_value=result)

        with pytest.raises(ConcurrentUpdateError):
            await PositionRepository().save_position(
                db, _position(quantity=Decimal("0"), total_invested=Decimal("0"))
            )


class TestLedgerRepository:
    async def test_list_returns_entries_and_total(self) -> None:
        row = MagicMock()
        row.id = "1"
        row.user_id = "user-1"
        row.type = "buy"
        row.crypto_id = "bitcoin"
        row.crypto_symbol = "BTC"
        row.crypto_name = "Bitcoin"
        row.amount = Decimal("1")
        row.price = Decimal("50")
        row.total_value = Decimal("50")
        row.timestamp = datetime.now(UTC)
        rows_result = MagicMock()
        rows_result.fetchall.return_value = [row]
        count_result = MagicMock()
        count_result.scalar_one.return_value = 7
        db = AsyncMock()
        db.execute = AsyncMock(side_effect=[rows_result, count_result])

        entries, total = await LedgerRepository().list_entries(
            db, "user-1", None, "buy", 1, 0
        )

        assert total == 7
        assert entries[0].crypto_symbol == "BTC"
        params = db.execute.await_args_list[0].args[1]
        assert params == {
            "user_id": "user-1",
            "crypto_id": None,
            "type": "buy",
            "limit": 1,
            "offset": 0,
        }


class TestProcessedDepositRepository:
    async def test_first_claim_wins(self) -> None:
        db = _db_returning(MagicMock())
        claimed = await ProcessedDepositRepository().claim(
            db, "pi_1", "user-1", Decimal("50"), DepositSource.WEBHOOK
        )
        assert claimed is True
        assert db.execute.await_args.args[1]["source"] == "webhook"

    async def test_second_claim_loses(self) -> None:
        db = _db_returning(None)
        claimed = await ProcessedDepositRepository().claim(
            db, "pi_1", "user-1", Decimal("50"), DepositSource.POLL
        )
        assert claimed is False
