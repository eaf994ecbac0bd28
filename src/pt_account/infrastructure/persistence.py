"""AccountRepository and PositionRepository: PostgreSQL implementations.

Balance mutations are single atomic ``UPDATE ... RETURNING`` statements. A
result of 0 rows means a business constraint was violated (insufficient
funds) or the account does not exist.

Position writes are optimistic: they carry the version read earlier and
match 0 rows if another request got there first, which surfaces as
ConcurrentUpdateError for the caller to retry.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.exc import DataError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_account.domain.models import Account, Position
from src.pt_common.errors import (
    AccountNotFoundError,
    BalanceLimitError,
    ConcurrentUpdateError,
    InsufficientFundsError,
    InternalError,
)
from src.pt_common.money import MAX_NUMERIC, ZERO

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = "id, user_id, balance, version, created_at, updated_at"

_CREATE_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (user_id, balance, version)
    VALUES (:user_id, 0, 0)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
""")

_DEBIT_SQL = text(f"""
    UPDATE accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

_CREDIT_SQL = text(f"""
    UPDATE accounts
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: positions
# ---------------------------------------------------------------------------

_POSITION_COLUMNS = (
    "user_id, crypto_id, crypto_symbol, crypto_name, quantity, average_cost, "
    "total_invested, version, last_updated, created_at"
)

_GET_POSITION_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND crypto_id = :crypto_id
""")

_LIST_POSITIONS_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE user_id = :user_id AND quantity > 0
    ORDER BY crypto_symbol
""")

_INSERT_POSITION_SQL = text(f"""
    INSERT INTO positions
        (user_id, crypto_id, crypto_symbol, crypto_name,
         quantity, average_cost, total_invested, version)
    VALUES
        (:user_id, :crypto_id, :crypto_symbol, :crypto_name,
         :quantity, :average_cost, :total_invested, 1)
    ON CONFLICT (user_id, crypto_id) DO NOTHING
    RETURNING {_POSITION_COLUMNS}
""")

_UPDATE_POSITION_SQL = text(f"""
    UPDATE positions
    SET quantity = :quantity,
        average_cost = :average_cost,
        total_invested = :total_invested,
        version = version + 1,
        last_updated = NOW()
    WHERE user_id = :user_id AND crypto_id = :crypto_id AND version = :version
    RETURNING {_POSITION_COLUMNS}
""")

_DELETE_POSITION_SQL = text("""
    DELETE FROM positions
    WHERE user_id = :user_id AND crypto_id = :crypto_id AND version = :version
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_position(row: object) -> Position:
    return Position(
        user_id=row.user_id,  # type: ignore[attr-defined]
        crypto_id=row.crypto_id,  # type: ignore[attr-defined]
        crypto_symbol=row.crypto_symbol,  # type: ignore[attr-defined]
        crypto_name=row.crypto_name,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        average_cost=row.average_cost,  # type: ignore[attr-defined]
        total_invested=row.total_invested,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        last_updated=row.last_updated,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Cash balances: every mutation is one atomic statement."""

    async def create_account(self, db: AsyncSession, user_id: str) -> Account:
        result = await db.execute(_CREATE_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows")
        return _row_to_account(row)

    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def debit(self, db: AsyncSession, user_id: str, amount: Decimal) -> Account:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            account = await self.get_account_by_user_id(db, user_id)
            if account is None:
                raise AccountNotFoundError(user_id)
            raise InsufficientFundsError(amount, account.balance)
        return _row_to_account(row)

    async def credit(self, db: AsyncSession, user_id: str, amount: Decimal) -> Account:
        if amount > MAX_NUMERIC:
            raise BalanceLimitError(amount)
        try:
            result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        except DataError as exc:
            # numeric field overflow on balance + amount
            raise BalanceLimitError(amount) from exc
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(user_id)
        return _row_to_account(row)


class PositionRepository:
    """Per-user, per-asset holdings with optimistic version checks."""

    async def get_position(
        self, db: AsyncSession, user_id: str, crypto_id: str
    ) -> Position | None:
        result = await db.execute(
            _GET_POSITION_SQL, {"user_id": user_id, "crypto_id": crypto_id}
        )
        row = result.fetchone()
        return _row_to_position(row) if row else None

    async def list_positions(self, db: AsyncSession, user_id: str) -> list[Position]:
        result = await db.execute(_LIST_POSITIONS_SQL, {"user_id": user_id})
        return [_row_to_position(row) for row in result.fetchall()]

    async def save_position(self, db: AsyncSession, position: Position) -> Position | None:
        """Persist ``position``; returns None when it was closed and deleted."""
        params = {
            "user_id": position.user_id,
            "crypto_id": position.crypto_id,
            "version": position.version,
        }
        if position.is_new:
            result = await db.execute(
                _INSERT_POSITION_SQL,
                {
                    **params,
                    "crypto_symbol": position.crypto_symbol,
                    "crypto_name": position.crypto_name,
                    "quantity": position.quantity,
                    "average_cost": position.average_cost,
                    "total_invested": position.total_invested,
                },
            )
            row = result.fetchone()
            if row is None:
                raise ConcurrentUpdateError(
                    f"position {position.crypto_id} was opened by another request"
                )
            return _row_to_position(row)

        if position.quantity == ZERO:
            result = await db.execute(_DELETE_POSITION_SQL, params)
            if result.rowcount == 0:
                raise ConcurrentUpdateError(
                    f"position {position.crypto_id} changed since version {position.version}"
                )
            return None

        result = await db.execute(
            _UPDATE_POSITION_SQL,
            {
                **params,
                "quantity": position.quantity,
                "average_cost": position.average_cost,
                "total_invested": position.total_invested,
            },
        )
        row = result.fetchone()
        if row is None:
            raise ConcurrentUpdateError(
                f"position {position.crypto_id} changed since version {position.version}"
            )
        return _row_to_position(row)
