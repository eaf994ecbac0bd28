"""LedgerRepository: append-only ``transactions`` table.

Rows are never updated. The only way an entry disappears is the rollback of
the order transaction that inserted it.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pt_common.errors import InternalError
from src.pt_transaction.domain.models import LedgerEntry

_COLUMNS = (
    "id, user_id, type, crypto_id, crypto_symbol, crypto_name, "
    "amount, price, total_value, timestamp"
)

_INSERT_SQL = text(f"""
    INSERT INTO transactions
        (id, user_id, type, crypto_id, crypto_symbol, crypto_name,
         amount, price, total_value)
    VALUES
        (:id, :user_id, :type, :crypto_id, :crypto_symbol, :crypto_name,
         :amount, :price, :total_value)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM transactions
    WHERE id = :id AND user_id = :user_id
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:crypto_id AS VARCHAR) IS NULL OR crypto_id = :crypto_id)
      AND (CAST(:type AS VARCHAR) IS NULL OR type = :type)
    ORDER BY timestamp DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_SQL = text("""
    SELECT COUNT(*)
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:crypto_id AS VARCHAR) IS NULL OR crypto_id = :crypto_id)
      AND (CAST(:type AS VARCHAR) IS NULL OR type = :type)
""")


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        crypto_id=row.crypto_id,  # type: ignore[attr-defined]
        crypto_symbol=row.crypto_symbol,  # type: ignore[attr-defined]
        crypto_name=row.crypto_name,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        total_value=row.total_value,  # type: ignore[attr-defined]
        timestamp=row.timestamp,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    async def insert_entry(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": entry.id,
                "user_id": entry.user_id,
                "type": entry.type,
                "crypto_id": entry.crypto_id,
                "crypto_symbol": entry.crypto_symbol,
                "crypto_name": entry.crypto_name,
                "amount": entry.amount,
                "price": entry.price,
                "total_value": entry.total_value,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_entry(row)

    async def get_entry(
        self, db: AsyncSession, user_id: str, entry_id: str
    ) -> LedgerEntry | None:
        row = (await db.execute(_GET_SQL, {"id": entry_id, "user_id": user_id})).fetchone()
        return _row_to_entry(row) if row else None

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        crypto_id: str | None,
        entry_type: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[LedgerEntry], int]:
        filters = {"user_id": user_id, "crypto_id": crypto_id, "type": entry_type}
        rows = (
            await db.execute(_LIST_SQL, {**filters, "limit": limit, "offset": offset})
        ).fetchall()
        total = (await db.execute(_COUNT_SQL, filters)).scalar_one()
        return [_row_to_entry(r) for r in rows], int(total)
