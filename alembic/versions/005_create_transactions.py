"""005: create transactions (ledger entries) table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              VARCHAR(32)     PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            type            VARCHAR(4)      NOT NULL,
            crypto_id       VARCHAR(64)     NOT NULL,
            crypto_symbol   VARCHAR(16)     NOT NULL,
            crypto_name     VARCHAR(100)    NOT NULL,
            amount          NUMERIC(28, 8)  NOT NULL,
            price           NUMERIC(28, 8)  NOT NULL,
            total_value     NUMERIC(28, 8)  NOT NULL,
            timestamp       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type         CHECK (type IN ('buy', 'sell')),
            CONSTRAINT ck_transactions_amount_gt_0  CHECK (amount > 0),
            CONSTRAINT ck_transactions_price_gt_0   CHECK (price > 0),
            CONSTRAINT ck_transactions_value_gte_0  CHECK (total_value >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_user_time ON transactions (user_id, timestamp DESC);"
    )
    op.execute("CREATE INDEX idx_transactions_user_crypto ON transactions (user_id, crypto_id);")
    op.execute("COMMENT ON TABLE transactions IS 'Ledger of buy/sell orders: append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
