"""004: create positions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         VARCHAR(64)     NOT NULL,
            crypto_id       VARCHAR(64)     NOT NULL,
            crypto_symbol   VARCHAR(16)     NOT NULL,
            crypto_name     VARCHAR(100)    NOT NULL,
            quantity        NUMERIC(28, 8)  NOT NULL,
            average_cost    NUMERIC(28, 8)  NOT NULL,
            total_invested  NUMERIC(28, 8)  NOT NULL,
            version         BIGINT          NOT NULL DEFAULT 1,
            last_updated    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_positions_user_crypto         UNIQUE (user_id, crypto_id),
            CONSTRAINT ck_positions_quantity_gt_0       CHECK (quantity > 0),
            CONSTRAINT ck_positions_avg_cost_gte_0      CHECK (average_cost >= 0),
            CONSTRAINT ck_positions_invested_gte_0      CHECK (total_invested >= 0),
            CONSTRAINT ck_positions_symbol_upper        CHECK (crypto_symbol = UPPER(crypto_symbol))
        );
    """)
    op.execute("CREATE INDEX idx_positions_user ON positions (user_id);")
    op.execute(
        "COMMENT ON TABLE positions IS "
        "'Holdings per user and asset: weighted-average cost, zero-quantity rows are deleted';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
