"""006: create processed_deposits table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE processed_deposits (
            payment_intent_id   VARCHAR(255)    PRIMARY KEY,
            user_id             VARCHAR(64)     NOT NULL,
            amount              NUMERIC(28, 8)  NOT NULL,
            source              VARCHAR(10)     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_processed_deposits_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_processed_deposits_source CHECK (source IN ('webhook', 'poll'))
        );
    """)
    op.execute("CREATE INDEX idx_processed_deposits_user ON processed_deposits (user_id, created_at DESC);")
    op.execute(
        "COMMENT ON TABLE processed_deposits IS "
        "'One row per credited payment intent: makes deposit crediting exactly-once';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS processed_deposits CASCADE;")
