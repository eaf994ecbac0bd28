"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            username                VARCHAR(30)     NOT NULL,
            email                   VARCHAR(255)    NOT NULL,
            first_name              VARCHAR(50)     NOT NULL,
            last_name               VARCHAR(50)     NOT NULL,
            date_of_birth           DATE            NOT NULL,
            password_hash           VARCHAR(255)    NOT NULL,
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            failed_login_attempts   INT             NOT NULL DEFAULT 0,
            account_locked_until    TIMESTAMPTZ,
            last_login              TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username        UNIQUE (username),
            CONSTRAINT uq_users_email           UNIQUE (email),
            CONSTRAINT ck_users_username_len    CHECK (LENGTH(username) BETWEEN 3 AND 30),
            CONSTRAINT ck_users_email_lower     CHECK (email = LOWER(email)),
            CONSTRAINT ck_users_failed_gte_0    CHECK (failed_login_attempts >= 0)
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_users_username_lower ON users (LOWER(username));")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Registered users: credentials and login lockout state';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
