"""003: create accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id                  UUID         PRIMARY KEY DEFAULT gen_random_uuid(),
            owner_id            VARCHAR(64)  NOT NULL,
            name                VARCHAR(128) NOT NULL,
            provider            VARCHAR(64)  NOT NULL,
            account_type        VARCHAR(32)  NOT NULL DEFAULT 'checking',
            balance             BIGINT,
            balance_synced_at   TIMESTAMPTZ,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_balance_gte_0 CHECK (balance IS NULL OR balance >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_accounts_owner ON accounts (owner_id, created_at);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON COLUMN accounts.balance IS "
        "'cents; NULL = unknown, needs sync (distinct from 0)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
