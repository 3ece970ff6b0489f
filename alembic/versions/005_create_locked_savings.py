"""005: create locked_savings table

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
    # account_id has no FK: withdrawn savings keep it after the account is removed.
    op.execute("""
        CREATE TABLE locked_savings (
            id                  UUID         PRIMARY KEY DEFAULT gen_random_uuid(),
            account_id          UUID         NOT NULL,
            owner_id            VARCHAR(64)  NOT NULL,
            owner_identity      VARCHAR(255) NOT NULL,
            amount              BIGINT       NOT NULL,
            lock_period_months  INTEGER      NOT NULL,
            start_date          TIMESTAMPTZ  NOT NULL,
            end_date            TIMESTAMPTZ  NOT NULL,
            status              VARCHAR(16)  NOT NULL DEFAULT 'Pending',
            external_order_ref  VARCHAR(128),
            penalty_amount      BIGINT       NOT NULL DEFAULT 0,
            payout_amount       BIGINT,
            withdrawn_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_locked_savings_order   UNIQUE (external_order_ref),
            CONSTRAINT ck_locked_savings_amount  CHECK (amount > 0),
            CONSTRAINT ck_locked_savings_period  CHECK (lock_period_months IN (3, 6, 12, 24)),
            CONSTRAINT ck_locked_savings_status  CHECK (
                status IN ('Pending', 'Locked', 'Withdrawn', 'Failed')),
            CONSTRAINT ck_locked_savings_dates   CHECK (end_date > start_date),
            CONSTRAINT ck_locked_savings_penalty CHECK (penalty_amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_locked_savings_account ON locked_savings (account_id, status);")
    op.execute("CREATE INDEX idx_locked_savings_owner ON locked_savings (owner_id, created_at);")
    op.execute("""
        CREATE TRIGGER trg_locked_savings_updated_at
            BEFORE UPDATE ON locked_savings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS locked_savings CASCADE;")
