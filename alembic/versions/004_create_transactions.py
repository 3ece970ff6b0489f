"""004: create transactions table

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
        CREATE TABLE transactions (
            id                      UUID         PRIMARY KEY DEFAULT gen_random_uuid(),
            type                    VARCHAR(16)  NOT NULL,
            amount                  BIGINT       NOT NULL,
            fee                     BIGINT       NOT NULL DEFAULT 0,
            sender_identity         VARCHAR(255) NOT NULL,
            recipient_identity      VARCHAR(255) NOT NULL,
            status                  VARCHAR(16)  NOT NULL,
            source_account_id       UUID,
            destination_account_id  UUID,
            geo_fence               JSONB,
            expires_at              TIMESTAMPTZ,
            description             TEXT         NOT NULL DEFAULT '',
            reference_id            UUID,
            external_order_ref      VARCHAR(128),
            created_at              TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type CHECK (
                type IN ('send', 'receive', 'request', 'lock', 'penalty', 'fee')),
            CONSTRAINT ck_transactions_status CHECK (
                status IN ('Pending', 'Completed', 'Failed', 'Returned', 'Locked', 'Declined')),
            CONSTRAINT ck_transactions_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_transactions_fee_gte_0   CHECK (fee >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_sender ON transactions "
        "(sender_identity, created_at DESC, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transactions_recipient ON transactions "
        "(recipient_identity, created_at DESC, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transactions_pending_expiry ON transactions (expires_at) "
        "WHERE status = 'Pending' AND expires_at IS NOT NULL;"
    )
    op.execute("CREATE INDEX idx_transactions_reference ON transactions (reference_id);")
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE transactions IS "
        "'Ledger of record: insert/update only, rows are never deleted';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
