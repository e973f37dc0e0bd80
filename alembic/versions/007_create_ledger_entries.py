"""007: create ledger_entries table

Revision ID: 007
Revises: 006
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL   PRIMARY KEY,
            user_id         VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            entry_type      VARCHAR(32) NOT NULL,
            amount          BIGINT      NOT NULL,
            balance_after   BIGINT      NOT NULL,
            reference_type  VARCHAR(32),
            reference_id    VARCHAR(64),
            description     TEXT,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (entry_type IN (
                'DEPOSIT_APPROVED', 'TRADE_PAYMENT', 'TRADE_RECEIPT', 'ADMIN_ADJUSTMENT'
            )),
            CONSTRAINT ck_ledger_balance_after_gte_0 CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user ON ledger_entries (user_id, id DESC);")
    op.execute("CREATE INDEX idx_ledger_reference ON ledger_entries (reference_type, reference_id);")
    op.execute("COMMENT ON TABLE ledger_entries IS 'Balance audit trail, append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
