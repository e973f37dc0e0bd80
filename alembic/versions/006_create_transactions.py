"""006: create transactions table

Revision ID: 006
Revises: 005
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # order_id has no FK: a filled order is deleted, its trades stay.
    op.execute("""
        CREATE TABLE transactions (
            trade_id        VARCHAR(32) PRIMARY KEY,
            order_id        VARCHAR(32) NOT NULL,
            buyer_id        VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            seller_id       VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            resource        VARCHAR(8)  NOT NULL,
            quantity        BIGINT      NOT NULL,
            unit_price      BIGINT      NOT NULL,
            total           BIGINT      NOT NULL,
            idempotency_key VARCHAR(64) NOT NULL,
            executed_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_transactions_buyer_key UNIQUE (buyer_id, idempotency_key),
            CONSTRAINT ck_transactions_no_self_trade CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_transactions_quantity_gt_0 CHECK (quantity > 0),
            CONSTRAINT ck_transactions_price_gt_0 CHECK (unit_price > 0),
            CONSTRAINT ck_transactions_total CHECK (total = quantity * unit_price),
            CONSTRAINT ck_transactions_resource
                CHECK (resource IN ('GOLD', 'OIL', 'ORE', 'DIA', 'URA', 'CASH'))
        );
    """)
    op.execute("CREATE INDEX idx_transactions_buyer ON transactions (buyer_id, trade_id DESC);")
    op.execute("CREATE INDEX idx_transactions_seller ON transactions (seller_id, trade_id DESC);")
    op.execute("""
        CREATE RULE rl_transactions_no_update AS ON UPDATE TO transactions DO INSTEAD NOTHING;
    """)
    op.execute("COMMENT ON TABLE transactions IS 'Append-only trade ledger, one row per settlement';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
