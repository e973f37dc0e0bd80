"""005: create orders table

Revision ID: 005
Revises: 004
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(32) PRIMARY KEY,
            seller_id           VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            resource            VARCHAR(8)  NOT NULL,
            unit_price          BIGINT      NOT NULL,
            remaining_quantity  BIGINT      NOT NULL,
            original_quantity   BIGINT      NOT NULL,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_resource
                CHECK (resource IN ('GOLD', 'OIL', 'ORE', 'DIA', 'URA', 'CASH')),
            CONSTRAINT ck_orders_price_gt_0     CHECK (unit_price > 0),
            CONSTRAINT ck_orders_remaining_gt_0 CHECK (remaining_quantity > 0),
            CONSTRAINT ck_orders_remaining_lte_original
                CHECK (remaining_quantity <= original_quantity)
        );
    """)
    op.execute(
        "CREATE INDEX idx_orders_book ON orders (resource, unit_price DESC, created_at);"
    )
    op.execute("CREATE INDEX idx_orders_seller ON orders (seller_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
