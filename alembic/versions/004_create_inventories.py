"""004: create inventories table

Revision ID: 004
Revises: 003
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE inventories (
            user_id     VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            resource    VARCHAR(8)  NOT NULL,
            quantity    BIGINT      NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, resource),
            CONSTRAINT ck_inventories_quantity_gte_0 CHECK (quantity >= 0),
            CONSTRAINT ck_inventories_resource
                CHECK (resource IN ('GOLD', 'OIL', 'ORE', 'DIA', 'URA', 'CASH'))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS inventories CASCADE;")
