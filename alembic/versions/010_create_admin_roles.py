"""010: create admin_roles table

Revision ID: 010
Revises: 009
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE admin_roles (
            user_id     VARCHAR(64) PRIMARY KEY REFERENCES accounts (user_id) ON DELETE CASCADE,
            granted_by  VARCHAR(64),
            granted_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("COMMENT ON TABLE admin_roles IS 'Single source of administrator privileges';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS admin_roles CASCADE;")
