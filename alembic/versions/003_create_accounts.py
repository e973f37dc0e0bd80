"""003: create accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-03-02
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
            user_id             VARCHAR(64)  PRIMARY KEY,
            display_name        VARCHAR(64)  NOT NULL DEFAULT '',
            email               VARCHAR(255) NOT NULL,
            balance             BIGINT       NOT NULL DEFAULT 0,
            profile_url         VARCHAR(256),
            contact_handle      VARCHAR(32),
            is_verified         BOOLEAN      NOT NULL DEFAULT FALSE,
            verification_status VARCHAR(16)  NOT NULL DEFAULT 'none',
            version             BIGINT       NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            profile_updated_at  TIMESTAMPTZ,
            CONSTRAINT ck_accounts_balance_gte_0 CHECK (balance >= 0),
            CONSTRAINT ck_accounts_verification_status
                CHECK (verification_status IN ('none', 'pending', 'approved', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_accounts_email ON accounts (email);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Marketplace accounts; all amounts in cents';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
