"""008: create deposit_requests table

Revision ID: 008
Revises: 007
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE deposit_requests (
            id                  VARCHAR(32) PRIMARY KEY,
            user_id             VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            amount              BIGINT      NOT NULL,
            description         TEXT        NOT NULL,
            client_request_id   VARCHAR(64),
            status              VARCHAR(16) NOT NULL DEFAULT 'pending',
            moderator_id        VARCHAR(64),
            requested_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            approved_at         TIMESTAMPTZ,
            rejected_at         TIMESTAMPTZ,
            rejection_reason    TEXT,
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_deposit_requests_client_id UNIQUE (user_id, client_request_id),
            CONSTRAINT ck_deposit_requests_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_deposit_requests_status
                CHECK (status IN ('pending', 'approved', 'rejected')),
            CONSTRAINT ck_deposit_requests_resolution CHECK (
                (status = 'pending'  AND moderator_id IS NULL)
             OR (status = 'approved' AND moderator_id IS NOT NULL AND approved_at IS NOT NULL)
             OR (status = 'rejected' AND moderator_id IS NOT NULL AND rejected_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_deposit_requests_status ON deposit_requests (status, id DESC);")
    op.execute("CREATE INDEX idx_deposit_requests_user ON deposit_requests (user_id, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_deposit_requests_updated_at
            BEFORE UPDATE ON deposit_requests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS deposit_requests CASCADE;")
