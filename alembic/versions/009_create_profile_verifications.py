"""009: create profile_verifications table

Revision ID: 009
Revises: 008
Create Date: 2026-03-02
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE profile_verifications (
            id                  VARCHAR(32) PRIMARY KEY,
            user_id             VARCHAR(64) NOT NULL REFERENCES accounts (user_id),
            display_name        VARCHAR(64) NOT NULL,
            profile_url         VARCHAR(256),
            contact_handle      VARCHAR(32),
            is_resubmission     BOOLEAN     NOT NULL DEFAULT FALSE,
            status              VARCHAR(16) NOT NULL DEFAULT 'pending',
            moderator_id        VARCHAR(64),
            requested_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            approved_at         TIMESTAMPTZ,
            rejected_at         TIMESTAMPTZ,
            rejection_reason    TEXT,
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_profile_verifications_status
                CHECK (status IN ('pending', 'approved', 'rejected')),
            CONSTRAINT ck_profile_verifications_resolution CHECK (
                (status = 'pending'  AND moderator_id IS NULL)
             OR (status = 'approved' AND moderator_id IS NOT NULL AND approved_at IS NOT NULL)
             OR (status = 'rejected' AND moderator_id IS NOT NULL AND rejected_at IS NOT NULL)
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_profile_verifications_user ON profile_verifications (user_id, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_profile_verifications_status ON profile_verifications (status, id DESC);"
    )
    # at most one pending request per account
    op.execute("""
        CREATE UNIQUE INDEX uq_profile_verifications_one_pending
            ON profile_verifications (user_id) WHERE status = 'pending';
    """)
    op.execute("""
        CREATE TRIGGER trg_profile_verifications_updated_at
            BEFORE UPDATE ON profile_verifications
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS profile_verifications CASCADE;")
