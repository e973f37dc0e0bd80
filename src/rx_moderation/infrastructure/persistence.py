"""Request queue persistence: raw SQL for deposit and verification requests.

Moderation writes are guarded with `WHERE status = 'pending'`, so a decision
applies at most once even if two administrators act at the same moment.
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_moderation.domain.models import DepositRequest, VerificationRequest
from src.rx_moderation.domain.state import ModerationState, state_from_columns

# ---------------------------------------------------------------------------
# SQL: deposit_requests
# ---------------------------------------------------------------------------

_DEPOSIT_COLUMNS = """
    d.id, d.user_id, d.amount, d.description, d.client_request_id,
    d.status, d.moderator_id, d.requested_at, d.approved_at, d.rejected_at,
    d.rejection_reason, a.display_name, a.email
"""

_INSERT_DEPOSIT_SQL = text("""
    INSERT INTO deposit_requests (id, user_id, amount, description, client_request_id)
    VALUES (:id, :user_id, :amount, :description, :client_request_id)
    RETURNING requested_at
""")

_GET_DEPOSIT_SQL = text(f"""
    SELECT {_DEPOSIT_COLUMNS}
    FROM deposit_requests d
    LEFT JOIN accounts a ON a.user_id = d.user_id
    WHERE d.id = :id
""")

_GET_DEPOSIT_FOR_UPDATE_SQL = text(f"""
    SELECT {_DEPOSIT_COLUMNS}
    FROM deposit_requests d
    LEFT JOIN accounts a ON a.user_id = d.user_id
    WHERE d.id = :id
    FOR UPDATE OF d
""")

_GET_DEPOSIT_BY_CLIENT_ID_SQL = text(f"""
    SELECT {_DEPOSIT_COLUMNS}
    FROM deposit_requests d
    LEFT JOIN accounts a ON a.user_id = d.user_id
    WHERE d.user_id = :user_id AND d.client_request_id = :client_request_id
""")

_LIST_DEPOSITS_SQL = text(f"""
    SELECT {_DEPOSIT_COLUMNS}
    FROM deposit_requests d
    LEFT JOIN accounts a ON a.user_id = d.user_id
    WHERE (CAST(:user_id AS TEXT) IS NULL OR d.user_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR d.status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR d.id < :cursor_id)
    ORDER BY d.id DESC
    LIMIT :limit
""")

_APPROVE_DEPOSIT_SQL = text("""
    UPDATE deposit_requests
    SET status = 'approved', moderator_id = :moderator_id, approved_at = :at,
        updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING id
""")

_REJECT_DEPOSIT_SQL = text("""
    UPDATE deposit_requests
    SET status = 'rejected', moderator_id = :moderator_id, rejected_at = :at,
        rejection_reason = :reason, updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING id
""")

_DEPOSIT_STATS_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE status = 'pending')  AS pending,
        COUNT(*) FILTER (WHERE status = 'approved') AS approved,
        COUNT(*) FILTER (WHERE status = 'rejected') AS rejected,
        COALESCE(SUM(amount) FILTER (WHERE status = 'approved'), 0) AS approved_amount
    FROM deposit_requests
""")

# ---------------------------------------------------------------------------
# SQL: profile_verifications
# ---------------------------------------------------------------------------

_VERIFICATION_COLUMNS = """
    id, user_id, display_name, profile_url, contact_handle, is_resubmission,
    status, moderator_id, requested_at, approved_at, rejected_at, rejection_reason
"""

_INSERT_VERIFICATION_SQL = text("""
    INSERT INTO profile_verifications
        (id, user_id, display_name, profile_url, contact_handle, is_resubmission)
    VALUES
        (:id, :user_id, :display_name, :profile_url, :contact_handle, :is_resubmission)
    RETURNING requested_at
""")

_GET_VERIFICATION_SQL = text(f"""
    SELECT {_VERIFICATION_COLUMNS}
    FROM profile_verifications
    WHERE id = :id
""")

_GET_VERIFICATION_FOR_UPDATE_SQL = text(f"""
    SELECT {_VERIFICATION_COLUMNS}
    FROM profile_verifications
    WHERE id = :id
    FOR UPDATE
""")

_LATEST_VERIFICATION_SQL = text(f"""
    SELECT {_VERIFICATION_COLUMNS}
    FROM profile_verifications
    WHERE user_id = :user_id
    ORDER BY id DESC
    LIMIT 1
""")

_LIST_VERIFICATIONS_SQL = text(f"""
    SELECT {_VERIFICATION_COLUMNS}
    FROM profile_verifications
    WHERE (CAST(:user_id AS TEXT) IS NULL OR user_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_APPROVE_VERIFICATION_SQL = text("""
    UPDATE profile_verifications
    SET status = 'approved', moderator_id = :moderator_id, approved_at = :at,
        updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING id
""")

_REJECT_VERIFICATION_SQL = text("""
    UPDATE profile_verifications
    SET status = 'rejected', moderator_id = :moderator_id, rejected_at = :at,
        rejection_reason = :reason, updated_at = NOW()
    WHERE id = :id AND status = 'pending'
    RETURNING id
""")

_VERIFICATION_STATS_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE status = 'pending')  AS pending,
        COUNT(*) FILTER (WHERE status = 'approved') AS approved,
        COUNT(*) FILTER (WHERE status = 'rejected') AS rejected
    FROM profile_verifications
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_state(row: Any) -> ModerationState:
    return state_from_columns(
        row.status, row.moderator_id, row.approved_at, row.rejected_at, row.rejection_reason
    )


def _row_to_deposit(row: Any) -> DepositRequest:
    return DepositRequest(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        description=row.description,
        client_request_id=row.client_request_id,
        requested_at=row.requested_at,
        display_name=row.display_name,
        email=row.email,
        state=_row_state(row),
    )


def _row_to_verification(row: Any) -> VerificationRequest:
    return VerificationRequest(
        id=row.id,
        user_id=row.user_id,
        display_name=row.display_name,
        profile_url=row.profile_url,
        contact_handle=row.contact_handle,
        is_resubmission=row.is_resubmission,
        requested_at=row.requested_at,
        state=_row_state(row),
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class DepositRequestRepository:
    async def insert(self, req: DepositRequest, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_DEPOSIT_SQL,
            {
                "id": req.id,
                "user_id": req.user_id,
                "amount": req.amount,
                "description": req.description,
                "client_request_id": req.client_request_id,
            },
        )
        row = result.fetchone()
        if row is not None:
            req.requested_at = row.requested_at

    async def get_by_id(
        self, request_id: str, db: AsyncSession, for_update: bool = False
    ) -> DepositRequest | None:
        sql = _GET_DEPOSIT_FOR_UPDATE_SQL if for_update else _GET_DEPOSIT_SQL
        row = (await db.execute(sql, {"id": request_id})).fetchone()
        return _row_to_deposit(row) if row else None

    async def get_by_client_request_id(
        self, user_id: str, client_request_id: str, db: AsyncSession
    ) -> DepositRequest | None:
        row = (
            await db.execute(
                _GET_DEPOSIT_BY_CLIENT_ID_SQL,
                {"user_id": user_id, "client_request_id": client_request_id},
            )
        ).fetchone()
        return _row_to_deposit(row) if row else None

    async def list_requests(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[DepositRequest]:
        rows = (
            await db.execute(
                _LIST_DEPOSITS_SQL,
                {
                    "user_id": user_id,
                    "status": status,
                    "cursor_id": cursor_id,
                    "limit": limit,
                },
            )
        ).fetchall()
        return [_row_to_deposit(r) for r in rows]

    async def mark_approved(
        self, req: DepositRequest, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            _APPROVE_DEPOSIT_SQL,
            {"id": req.id, "moderator_id": req.moderator_id, "at": req.approved_at},
        )
        return result.fetchone() is not None

    async def mark_rejected(
        self, req: DepositRequest, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            _REJECT_DEPOSIT_SQL,
            {
                "id": req.id,
                "moderator_id": req.moderator_id,
                "at": req.rejected_at,
                "reason": req.rejection_reason,
            },
        )
        return result.fetchone() is not None

    async def stats(self, db: AsyncSession) -> dict[str, int]:
        row = (await db.execute(_DEPOSIT_STATS_SQL)).fetchone()
        return {
            "pending": row.pending,
            "approved": row.approved,
            "rejected": row.rejected,
            "approved_amount_cents": int(row.approved_amount),
        }


class VerificationRequestRepository:
    async def insert(self, req: VerificationRequest, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_VERIFICATION_SQL,
            {
                "id": req.id,
                "user_id": req.user_id,
                "display_name": req.display_name,
                "profile_url": req.profile_url,
                "contact_handle": req.contact_handle,
                "is_resubmission": req.is_resubmission,
            },
        )
        row = result.fetchone()
        if row is not None:
            req.requested_at = row.requested_at

    async def get_by_id(
        self, request_id: str, db: AsyncSession, for_update: bool = False
    ) -> VerificationRequest | None:
        sql = _GET_VERIFICATION_FOR_UPDATE_SQL if for_update else _GET_VERIFICATION_SQL
        row = (await db.execute(sql, {"id": request_id})).fetchone()
        return _row_to_verification(row) if row else None

    async def latest_for_user(
        self, user_id: str, db: AsyncSession
    ) -> VerificationRequest | None:
        row = (await db.execute(_LATEST_VERIFICATION_SQL, {"user_id": user_id})).fetchone()
        return _row_to_verification(row) if row else None

    async def list_requests(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[VerificationRequest]:
        rows = (
            await db.execute(
                _LIST_VERIFICATIONS_SQL,
                {
                    "user_id": user_id,
                    "status": status,
                    "cursor_id": cursor_id,
                    "limit": limit,
                },
            )
        ).fetchall()
        return [_row_to_verification(r) for r in rows]

    async def mark_approved(
        self, req: VerificationRequest, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            _APPROVE_VERIFICATION_SQL,
            {"id": req.id, "moderator_id": req.moderator_id, "at": req.approved_at},
        )
        return result.fetchone() is not None

    async def mark_rejected(
        self, req: VerificationRequest, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            _REJECT_VERIFICATION_SQL,
            {
                "id": req.id,
                "moderator_id": req.moderator_id,
                "at": req.rejected_at,
                "reason": req.rejection_reason,
            },
        )
        return result.fetchone() is not None

    async def stats(self, db: AsyncSession) -> dict[str, int]:
        row = (await db.execute(_VERIFICATION_STATS_SQL)).fetchone()
        return {"pending": row.pending, "approved": row.approved, "rejected": row.rejected}
