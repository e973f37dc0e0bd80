"""Profile verification requests.

The account row carries the denormalised verification fact
(`is_verified`, `verification_status`); every request and decision updates
it in the same transaction as the request row.
"""
import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rx_account.domain.repository import AccountRepositoryProtocol
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_common.datetime_utils import isoformat_or_none, utc_now
from src.rx_common.enums import RequestStatus, VerificationState
from src.rx_common.errors import (
    AccountNotFoundError,
    RequestAlreadyResolvedError,
    RequestNotFoundError,
)
from src.rx_common.id_generator import generate_id
from src.rx_moderation.application.schemas import (
    VerificationListResponse,
    VerificationRequestResponse,
    VerificationStatusResponse,
)
from src.rx_moderation.domain import state as moderation
from src.rx_moderation.domain.eligibility import check_can_request, next_request_at
from src.rx_moderation.domain.models import VerificationRequest
from src.rx_moderation.infrastructure.persistence import VerificationRequestRepository

logger = logging.getLogger(__name__)


def _cooldown() -> timedelta:
    return timedelta(hours=settings.VERIFICATION_COOLDOWN_HOURS)


class VerificationService:
    def __init__(
        self,
        repo: VerificationRequestRepository | None = None,
        accounts: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._repo = repo or VerificationRequestRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()

    async def request(self, db: AsyncSession, user_id: str) -> VerificationRequestResponse:
        """Snapshot the current profile into a new pending request."""
        try:
            # account row lock serialises concurrent submissions by one user
            account = await self._accounts.get_account(db, user_id, for_update=True)
            if account is None:
                raise AccountNotFoundError(user_id)
            latest = await self._repo.latest_for_user(user_id, db)
            is_resubmission = check_can_request(account, latest, utc_now(), _cooldown())

            req = VerificationRequest(
                id=generate_id(),
                user_id=user_id,
                display_name=account.display_name,
                profile_url=account.profile_url,
                contact_handle=account.contact_handle,
                is_resubmission=is_resubmission,
            )
            await self._repo.insert(req, db)
            await self._accounts.set_verification(db, user_id, VerificationState.PENDING.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Verification request %s queued: user=%s resubmission=%s",
            req.id, user_id, is_resubmission,
        )
        return VerificationRequestResponse.from_domain(req)

    async def status(self, db: AsyncSession, user_id: str) -> VerificationStatusResponse:
        account = await self._accounts.get_account(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        latest = await self._repo.latest_for_user(user_id, db)

        retry_at = next_request_at(latest, _cooldown())
        pending = latest is not None and latest.status == RequestStatus.PENDING
        can_request = (
            account.is_profile_complete
            and not account.is_verified
            and not pending
            and (retry_at is None or utc_now() >= retry_at)
        )
        return VerificationStatusResponse(
            is_verified=account.is_verified,
            verification_status=account.verification_status,
            is_profile_complete=account.is_profile_complete,
            latest=VerificationRequestResponse.from_domain(latest) if latest else None,
            can_request=can_request,
            can_request_at=isoformat_or_none(retry_at),
        )

    async def list_requests(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> VerificationListResponse:
        reqs = await self._repo.list_requests(db, user_id, status, limit + 1, cursor)
        has_more = len(reqs) > limit
        page = reqs[:limit]
        return VerificationListResponse(
            items=[VerificationRequestResponse.from_domain(r) for r in page],
            next_cursor=page[-1].id if has_more and page else None,
            has_more=has_more,
        )

    async def approve(
        self, db: AsyncSession, request_id: str, moderator_id: str
    ) -> VerificationRequestResponse:
        try:
            req = await self._repo.get_by_id(request_id, db, for_update=True)
            if req is None:
                raise RequestNotFoundError("Verification", request_id)
            req.state = moderation.approve(req.state, request_id, moderator_id, utc_now())
            if not await self._repo.mark_approved(req, db):
                raise RequestAlreadyResolvedError(request_id, "resolved")
            await self._accounts.set_verification(
                db, req.user_id, VerificationState.APPROVED.value, is_verified=True
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Verification %s approved by %s: user=%s", request_id, moderator_id, req.user_id)
        return VerificationRequestResponse.from_domain(req)

    async def reject(
        self, db: AsyncSession, request_id: str, moderator_id: str, reason: str | None
    ) -> VerificationRequestResponse:
        try:
            req = await self._repo.get_by_id(request_id, db, for_update=True)
            if req is None:
                raise RequestNotFoundError("Verification", request_id)
            req.state = moderation.reject(
                req.state, request_id, moderator_id, utc_now(), (reason or "").strip() or None
            )
            if not await self._repo.mark_rejected(req, db):
                raise RequestAlreadyResolvedError(request_id, "resolved")
            await self._accounts.set_verification(db, req.user_id, VerificationState.REJECTED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Verification %s rejected by %s: user=%s", request_id, moderator_id, req.user_id)
        return VerificationRequestResponse.from_domain(req)
