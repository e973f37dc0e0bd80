"""Deposit request lifecycle: submit, list, approve (credits balance), reject."""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rx_account.domain.repository import AccountRepositoryProtocol
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_common.datetime_utils import utc_now
from src.rx_common.enums import LedgerEntryType
from src.rx_common.errors import (
    DuplicateDepositRequestError,
    InvalidAmountError,
    RequestAlreadyResolvedError,
    RequestNotFoundError,
)
from src.rx_common.id_generator import generate_id
from src.rx_moderation.application.schemas import (
    DEFAULT_DEPOSIT_DESCRIPTION,
    DepositDecisionResponse,
    DepositListResponse,
    DepositRequestResponse,
)
from src.rx_moderation.domain import state as moderation
from src.rx_moderation.domain.models import DepositRequest
from src.rx_moderation.infrastructure.persistence import DepositRequestRepository

logger = logging.getLogger(__name__)


def validate_deposit_amount(amount_cents: int) -> None:
    if amount_cents <= 0:
        raise InvalidAmountError("deposit amount must be positive")
    if amount_cents > settings.DEPOSIT_MAX_CENTS:
        raise InvalidAmountError(
            f"deposit amount must not exceed {settings.DEPOSIT_MAX_CENTS} cents"
        )


class DepositService:
    def __init__(
        self,
        repo: DepositRequestRepository | None = None,
        accounts: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._repo = repo or DepositRequestRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        amount_cents: int,
        description: str | None,
        client_request_id: str | None,
    ) -> tuple[DepositRequestResponse, bool]:
        """Queue a pending deposit. Returns (request, created)."""
        validate_deposit_amount(amount_cents)
        text = (description or "").strip() or DEFAULT_DEPOSIT_DESCRIPTION

        if client_request_id:
            existing = await self._repo.get_by_client_request_id(user_id, client_request_id, db)
            if existing is not None:
                return self._replay(existing, amount_cents, text), False

        req = DepositRequest(
            id=generate_id(),
            user_id=user_id,
            amount=amount_cents,
            description=text,
            client_request_id=client_request_id,
        )
        try:
            await self._repo.insert(req, db)
            await db.commit()
        except IntegrityError:
            # lost a race against a concurrent retry with the same client_request_id
            await db.rollback()
            if not client_request_id:
                raise
            existing = await self._repo.get_by_client_request_id(user_id, client_request_id, db)
            if existing is None:
                raise
            return self._replay(existing, amount_cents, text), False
        except Exception:
            await db.rollback()
            raise

        stored = await self._repo.get_by_id(req.id, db)
        logger.info("Deposit request %s queued: user=%s amount=%d", req.id, user_id, amount_cents)
        return DepositRequestResponse.from_domain(stored or req), True

    @staticmethod
    def _replay(
        existing: DepositRequest, amount_cents: int, description: str
    ) -> DepositRequestResponse:
        if existing.amount != amount_cents or existing.description != description:
            raise DuplicateDepositRequestError(existing.client_request_id or "")
        return DepositRequestResponse.from_domain(existing)

    async def list_requests(
        self,
        db: AsyncSession,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> DepositListResponse:
        """Newest first. user_id=None lists every account (admin queue)."""
        reqs = await self._repo.list_requests(db, user_id, status, limit + 1, cursor)
        has_more = len(reqs) > limit
        page = reqs[:limit]
        return DepositListResponse(
            items=[DepositRequestResponse.from_domain(r) for r in page],
            next_cursor=page[-1].id if has_more and page else None,
            has_more=has_more,
        )

    async def approve(
        self, db: AsyncSession, request_id: str, moderator_id: str
    ) -> DepositDecisionResponse:
        """Status transition, balance credit and audit row commit together."""
        try:
            req = await self._repo.get_by_id(request_id, db, for_update=True)
            if req is None:
                raise RequestNotFoundError("Deposit", request_id)
            req.state = moderation.approve(req.state, request_id, moderator_id, utc_now())
            if not await self._repo.mark_approved(req, db):
                raise RequestAlreadyResolvedError(request_id, "resolved")
            entry = await self._accounts.credit(
                db,
                req.user_id,
                req.amount,
                LedgerEntryType.DEPOSIT_APPROVED.value,
                "DEPOSIT",
                req.id,
                req.description,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Deposit %s approved by %s: user=%s amount=%d",
            request_id, moderator_id, req.user_id, req.amount,
        )
        return DepositDecisionResponse(
            request=DepositRequestResponse.from_domain(req),
            balance_after_cents=entry.balance_after,
        )

    async def reject(
        self, db: AsyncSession, request_id: str, moderator_id: str, reason: str | None
    ) -> DepositDecisionResponse:
        try:
            req = await self._repo.get_by_id(request_id, db, for_update=True)
            if req is None:
                raise RequestNotFoundError("Deposit", request_id)
            req.state = moderation.reject(
                req.state, request_id, moderator_id, utc_now(), (reason or "").strip() or None
            )
            if not await self._repo.mark_rejected(req, db):
                raise RequestAlreadyResolvedError(request_id, "resolved")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Deposit %s rejected by %s", request_id, moderator_id)
        return DepositDecisionResponse(request=DepositRequestResponse.from_domain(req))
