"""AccountApplicationService: thin composition layer.

Combines repository calls with schema transformations. Profile updates
commit explicitly; reads run without a transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.application.schemas import (
    AccountResponse,
    LedgerEntryItem,
    LedgerResponse,
    PublicProfileResponse,
)
from src.rx_account.domain.profile import (
    is_valid_contact_handle,
    is_valid_profile_url,
    normalize_profile_url,
)
from src.rx_account.domain.repository import AccountRepositoryProtocol
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_common.errors import AccountNotFoundError, InvalidProfileError
from src.rx_common.pagination import cursor_decode, cursor_encode


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_account(self, db: AsyncSession, user_id: str) -> AccountResponse:
        account = await self._repo.get_account(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return AccountResponse.from_domain(account)

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        display_name: str,
        profile_url: str | None,
        contact_handle: str | None,
    ) -> AccountResponse:
        """Validate and persist profile fields.

        Empty values are accepted and simply leave the profile incomplete;
        non-empty values must pass their validator.
        """
        name = (display_name or "").strip()
        url = _clean(profile_url)
        handle = _clean(contact_handle)

        if url is not None:
            if not is_valid_profile_url(url):
                raise InvalidProfileError(
                    "profile_url must look like m.rivalregions.com/#slide/profile/<id>"
                )
            url = normalize_profile_url(url)
        if handle is not None and not is_valid_contact_handle(handle):
            raise InvalidProfileError("contact_handle must contain 10-15 digits")

        try:
            account = await self._repo.update_profile(db, user_id, name, url, handle)
            if account is None:
                raise AccountNotFoundError(user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AccountResponse.from_domain(account)

    async def get_public_profile(
        self, db: AsyncSession, user_id: str
    ) -> PublicProfileResponse:
        profile = await self._repo.get_public_profile(db, user_id)
        if profile is None:
            raise AccountNotFoundError(user_id)
        return PublicProfileResponse.from_domain(profile)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
