"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.domain.models import Account, LedgerEntry, PublicProfile


class AccountRepositoryProtocol(Protocol):
    async def create_account(
        self, db: AsyncSession, user_id: str, display_name: str, email: str
    ) -> None: ...

    async def get_account(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> Account | None: ...

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        display_name: str,
        profile_url: str | None,
        contact_handle: str | None,
    ) -> Account | None: ...

    async def get_public_profile(
        self, db: AsyncSession, user_id: str
    ) -> PublicProfile | None: ...

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> LedgerEntry: ...

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> LedgerEntry: ...

    async def set_balance(
        self,
        db: AsyncSession,
        user_id: str,
        new_balance: int,
        moderator_id: str,
        description: str | None,
    ) -> tuple[int, LedgerEntry]: ...

    async def add_inventory(
        self, db: AsyncSession, user_id: str, resource: str, quantity: int
    ) -> int: ...

    async def set_verification(
        self, db: AsyncSession, user_id: str, status: str, is_verified: bool | None = None
    ) -> None: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...

    async def search_accounts(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[Account]: ...
