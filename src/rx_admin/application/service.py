"""Admin application service: balance override, user search, stats, roles,
ledger invariants and the bot test message.

Moderation decisions live in rx_moderation; the admin router calls them
directly.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.domain.repository import AccountRepositoryProtocol
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_admin.application.schemas import (
    AdminRoleItem,
    AdminStatsResponse,
    AdminUserItem,
    BalanceOverrideResponse,
    UserStats,
)
from src.rx_admin.infrastructure.roles import AdminRoleRepository
from src.rx_clearing.application.schemas import InvariantReport
from src.rx_clearing.domain.global_invariants import verify_ledger_consistency
from src.rx_clearing.infrastructure.trades_repository import TradesRepository
from src.rx_common.datetime_utils import isoformat_or_none
from src.rx_common.errors import AccountNotFoundError, InvalidAmountError, SelfRevokeError
from src.rx_moderation.infrastructure.persistence import (
    DepositRequestRepository,
    VerificationRequestRepository,
)
from src.rx_notify.application import messages
from src.rx_notify.infrastructure.telegram import TelegramNotifier

logger = logging.getLogger(__name__)

_USER_STATS_SQL = text("""
    SELECT
        COUNT(*) AS total,
        COUNT(*) FILTER (WHERE is_verified) AS verified,
        COUNT(*) FILTER (WHERE profile_url IS NOT NULL AND contact_handle IS NOT NULL)
            AS with_profile,
        COUNT(*) FILTER (WHERE created_at >= NOW() - INTERVAL '24 hours') AS new_last_24h
    FROM accounts
""")
_ACTIVE_ORDERS_SQL = text("SELECT COUNT(*) FROM orders")


class AdminService:
    def __init__(
        self,
        accounts: AccountRepositoryProtocol | None = None,
        roles: AdminRoleRepository | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._roles = roles or AdminRoleRepository()
        self._deposits = DepositRequestRepository()
        self._verifications = VerificationRequestRepository()
        self._trades = TradesRepository()

    async def set_balance(
        self,
        db: AsyncSession,
        user_id: str,
        balance_cents: int,
        moderator_id: str,
        reason: str | None,
    ) -> BalanceOverrideResponse:
        """Overwrite a balance; the audit row carries the signed delta."""
        if balance_cents < 0:
            raise InvalidAmountError("balance must not be negative")
        description = (reason or "").strip() or f"Balance set by admin {moderator_id}"
        try:
            previous, entry = await self._accounts.set_balance(
                db, user_id, balance_cents, moderator_id, description
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Balance override by %s: user=%s %d -> %d",
            moderator_id, user_id, previous, balance_cents,
        )
        return BalanceOverrideResponse(
            user_id=user_id,
            previous_balance_cents=previous,
            balance_cents=entry.balance_after,
            delta_cents=entry.amount,
            ledger_entry_id=entry.id,
        )

    async def search_users(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[AdminUserItem]:
        accounts = await self._accounts.search_accounts(db, search, limit)
        return [AdminUserItem.from_domain(a) for a in accounts]

    async def get_stats(self, db: AsyncSession) -> AdminStatsResponse:
        users = (await db.execute(_USER_STATS_SQL)).fetchone()
        active_orders = (await db.execute(_ACTIVE_ORDERS_SQL)).scalar_one()
        return AdminStatsResponse(
            deposits=await self._deposits.stats(db),
            verifications=await self._verifications.stats(db),
            users=UserStats(
                total=users.total,
                verified=users.verified,
                with_profile=users.with_profile,
                new_last_24h=users.new_last_24h,
            ),
            total_transactions=await self._trades.count(db),
            active_orders=active_orders,
        )

    async def list_roles(self, db: AsyncSession) -> list[AdminRoleItem]:
        return [
            AdminRoleItem(
                user_id=r.user_id,
                display_name=r.display_name,
                granted_by=r.granted_by,
                granted_at=isoformat_or_none(r.granted_at),
            )
            for r in await self._roles.list_admins(db)
        ]

    async def grant_role(self, db: AsyncSession, user_id: str, granted_by: str) -> bool:
        try:
            if await self._accounts.get_account(db, user_id) is None:
                raise AccountNotFoundError(user_id)
            granted = await self._roles.grant(db, user_id, granted_by)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if granted:
            logger.info("Admin role granted to %s by %s", user_id, granted_by)
        return granted

    async def revoke_role(self, db: AsyncSession, user_id: str, revoked_by: str) -> bool:
        if user_id == revoked_by:
            raise SelfRevokeError()
        try:
            revoked = await self._roles.revoke(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if revoked:
            logger.info("Admin role revoked from %s by %s", user_id, revoked_by)
        return revoked

    async def check_invariants(self, db: AsyncSession) -> InvariantReport:
        violations = await verify_ledger_consistency(db)
        return InvariantReport(ok=not violations, violations=violations)

    async def send_test_notification(self, notifier: TelegramNotifier) -> bool:
        return await notifier.send_message(messages.bot_test())
