"""Pydantic schemas for the admin API."""
from pydantic import BaseModel, Field

from src.rx_account.domain.models import Account
from src.rx_common.cents import cents_to_display
from src.rx_common.datetime_utils import isoformat_or_none


class SetBalanceRequest(BaseModel):
    balance_cents: int = Field(..., description="New absolute balance in cents")
    reason: str | None = Field(None, max_length=500)


class GrantRoleRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)


class AdminUserItem(BaseModel):
    user_id: str
    display_name: str
    email: str
    balance_cents: int
    balance_display: str
    inventory: dict[str, int]
    is_verified: bool
    verification_status: str
    is_profile_complete: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AdminUserItem":
        return cls(
            user_id=account.user_id,
            display_name=account.display_name,
            email=account.email,
            balance_cents=account.balance,
            balance_display=cents_to_display(account.balance),
            inventory=account.inventory,
            is_verified=account.is_verified,
            verification_status=account.verification_status,
            is_profile_complete=account.is_profile_complete,
            created_at=isoformat_or_none(account.created_at),
        )


class BalanceOverrideResponse(BaseModel):
    user_id: str
    previous_balance_cents: int
    balance_cents: int
    delta_cents: int
    ledger_entry_id: int


class UserStats(BaseModel):
    total: int
    verified: int
    with_profile: int
    new_last_24h: int


class AdminStatsResponse(BaseModel):
    deposits: dict[str, int]
    verifications: dict[str, int]
    users: UserStats
    total_transactions: int
    active_orders: int


class AdminRoleItem(BaseModel):
    user_id: str
    display_name: str | None
    granted_by: str | None
    granted_at: str | None
