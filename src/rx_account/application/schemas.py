"""Pydantic schemas for rx_account API."""

from pydantic import BaseModel, Field

from src.rx_account.domain.models import Account, LedgerEntry, PublicProfile
from src.rx_common.cents import cents_to_display
from src.rx_common.datetime_utils import isoformat_or_none

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class UpdateProfileRequest(BaseModel):
    display_name: str = Field(..., max_length=64)
    profile_url: str | None = Field(None, max_length=256)
    contact_handle: str | None = Field(None, max_length=32)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    user_id: str
    display_name: str
    email: str
    balance_cents: int
    balance_display: str
    inventory: dict[str, int]
    profile_url: str | None
    contact_handle: str | None
    is_profile_complete: bool
    is_verified: bool
    verification_status: str
    created_at: str | None
    profile_updated_at: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            user_id=account.user_id,
            display_name=account.display_name,
            email=account.email,
            balance_cents=account.balance,
            balance_display=cents_to_display(account.balance),
            inventory=account.inventory,
            profile_url=account.profile_url,
            contact_handle=account.contact_handle,
            is_profile_complete=account.is_profile_complete,
            is_verified=account.is_verified,
            verification_status=account.verification_status,
            created_at=isoformat_or_none(account.created_at),
            profile_updated_at=isoformat_or_none(account.profile_updated_at),
        )


class PublicProfileResponse(BaseModel):
    user_id: str
    display_name: str
    profile_url: str | None
    is_verified: bool
    open_orders: int
    member_since: str | None

    @classmethod
    def from_domain(cls, profile: PublicProfile) -> "PublicProfileResponse":
        return cls(
            user_id=profile.user_id,
            display_name=profile.display_name,
            profile_url=profile.profile_url,
            is_verified=profile.is_verified,
            open_orders=profile.open_orders,
            member_since=isoformat_or_none(profile.member_since),
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount_cents: int
    amount_display: str
    balance_after_cents: int
    balance_after_display: str
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount_cents=e.amount,
            amount_display=cents_to_display(e.amount),
            balance_after_cents=e.balance_after,
            balance_after_display=cents_to_display(e.balance_after),
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
