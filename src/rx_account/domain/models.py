"""Domain models for rx_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.rx_account.domain.profile import is_profile_complete
from src.rx_common.enums import RESOURCE_SYMBOLS


@dataclass
class Account:
    user_id: str
    display_name: str
    email: str
    balance: int                     # cents, never negative
    inventory: dict[str, int] = field(default_factory=dict)
    profile_url: str | None = None
    contact_handle: str | None = None
    is_verified: bool = False
    verification_status: str = "none"
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    profile_updated_at: datetime | None = None

    def __post_init__(self) -> None:
        # every symbol is present on the dashboard grid, missing rows read as 0
        self.inventory = {s: int(self.inventory.get(s, 0)) for s in RESOURCE_SYMBOLS}

    @property
    def is_profile_complete(self) -> bool:
        """Derived from current profile fields on every read; never stored."""
        return is_profile_complete(self.display_name, self.profile_url, self.contact_handle)


@dataclass
class LedgerEntry:
    """One balance movement. Append-only audit trail."""

    id: int                          # BIGSERIAL
    user_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # cents, positive=income negative=expense
    balance_after: int               # cents, balance snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass
class PublicProfile:
    """What anyone may see about an account."""

    user_id: str
    display_name: str
    profile_url: str | None
    is_verified: bool
    open_orders: int
    member_since: datetime | None
