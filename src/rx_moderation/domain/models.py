"""Request queue domain models: pure dataclasses."""
from dataclasses import dataclass, field
from datetime import datetime

from src.rx_moderation.domain.state import (
    Approved,
    ModerationState,
    Pending,
    Rejected,
    status_of,
)


@dataclass
class _Moderated:
    state: ModerationState = field(default_factory=Pending)

    @property
    def status(self) -> str:
        return status_of(self.state).value

    @property
    def moderator_id(self) -> str | None:
        return None if isinstance(self.state, Pending) else self.state.moderator_id

    @property
    def approved_at(self) -> datetime | None:
        return self.state.at if isinstance(self.state, Approved) else None

    @property
    def rejected_at(self) -> datetime | None:
        return self.state.at if isinstance(self.state, Rejected) else None

    @property
    def rejection_reason(self) -> str | None:
        return self.state.reason if isinstance(self.state, Rejected) else None


@dataclass
class DepositRequest(_Moderated):
    id: str = ""
    user_id: str = ""
    amount: int = 0  # cents, > 0
    description: str = ""
    client_request_id: str | None = None
    requested_at: datetime | None = None
    display_name: str | None = None
    email: str | None = None


@dataclass
class VerificationRequest(_Moderated):
    """Snapshot of the profile at submission time. One row per submission."""

    id: str = ""
    user_id: str = ""
    display_name: str = ""
    profile_url: str | None = None
    contact_handle: str | None = None
    is_resubmission: bool = False
    requested_at: datetime | None = None
