"""Pydantic schemas for the deposit and verification request queues."""
from pydantic import BaseModel, Field

from src.rx_common.cents import cents_to_display
from src.rx_common.datetime_utils import isoformat_or_none
from src.rx_moderation.domain.models import DepositRequest, VerificationRequest

DEFAULT_DEPOSIT_DESCRIPTION = "Deposit requested"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateDepositRequest(BaseModel):
    amount_cents: int = Field(..., description="Requested amount in cents")
    description: str | None = Field(None, max_length=500)
    client_request_id: str | None = Field(
        None, min_length=1, max_length=64, description="Retry token; a repeat returns the original request"
    )


class RejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class _ModerationFields(BaseModel):
    status: str
    moderator_id: str | None
    requested_at: str | None
    approved_at: str | None
    rejected_at: str | None
    rejection_reason: str | None


class DepositRequestResponse(_ModerationFields):
    id: str
    user_id: str
    display_name: str | None
    amount_cents: int
    amount_display: str
    description: str
    client_request_id: str | None

    @classmethod
    def from_domain(cls, req: DepositRequest) -> "DepositRequestResponse":
        return cls(
            id=req.id,
            user_id=req.user_id,
            display_name=req.display_name,
            amount_cents=req.amount,
            amount_display=cents_to_display(req.amount),
            description=req.description,
            client_request_id=req.client_request_id,
            status=req.status,
            moderator_id=req.moderator_id,
            requested_at=isoformat_or_none(req.requested_at),
            approved_at=isoformat_or_none(req.approved_at),
            rejected_at=isoformat_or_none(req.rejected_at),
            rejection_reason=req.rejection_reason,
        )


class DepositListResponse(BaseModel):
    items: list[DepositRequestResponse]
    next_cursor: str | None
    has_more: bool


class DepositDecisionResponse(BaseModel):
    request: DepositRequestResponse
    balance_after_cents: int | None = None  # set on approval only


class VerificationRequestResponse(_ModerationFields):
    id: str
    user_id: str
    display_name: str
    profile_url: str | None
    contact_handle: str | None
    is_resubmission: bool

    @classmethod
    def from_domain(cls, req: VerificationRequest) -> "VerificationRequestResponse":
        return cls(
            id=req.id,
            user_id=req.user_id,
            display_name=req.display_name,
            profile_url=req.profile_url,
            contact_handle=req.contact_handle,
            is_resubmission=req.is_resubmission,
            status=req.status,
            moderator_id=req.moderator_id,
            requested_at=isoformat_or_none(req.requested_at),
            approved_at=isoformat_or_none(req.approved_at),
            rejected_at=isoformat_or_none(req.rejected_at),
            rejection_reason=req.rejection_reason,
        )


class VerificationListResponse(BaseModel):
    items: list[VerificationRequestResponse]
    next_cursor: str | None
    has_more: bool


class VerificationStatusResponse(BaseModel):
    is_verified: bool
    verification_status: str
    is_profile_complete: bool
    latest: VerificationRequestResponse | None
    can_request: bool
    can_request_at: str | None
