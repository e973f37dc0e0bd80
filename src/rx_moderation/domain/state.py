"""One-shot moderation state machine.

A queued request is Pending until an administrator decides once:
Pending -> Approved(moderator, at) or Pending -> Rejected(moderator, at, reason).
Both outcomes are terminal; any further transition raises
RequestAlreadyResolvedError.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from src.rx_common.enums import RequestStatus
from src.rx_common.errors import InternalError, RequestAlreadyResolvedError


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Approved:
    moderator_id: str
    at: datetime


@dataclass(frozen=True)
class Rejected:
    moderator_id: str
    at: datetime
    reason: str | None = None


ModerationState = Union[Pending, Approved, Rejected]


def status_of(state: ModerationState) -> RequestStatus:
    if isinstance(state, Approved):
        return RequestStatus.APPROVED
    if isinstance(state, Rejected):
        return RequestStatus.REJECTED
    return RequestStatus.PENDING


def approve(
    state: ModerationState, request_id: str, moderator_id: str, at: datetime
) -> Approved:
    if not isinstance(state, Pending):
        raise RequestAlreadyResolvedError(request_id, status_of(state).value)
    return Approved(moderator_id=moderator_id, at=at)


def reject(
    state: ModerationState,
    request_id: str,
    moderator_id: str,
    at: datetime,
    reason: str | None,
) -> Rejected:
    if not isinstance(state, Pending):
        raise RequestAlreadyResolvedError(request_id, status_of(state).value)
    return Rejected(moderator_id=moderator_id, at=at, reason=reason)


def state_from_columns(
    status: str,
    moderator_id: str | None,
    approved_at: datetime | None,
    rejected_at: datetime | None,
    rejection_reason: str | None,
) -> ModerationState:
    """Rebuild the variant from the flat row the database stores."""
    if status == RequestStatus.PENDING:
        return Pending()
    if status == RequestStatus.APPROVED and moderator_id and approved_at:
        return Approved(moderator_id=moderator_id, at=approved_at)
    if status == RequestStatus.REJECTED and moderator_id and rejected_at:
        return Rejected(moderator_id=moderator_id, at=rejected_at, reason=rejection_reason)
    raise InternalError(f"Inconsistent moderation row: status={status}")
