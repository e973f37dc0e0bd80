"""Verification eligibility: who may open a new verification request, and when."""
from datetime import datetime, timedelta

from src.rx_account.domain.models import Account
from src.rx_common.enums import RequestStatus
from src.rx_common.errors import (
    AlreadyVerifiedError,
    ProfileIncompleteError,
    VerificationCooldownError,
    VerificationPendingError,
)
from src.rx_moderation.domain.models import VerificationRequest


def next_request_at(
    latest: VerificationRequest | None, cooldown: timedelta
) -> datetime | None:
    """When a rejected user may resubmit; None when no cooldown applies."""
    if latest is None or latest.rejected_at is None:
        return None
    return latest.rejected_at + cooldown


def check_can_request(
    account: Account,
    latest: VerificationRequest | None,
    now: datetime,
    cooldown: timedelta,
) -> bool:
    """Raise the first blocking reason; return is_resubmission otherwise."""
    if not account.is_profile_complete:
        raise ProfileIncompleteError()
    if account.is_verified:
        raise AlreadyVerifiedError()
    if latest is not None and latest.status == RequestStatus.PENDING:
        raise VerificationPendingError()
    retry_at = next_request_at(latest, cooldown)
    if retry_at is not None and now < retry_at:
        raise VerificationCooldownError(retry_at.isoformat())
    return latest is not None and latest.status == RequestStatus.REJECTED
