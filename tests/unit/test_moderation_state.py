"""One-shot moderation state machine and verification eligibility."""

from datetime import UTC, datetime, timedelta

import pytest

from src.rx_account.domain.models import Account
from src.rx_common.enums import RequestStatus
from src.rx_common.errors import (
    AlreadyVerifiedError,
    InternalError,
    ProfileIncompleteError,
    RequestAlreadyResolvedError,
    VerificationCooldownError,
    VerificationPendingError,
)
from src.rx_moderation.domain.eligibility import check_can_request, next_request_at
from src.rx_moderation.domain.models import DepositRequest, VerificationRequest
from src.rx_moderation.domain.state import (
    Approved,
    Pending,
    Rejected,
    approve,
    reject,
    state_from_columns,
    status_of,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
COOLDOWN = timedelta(hours=24)


class TestTransitions:
    def test_pending_to_approved(self) -> None:
        state = approve(Pending(), "r1", "admin-1", NOW)
        assert state == Approved(moderator_id="admin-1", at=NOW)
        assert status_of(state) is RequestStatus.APPROVED

    def test_pending_to_rejected_with_reason(self) -> None:
        state = reject(Pending(), "r1", "admin-1", NOW, "blurry screenshot")
        assert isinstance(state, Rejected)
        assert state.reason == "blurry screenshot"
        assert status_of(state) is RequestStatus.REJECTED

    @pytest.mark.parametrize(
        "resolved",
        [Approved("admin-1", NOW), Rejected("admin-1", NOW, None)],
    )
    def test_resolved_is_terminal(self, resolved: Approved | Rejected) -> None:
        with pytest.raises(RequestAlreadyResolvedError):
            approve(resolved, "r1", "admin-2", NOW)
        with pytest.raises(RequestAlreadyResolvedError):
            reject(resolved, "r1", "admin-2", NOW, None)


class TestFromColumns:
    def test_pending(self) -> None:
        assert state_from_columns("pending", None, None, None, None) == Pending()

    def test_approved(self) -> None:
        assert state_from_columns("approved", "a", NOW, None, None) == Approved("a", NOW)

    def test_rejected(self) -> None:
        state = state_from_columns("rejected", "a", None, NOW, "no")
        assert state == Rejected("a", NOW, "no")

    def test_inconsistent_row(self) -> None:
        with pytest.raises(InternalError):
            state_from_columns("approved", None, None, None, None)


class TestModeratedFields:
    def test_flattened_properties(self) -> None:
        req = DepositRequest(id="d1", amount=100, state=Rejected("a", NOW, "dup"))
        assert req.status == "rejected"
        assert req.moderator_id == "a"
        assert req.rejected_at == NOW
        assert req.approved_at is None
        assert req.rejection_reason == "dup"

    def test_defaults_to_pending(self) -> None:
        req = VerificationRequest(id="v1")
        assert req.status == "pending"
        assert req.moderator_id is None


def _complete_account(**overrides: object) -> Account:
    fields: dict = {
        "user_id": "u1",
        "display_name": "Alice",
        "email": "a@x.io",
        "balance": 0,
        "profile_url": "https://m.rivalregions.com/#slide/profile/42",
        "contact_handle": "5511987654321",
    }
    fields.update(overrides)
    return Account(**fields)


def _rejected_at(at: datetime) -> VerificationRequest:
    return VerificationRequest(id="v0", user_id="u1", state=Rejected("a", at, "no"))


class TestEligibility:
    def test_first_request(self) -> None:
        assert check_can_request(_complete_account(), None, NOW, COOLDOWN) is False

    def test_incomplete_profile(self) -> None:
        with pytest.raises(ProfileIncompleteError):
            check_can_request(_complete_account(contact_handle=None), None, NOW, COOLDOWN)

    def test_already_verified(self) -> None:
        with pytest.raises(AlreadyVerifiedError):
            check_can_request(_complete_account(is_verified=True), None, NOW, COOLDOWN)

    def test_pending_blocks(self) -> None:
        with pytest.raises(VerificationPendingError):
            check_can_request(
                _complete_account(), VerificationRequest(id="v0"), NOW, COOLDOWN
            )

    def test_cooldown_blocks_with_retry_time(self) -> None:
        latest = _rejected_at(NOW - timedelta(hours=1))
        with pytest.raises(VerificationCooldownError) as exc_info:
            check_can_request(_complete_account(), latest, NOW, COOLDOWN)
        assert exc_info.value.retry_at == (NOW + timedelta(hours=23)).isoformat()

    def test_resubmission_after_cooldown(self) -> None:
        latest = _rejected_at(NOW - timedelta(hours=24))
        assert check_can_request(_complete_account(), latest, NOW, COOLDOWN) is True

    def test_next_request_at(self) -> None:
        assert next_request_at(None, COOLDOWN) is None
        assert next_request_at(VerificationRequest(id="v0"), COOLDOWN) is None
        assert next_request_at(_rejected_at(NOW), COOLDOWN) == NOW + COOLDOWN
