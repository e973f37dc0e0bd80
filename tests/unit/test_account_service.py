"""Unit tests for AccountApplicationService (mocked repository)."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rx_account.application.service import AccountApplicationService
from src.rx_account.domain.models import Account, LedgerEntry, PublicProfile
from src.rx_common.errors import AccountNotFoundError, InvalidProfileError
from src.rx_common.pagination import cursor_decode, cursor_encode


def _make_account(**overrides: object) -> Account:
    fields: dict = {
        "user_id": "user-1",
        "display_name": "Alice",
        "email": "alice@example.com",
        "balance": 100_000,
        "inventory": {"ORE": 5},
    }
    fields.update(overrides)
    return Account(**fields)


def _make_entry(entry_id: int) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        user_id="user-1",
        entry_type="DEPOSIT_APPROVED",
        amount=1000,
        balance_after=1000 * entry_id,
        created_at=datetime(2026, 3, 2, tzinfo=UTC),
    )


@pytest.fixture
def mock_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(mock_repo: AsyncMock) -> AccountApplicationService:
    return AccountApplicationService(repo=mock_repo)


class TestGetAccount:
    async def test_returns_display_fields(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.get_account.return_value = _make_account()
        resp = await service.get_account(mock_db, "user-1")
        assert resp.balance_cents == 100_000
        assert resp.balance_display == "$1,000.00"
        assert resp.inventory["ORE"] == 5
        assert resp.inventory["GOLD"] == 0
        assert resp.is_profile_complete is False

    async def test_missing_account_raises(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.get_account.return_value = None
        with pytest.raises(AccountNotFoundError):
            await service.get_account(mock_db, "ghost")


class TestUpdateProfile:
    async def test_valid_profile_commits_with_normalized_url(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.update_profile.return_value = _make_account(
            profile_url="https://m.rivalregions.com/#slide/profile/42",
            contact_handle="5511987654321",
        )
        resp = await service.update_profile(
            mock_db, "user-1", " Alice ", "m.rivalregions.com/#slide/profile/42", "5511987654321"
        )
        mock_repo.update_profile.assert_awaited_once_with(
            mock_db, "user-1", "Alice",
            "https://m.rivalregions.com/#slide/profile/42", "5511987654321",
        )
        mock_db.commit.assert_awaited_once()
        assert resp.is_profile_complete is True

    async def test_empty_values_clear_fields(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.update_profile.return_value = _make_account()
        await service.update_profile(mock_db, "user-1", "Alice", "  ", "")
        mock_repo.update_profile.assert_awaited_once_with(mock_db, "user-1", "Alice", None, None)

    async def test_invalid_url_rejected_before_write(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidProfileError):
            await service.update_profile(mock_db, "user-1", "Alice", "https://example.com", None)
        mock_repo.update_profile.assert_not_awaited()

    async def test_short_contact_rejected(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidProfileError):
            await service.update_profile(mock_db, "user-1", "Alice", None, "12345")
        mock_repo.update_profile.assert_not_awaited()

    async def test_missing_account_rolls_back(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.update_profile.return_value = None
        with pytest.raises(AccountNotFoundError):
            await service.update_profile(mock_db, "ghost", "Alice", None, None)
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestPublicProfile:
    async def test_public_fields_only(
        self, service: AccountApplicationService, mock_repo: AsyncMock, mock_db: AsyncMock
    ) -> None:
        mock_repo.get_public_profile.return_value = PublicProfile(
            user_id="user-1",
            display_name="Alice",
            profile_url=None,
            is_verified=True,
            open_orders=3,
            member_since=None,
        )
        resp = await service.get_public_profile(mock_db, "user-1")
        dumped = resp.model_dump()
        assert dumped["open_orders"] == 3
        assert "balance_cents" not in dumped
        assert "email" not in dumped


class TestListLedger:
    async def test_has_more_and_cursor(
        self, service: AccountApplicationService, mock_repo: AsyncMock
    ) -> None:
        mock_repo.list_ledger_entries.return_value = [_make_entry(i) for i in (5, 4, 3)]
        resp = await service.list_ledger(MagicMock(), "user-1", None, 2, None)
        assert [i.id for i in resp.items] == [5, 4]
        assert resp.has_more is True
        assert cursor_decode(resp.next_cursor) == 4
        # limit + 1 rows requested
        assert mock_repo.list_ledger_entries.await_args.args[3] == 3

    async def test_last_page(
        self, service: AccountApplicationService, mock_repo: AsyncMock
    ) -> None:
        mock_repo.list_ledger_entries.return_value = [_make_entry(1)]
        resp = await service.list_ledger(MagicMock(), "user-1", cursor_encode(2), 20, None)
        assert resp.has_more is False
        assert resp.next_cursor is None
        assert mock_repo.list_ledger_entries.await_args.args[2] == 2


class TestCursor:
    def test_round_trip(self) -> None:
        assert cursor_decode(cursor_encode(42)) == 42

    def test_garbage_decodes_to_none(self) -> None:
        assert cursor_decode("not-base64!!") is None

    def test_none(self) -> None:
        assert cursor_decode(None) is None
