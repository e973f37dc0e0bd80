"""Telegram notifier (httpx.MockTransport) and message formatters."""

import json
from datetime import UTC, datetime

import httpx

from config.settings import settings
from src.rx_notify.application import messages
from src.rx_notify.infrastructure.telegram import TelegramNotifier

AT = datetime(2026, 3, 2, 14, 30, tzinfo=UTC)


def _notifier(handler) -> TelegramNotifier:  # noqa: ANN001
    return TelegramNotifier(
        bot_token="123:abc",
        chat_id="-100",
        api_url="https://api.telegram.test/",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestTelegramNotifier:
    async def test_posts_markdown_payload(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

        assert await _notifier(handler).send_message("*hi*") is True
        assert len(seen) == 1
        assert str(seen[0].url) == "https://api.telegram.test/bot123:abc/sendMessage"
        payload = json.loads(seen[0].content)
        assert payload == {
            "chat_id": "-100",
            "text": "*hi*",
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
            "disable_notification": False,
        }

    async def test_api_level_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": False, "description": "chat not found"})

        assert await _notifier(handler).send_message("x") is False

    async def test_http_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        assert await _notifier(handler).send_message("x") is False

    async def test_network_error_never_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        assert await _notifier(handler).send_message("x") is False

    async def test_unconfigured_drops_message(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"ok": True})

        notifier = TelegramNotifier(
            bot_token="", chat_id="", transport=httpx.MockTransport(handler)
        )
        assert notifier.is_configured is False
        assert await notifier.send_message("x") is False
        assert calls == []


class TestMessages:
    def test_escape_markdown(self) -> None:
        assert messages.escape_markdown("a_b*c`d[e") == "a\\_b\\*c\\`d\\[e"
        assert messages.escape_markdown(None) == ""

    def test_short_id(self) -> None:
        assert messages.short_id("1234567890abcdef") == "12345678..."

    def test_deposit_requested(self) -> None:
        text = messages.deposit_requested(
            "1234567890abcdef", "Ali_ce", "alice@example.com", 150_000, None, AT
        )
        assert text.startswith("🔔 *NEW DEPOSIT REQUEST*")
        assert "Ali\\_ce" in text
        assert "$ 1.5kkk" in text
        assert "No description" in text
        assert "`12345678...`" in text
        assert "2026-03-02 14:30 UTC" in text
        assert f"{settings.PUBLIC_BASE_URL.rstrip('/')}/admin/deposits" in text

    def test_deposit_decisions(self) -> None:
        approved = messages.deposit_approved("dep-00001", "Alice", 50, AT)
        assert "DEPOSIT APPROVED" in approved
        assert "$ 0.50" in approved
        rejected = messages.deposit_rejected("dep-00001", None, 100, None, AT)
        assert "DEPOSIT REJECTED" in rejected
        assert "N/A" in rejected
        assert "Not specified" in rejected

    def test_verification_titles(self) -> None:
        first = messages.verification_requested("ver-0001", "Alice", None, None, False, AT)
        again = messages.verification_requested("ver-0001", "Alice", None, None, True, AT)
        assert "NEW VERIFICATION REQUEST" in first
        assert "RESUBMITTED" in again
        assert "/admin/verifications" in first

    def test_verification_decisions(self) -> None:
        assert "PROFILE VERIFIED" in messages.verification_approved("ver-0001", "Alice", AT)
        rejected = messages.verification_rejected("ver-0001", "Alice", "bad link", AT)
        assert "bad link" in rejected

    def test_bot_test(self) -> None:
        assert "BOT TEST" in messages.bot_test(AT)
