"""Fire-and-forget Telegram Bot API client.

send_message() never raises: delivery failure is logged and reported as
False so a moderation decision is never blocked or reversed by it.
"""
import logging

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str | None = None,
        chat_id: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = settings.TELEGRAM_BOT_TOKEN if bot_token is None else bot_token
        self._chat_id = settings.TELEGRAM_CHAT_ID if chat_id is None else chat_id
        self._api_url = (api_url or settings.TELEGRAM_API_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.TELEGRAM_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    async def send_message(self, text: str, disable_notification: bool = False) -> bool:
        if not self.is_configured:
            logger.warning("Telegram notifier not configured; message dropped")
            return False

        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
            "disable_notification": disable_notification,
        }
        url = f"{self._api_url}/bot{self._bot_token}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
            if resp.status_code >= 400:
                logger.warning("Telegram HTTP error %d", resp.status_code)
                return False
            body = resp.json()
            if not body.get("ok"):
                logger.warning("Telegram rejected message: %s", body.get("description"))
                return False
            return True
        except Exception as exc:
            logger.warning("Telegram delivery failed: %s", exc)
            return False


_notifier: TelegramNotifier | None = None


def get_notifier() -> TelegramNotifier:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    global _notifier
    if _notifier is None:
        _notifier = TelegramNotifier()
    return _notifier
