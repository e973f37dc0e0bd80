"""Admin-channel message formatters (Telegram legacy Markdown)."""
from datetime import datetime

from config.settings import settings
from src.rx_common.cents import cents_to_game_display
from src.rx_common.datetime_utils import utc_now

_MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")


def escape_markdown(value: str | None) -> str:
    """Escape user-supplied text so it cannot break the message markup."""
    text = value or ""
    for ch in _MARKDOWN_SPECIAL:
        text = text.replace(ch, f"\\{ch}")
    return text


def short_id(request_id: str) -> str:
    return f"{request_id[:8]}..."


def _stamp(at: datetime | None) -> str:
    return (at or utc_now()).strftime("%Y-%m-%d %H:%M UTC")


def _admin_link(path: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{path}"


def deposit_requested(
    request_id: str,
    display_name: str | None,
    email: str | None,
    amount_cents: int,
    description: str | None,
    requested_at: datetime | None = None,
) -> str:
    return "\n".join([
        "🔔 *NEW DEPOSIT REQUEST*",
        "",
        f"👤 *Client:* {escape_markdown(display_name) or 'N/A'}",
        f"📧 *Email:* {escape_markdown(email) or 'N/A'}",
        f"💰 *Amount:* $ {cents_to_game_display(amount_cents)}",
        f"📝 *Description:* {escape_markdown(description) or 'No description'}",
        "",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Requested at:* {_stamp(requested_at)}",
        "",
        f"🔗 [Open admin panel]({_admin_link('/admin/deposits')})",
        "",
        "⚡ *Action required:* an admin must approve or reject",
        "",
        "#deposit #pending #admin",
    ])


def deposit_approved(
    request_id: str,
    display_name: str | None,
    amount_cents: int,
    approved_at: datetime | None = None,
) -> str:
    return "\n".join([
        "✅ *DEPOSIT APPROVED*",
        "",
        f"👤 *Client:* {escape_markdown(display_name) or 'N/A'}",
        f"💰 *Amount:* $ {cents_to_game_display(amount_cents)}",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Approved at:* {_stamp(approved_at)}",
        "",
        "💳 *Balance credited.*",
        "",
        "#deposit #approved",
    ])


def deposit_rejected(
    request_id: str,
    display_name: str | None,
    amount_cents: int,
    reason: str | None,
    rejected_at: datetime | None = None,
) -> str:
    return "\n".join([
        "❌ *DEPOSIT REJECTED*",
        "",
        f"👤 *Client:* {escape_markdown(display_name) or 'N/A'}",
        f"💰 *Amount:* $ {cents_to_game_display(amount_cents)}",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Rejected at:* {_stamp(rejected_at)}",
        f"📝 *Reason:* {escape_markdown(reason) or 'Not specified'}",
        "",
        "#deposit #rejected",
    ])


def verification_requested(
    request_id: str,
    display_name: str | None,
    profile_url: str | None,
    contact_handle: str | None,
    is_resubmission: bool,
    requested_at: datetime | None = None,
) -> str:
    title = "🔁 *VERIFICATION RESUBMITTED*" if is_resubmission else "🪪 *NEW VERIFICATION REQUEST*"
    return "\n".join([
        title,
        "",
        f"👤 *User:* {escape_markdown(display_name) or 'N/A'}",
        f"🎮 *Profile:* {escape_markdown(profile_url) or 'N/A'}",
        f"📞 *Contact:* {escape_markdown(contact_handle) or 'N/A'}",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Requested at:* {_stamp(requested_at)}",
        "",
        f"🔗 [Open admin panel]({_admin_link('/admin/verifications')})",
        "",
        "#verification #pending #admin",
    ])


def verification_approved(
    request_id: str, display_name: str | None, approved_at: datetime | None = None
) -> str:
    return "\n".join([
        "✅ *PROFILE VERIFIED*",
        "",
        f"👤 *User:* {escape_markdown(display_name) or 'N/A'}",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Approved at:* {_stamp(approved_at)}",
        "",
        "#verification #approved",
    ])


def verification_rejected(
    request_id: str,
    display_name: str | None,
    reason: str | None,
    rejected_at: datetime | None = None,
) -> str:
    return "\n".join([
        "❌ *VERIFICATION REJECTED*",
        "",
        f"👤 *User:* {escape_markdown(display_name) or 'N/A'}",
        f"🆔 *ID:* `{short_id(request_id)}`",
        f"⏰ *Rejected at:* {_stamp(rejected_at)}",
        f"📝 *Reason:* {escape_markdown(reason) or 'Not specified'}",
        "",
        "#verification #rejected",
    ])


def bot_test(sent_at: datetime | None = None) -> str:
    return "\n".join([
        f"🤖 *{escape_markdown(settings.APP_NAME).upper()} BOT TEST*",
        "",
        "✅ Bot is configured for this channel.",
        f"⏰ {_stamp(sent_at)}",
        "",
        "Admins in this channel will receive moderation alerts.",
        "",
        "#test #bot",
    ])
