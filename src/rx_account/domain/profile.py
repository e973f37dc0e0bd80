"""Profile field validators and the profile-completeness predicate.

The completeness predicate is a pure function of (name, profile URL,
contact handle). Clearing any one of the three makes the profile incomplete.
"""

import re

# m.rivalregions.com/#slide/profile/<digits>, scheme optional
_PROFILE_URL_RE = re.compile(r"^(https?://)?m\.rivalregions\.com/#slide/profile/\d+$")
_NON_DIGIT_RE = re.compile(r"\D")

CONTACT_MIN_DIGITS = 10
CONTACT_MAX_DIGITS = 15


def is_valid_profile_url(url: str | None) -> bool:
    if not url:
        return False
    return _PROFILE_URL_RE.match(url.strip().lower()) is not None


def normalize_profile_url(url: str) -> str:
    """Prepend https:// to a scheme-less link."""
    url = url.strip()
    if not url.lower().startswith("http"):
        return f"https://{url}"
    return url


def contact_digits(handle: str | None) -> str:
    return _NON_DIGIT_RE.sub("", handle or "")


def is_valid_contact_handle(handle: str | None) -> bool:
    """Valid when the handle carries 10-15 digits once formatting is stripped."""
    return CONTACT_MIN_DIGITS <= len(contact_digits(handle)) <= CONTACT_MAX_DIGITS


def is_profile_complete(
    display_name: str | None,
    profile_url: str | None,
    contact_handle: str | None,
) -> bool:
    return (
        bool(display_name and display_name.strip())
        and is_valid_profile_url(profile_url)
        and is_valid_contact_handle(contact_handle)
    )
