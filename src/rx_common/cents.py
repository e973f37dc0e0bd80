"""Integer arithmetic utilities for the RR Exchange currency.

All prices, amounts, and balances use int (cents). No float, no Decimal.
"""

# Abbreviation scale used by the game community: 1 unit reads "1kk",
# every further factor of 1000 adds one more "k".
_GAME_SCALE: tuple[tuple[int, str], ...] = (
    (10**18, "kkkkkkkk"),
    (10**15, "kkkkkkk"),
    (10**12, "kkkkkk"),
    (10**9, "kkkkk"),
    (10**6, "kkkk"),
    (10**3, "kkk"),
    (1, "kk"),
)


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def cents_to_game_display(cents: int) -> str:
    """Abbreviated display used in chat messages.

    150_000 cents (1,500 units) -> '1.5kkk'; 50 cents -> '0.50'.
    Sign is dropped, matching how amounts are shown to moderators.
    """
    abs_cents = abs(cents)
    if abs_cents == 0:
        return "0.00"
    for factor, suffix in _GAME_SCALE:
        factor_cents = factor * 100
        if abs_cents >= factor_cents:
            # two decimals, then strip trailing zeros (and a bare dot)
            hundredths = (abs_cents * 100 + factor_cents // 2) // factor_cents
            whole, frac = divmod(hundredths, 100)
            text = f"{whole}.{frac:02d}".rstrip("0").rstrip(".")
            return text + suffix
    return f"0.{abs_cents:02d}"


def trade_total(unit_price_cents: int, quantity: int) -> int:
    """Exact total value of a trade: quantity x unit price, in cents."""
    return unit_price_cents * quantity
