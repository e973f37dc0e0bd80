"""Pure order-book rules: input validation, ordering and statistics."""
from collections.abc import Iterable

from src.rx_common.enums import RESOURCE_SYMBOLS
from src.rx_common.errors import InvalidPriceError, InvalidQuantityError, InvalidResourceError
from src.rx_order.domain.models import Order, OrderBookStats

MAX_PRICE_CENTS = 10**15
MAX_QUANTITY = 10**12
# price x quantity of one listing must fit a BIGINT cents column
MAX_ORDER_VALUE_CENTS = 2**63 - 1


def normalize_resource(symbol: str) -> str:
    """Case-insensitive lookup into the six tradeable symbols."""
    normalized = (symbol or "").strip().upper()
    if normalized not in RESOURCE_SYMBOLS:
        raise InvalidResourceError(symbol)
    return normalized


def validate_price(price_cents: int) -> None:
    if price_cents <= 0 or price_cents > MAX_PRICE_CENTS:
        raise InvalidPriceError(price_cents)


def validate_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise InvalidQuantityError("quantity must be a positive integer")
    if quantity > MAX_QUANTITY:
        raise InvalidQuantityError(f"quantity must not exceed {MAX_QUANTITY}")


def validate_order_value(price_cents: int, quantity: int) -> None:
    if price_cents * quantity > MAX_ORDER_VALUE_CENTS:
        raise InvalidQuantityError(
            f"listing value {price_cents * quantity} cents exceeds {MAX_ORDER_VALUE_CENTS}"
        )


def sort_book(orders: Iterable[Order]) -> list[Order]:
    """Highest unit price first; equal prices oldest first."""
    return sorted(orders, key=lambda o: (-o.unit_price, o.id))


def compute_stats(orders: Iterable[Order]) -> OrderBookStats:
    orders = list(orders)
    if not orders:
        return OrderBookStats()
    volume = sum(o.remaining_quantity for o in orders)
    notional = sum(o.unit_price * o.remaining_quantity for o in orders)
    prices = [o.unit_price for o in orders]
    return OrderBookStats(
        order_count=len(orders),
        total_volume=volume,
        average_price=(notional + volume // 2) // volume,
        highest_price=max(prices),
        lowest_price=min(prices),
    )
