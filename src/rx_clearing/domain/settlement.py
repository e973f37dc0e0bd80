"""Pure settlement rules.

Precondition order is fixed: quantity, then self-trade, then funds. The first
failing check decides which rejection the buyer sees.
"""
from src.rx_clearing.domain.models import Trade
from src.rx_common.cents import trade_total
from src.rx_common.errors import (
    InsufficientBalanceError,
    InvalidQuantityError,
    SelfTradeError,
)
from src.rx_order.domain.models import Order


def check_quantity(order: Order, quantity: int) -> None:
    if quantity <= 0:
        raise InvalidQuantityError("quantity must be a positive integer")
    if quantity > order.remaining_quantity:
        raise InvalidQuantityError(
            f"requested {quantity}, only {order.remaining_quantity} available"
        )


def check_preconditions(
    order: Order, buyer_id: str, quantity: int, buyer_balance: int
) -> int:
    """Validate a buy intent against a locked order. Returns the total in cents."""
    check_quantity(order, quantity)
    if buyer_id == order.seller_id:
        raise SelfTradeError()
    total = trade_total(order.unit_price, quantity)
    if buyer_balance < total:
        raise InsufficientBalanceError(total, buyer_balance)
    return total


def is_same_request(trade: Trade, order_id: str, quantity: int) -> bool:
    """A retried buy replays only if it targets the same order and quantity."""
    return trade.order_id == order_id and trade.quantity == quantity


def account_lock_sequence(*user_ids: str) -> list[str]:
    """Distinct account ids in the order their rows are locked (deadlock-free)."""
    return sorted(set(user_ids))
