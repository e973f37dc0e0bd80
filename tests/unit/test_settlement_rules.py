"""Pure settlement rules and the Trade viewpoint helpers."""

import pytest

from src.rx_clearing.domain.models import Trade
from src.rx_clearing.domain.settlement import (
    account_lock_sequence,
    check_preconditions,
    is_same_request,
)
from src.rx_common.enums import TransactionType
from src.rx_common.errors import InsufficientBalanceError, InvalidQuantityError, SelfTradeError
from src.rx_order.domain.models import Order


def _order(qty: int = 100, price: int = 500) -> Order:
    return Order(
        id="ord-1", seller_id="seller", resource="ORE",
        unit_price=price, remaining_quantity=qty, original_quantity=qty,
    )


def _trade() -> Trade:
    return Trade(
        trade_id="t-1", order_id="ord-1", buyer_id="buyer", seller_id="seller",
        resource="ORE", quantity=40, unit_price=500, total=20_000, idempotency_key="k",
    )


class TestPreconditions:
    def test_returns_total(self) -> None:
        assert check_preconditions(_order(), "buyer", 40, 100_000) == 20_000

    def test_exact_balance_is_enough(self) -> None:
        assert check_preconditions(_order(), "buyer", 40, 20_000) == 20_000

    @pytest.mark.parametrize("qty", [0, -1, 101])
    def test_bad_quantity(self, qty: int) -> None:
        with pytest.raises(InvalidQuantityError):
            check_preconditions(_order(), "buyer", qty, 10**9)

    def test_self_trade(self) -> None:
        with pytest.raises(SelfTradeError):
            check_preconditions(_order(), "seller", 1, 10**9)

    def test_insufficient_funds(self) -> None:
        with pytest.raises(InsufficientBalanceError):
            check_preconditions(_order(), "buyer", 40, 19_999)

    def test_quantity_checked_before_self_trade(self) -> None:
        with pytest.raises(InvalidQuantityError):
            check_preconditions(_order(), "seller", 0, 0)

    def test_self_trade_checked_before_funds(self) -> None:
        with pytest.raises(SelfTradeError):
            check_preconditions(_order(), "seller", 1, 0)


class TestIdempotencyMatch:
    def test_same_order_and_quantity(self) -> None:
        assert is_same_request(_trade(), "ord-1", 40)

    def test_different_quantity(self) -> None:
        assert not is_same_request(_trade(), "ord-1", 41)

    def test_different_order(self) -> None:
        assert not is_same_request(_trade(), "ord-2", 40)


class TestLockSequence:
    def test_sorted_and_distinct(self) -> None:
        assert account_lock_sequence("zed", "amy") == ["amy", "zed"]
        assert account_lock_sequence("amy", "amy") == ["amy"]


class TestTradeViewpoint:
    def test_buyer_sees_purchase(self) -> None:
        trade = _trade()
        assert trade.viewpoint("buyer") is TransactionType.PURCHASE
        assert trade.counterparty("buyer") == "seller"

    def test_seller_sees_sale(self) -> None:
        trade = _trade()
        assert trade.viewpoint("seller") is TransactionType.SALE
        assert trade.counterparty("seller") == "buyer"

    def test_is_party(self) -> None:
        assert _trade().is_party("buyer")
        assert not _trade().is_party("outsider")
