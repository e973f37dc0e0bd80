"""SettlementService.buy with mocked repositories.

Scenarios follow a 1000.00 buyer and a seller listing ORE and GOLD.
"""

from unittest.mock import AsyncMock

import pytest

from src.rx_account.domain.models import Account, LedgerEntry
from src.rx_clearing.application.settlement_service import SettlementService
from src.rx_clearing.domain.models import Trade
from src.rx_common.errors import (
    DuplicateTradeError,
    InsufficientBalanceError,
    InvalidQuantityError,
    OrderNotFoundError,
    SelfTradeError,
)
from src.rx_order.domain.models import Order

BUYER = "buyer-1"
SELLER = "seller-1"


def _order(resource: str = "ORE", price: int = 500, qty: int = 100) -> Order:
    return Order(
        id="ord-1", seller_id=SELLER, resource=resource,
        unit_price=price, remaining_quantity=qty, original_quantity=qty,
    )


def _account(user_id: str, balance: int, inventory: dict[str, int] | None = None) -> Account:
    return Account(user_id=user_id, display_name=user_id, email=f"{user_id}@x.io",
                   balance=balance, inventory=inventory or {})


def _entry(user_id: str, amount: int, balance_after: int) -> LedgerEntry:
    return LedgerEntry(id=1, user_id=user_id, entry_type="TRADE_PAYMENT",
                       amount=amount, balance_after=balance_after)


class _Harness:
    def __init__(self, order: Order | None, buyer_balance: int = 100_000) -> None:
        self.orders = AsyncMock()
        self.accounts = AsyncMock()
        self.trades = AsyncMock()
        self.db = AsyncMock()

        self.orders.get_by_id.return_value = order
        self.trades.get_by_idempotency_key.return_value = None
        self.trades.insert.side_effect = lambda trade, db: trade

        accounts = {
            BUYER: _account(BUYER, buyer_balance),
            SELLER: _account(SELLER, 0),
        }

        async def get_account(db: object, user_id: str, for_update: bool = False) -> Account | None:
            return accounts.get(user_id)

        self.accounts.get_account.side_effect = get_account

        async def debit(db, user_id, amount, *args):  # noqa: ANN001, ANN202
            return _entry(user_id, -amount, accounts[user_id].balance - amount)

        self.accounts.debit.side_effect = debit
        self.accounts.credit.return_value = _entry(SELLER, 0, 0)

        self.service = SettlementService(
            orders=self.orders, accounts=self.accounts, trades=self.trades
        )


class TestPartialFill:
    async def test_buy_40_ore_of_100(self) -> None:
        h = _Harness(_order("ORE", 500, 100))
        h.orders.decrement_remaining.return_value = 60
        h.accounts.add_inventory.return_value = 40

        resp = await h.service.buy(h.db, BUYER, "ord-1", 40, "key-1")

        assert resp.transaction.total_cents == 20_000
        assert resp.transaction.type == "purchase"
        assert resp.buyer_balance_cents == 80_000
        assert resp.buyer_balance_display == "$800.00"
        assert resp.buyer_inventory_quantity == 40
        assert resp.order_remaining_quantity == 60
        assert resp.replayed is False

        h.orders.get_by_id.assert_awaited_once_with("ord-1", h.db, for_update=True)
        h.orders.decrement_remaining.assert_awaited_once_with("ord-1", 40, h.db)
        h.orders.delete.assert_not_awaited()
        h.accounts.add_inventory.assert_awaited_once_with(h.db, BUYER, "ORE", 40)
        h.db.commit.assert_awaited_once()

    async def test_ledger_rows_reference_trade(self) -> None:
        h = _Harness(_order())
        h.orders.decrement_remaining.return_value = 60
        h.accounts.add_inventory.return_value = 40

        resp = await h.service.buy(h.db, BUYER, "ord-1", 40, "key-1")
        trade_id = resp.transaction.trade_id

        debit_args = h.accounts.debit.await_args.args
        credit_args = h.accounts.credit.await_args.args
        assert debit_args[1:7] == (BUYER, 20_000, "TRADE_PAYMENT", "TRADE", trade_id,
                                   "Bought ORE x40 @ $5.00")
        assert credit_args[1:7] == (SELLER, 20_000, "TRADE_RECEIPT", "TRADE", trade_id,
                                    "Sold ORE x40 @ $5.00")

    async def test_accounts_locked_in_id_order(self) -> None:
        h = _Harness(_order())
        h.orders.decrement_remaining.return_value = 60
        h.accounts.add_inventory.return_value = 40

        await h.service.buy(h.db, BUYER, "ord-1", 40, "key-1")
        locked = [c.args[1] for c in h.accounts.get_account.await_args_list]
        assert locked == sorted([BUYER, SELLER])


class TestFullFill:
    async def test_order_deleted_at_zero(self) -> None:
        h = _Harness(_order("GOLD", 1000, 5))
        h.accounts.add_inventory.return_value = 5

        resp = await h.service.buy(h.db, BUYER, "ord-1", 5, "key-2")

        assert resp.transaction.total_cents == 5_000
        assert resp.order_remaining_quantity == 0
        h.orders.delete.assert_awaited_once_with("ord-1", h.db)
        h.orders.decrement_remaining.assert_not_awaited()


class TestRejections:
    async def test_order_not_found(self) -> None:
        h = _Harness(None)
        with pytest.raises(OrderNotFoundError):
            await h.service.buy(h.db, BUYER, "ord-1", 1, "key")
        h.db.rollback.assert_awaited_once()
        h.db.commit.assert_not_awaited()

    async def test_self_trade(self) -> None:
        h = _Harness(_order())
        with pytest.raises(SelfTradeError):
            await h.service.buy(h.db, SELLER, "ord-1", 1, "key")
        h.accounts.debit.assert_not_awaited()
        h.db.rollback.assert_awaited_once()

    async def test_insufficient_funds(self) -> None:
        h = _Harness(_order(), buyer_balance=15_000)
        with pytest.raises(InsufficientBalanceError):
            await h.service.buy(h.db, BUYER, "ord-1", 40, "key")
        h.accounts.debit.assert_not_awaited()
        h.trades.insert.assert_not_awaited()

    @pytest.mark.parametrize("qty", [0, 101])
    async def test_bad_quantity(self, qty: int) -> None:
        h = _Harness(_order())
        with pytest.raises(InvalidQuantityError):
            await h.service.buy(h.db, BUYER, "ord-1", qty, "key")
        h.accounts.debit.assert_not_awaited()

    async def test_lost_race_on_decrement_rolls_back(self) -> None:
        h = _Harness(_order())
        h.orders.decrement_remaining.return_value = None
        with pytest.raises(InvalidQuantityError):
            await h.service.buy(h.db, BUYER, "ord-1", 40, "key")
        h.db.rollback.assert_awaited_once()
        h.trades.insert.assert_not_awaited()


class TestIdempotency:
    def _existing(self, qty: int = 40) -> Trade:
        return Trade(
            trade_id="t-1", order_id="ord-1", buyer_id=BUYER, seller_id=SELLER,
            resource="ORE", quantity=qty, unit_price=500, total=500 * qty,
            idempotency_key="key-1",
        )

    async def test_same_key_replays_without_effects(self) -> None:
        h = _Harness(_order(qty=60))
        h.trades.get_by_idempotency_key.return_value = self._existing()

        resp = await h.service.buy(h.db, BUYER, "ord-1", 40, "key-1")

        assert resp.replayed is True
        assert resp.transaction.trade_id == "t-1"
        assert resp.order_remaining_quantity == 60
        h.accounts.debit.assert_not_awaited()
        h.accounts.credit.assert_not_awaited()
        h.trades.insert.assert_not_awaited()

    async def test_replay_after_order_deleted(self) -> None:
        h = _Harness(None)
        h.trades.get_by_idempotency_key.return_value = self._existing()
        resp = await h.service.buy(h.db, BUYER, "ord-1", 40, "key-1")
        assert resp.replayed is True
        assert resp.order_remaining_quantity == 0

    async def test_key_reuse_with_different_quantity(self) -> None:
        h = _Harness(_order())
        h.trades.get_by_idempotency_key.return_value = self._existing(qty=40)
        with pytest.raises(DuplicateTradeError):
            await h.service.buy(h.db, BUYER, "ord-1", 41, "key-1")
        h.db.rollback.assert_awaited_once()
