"""Settlement: buy against a standing order as one database transaction.

Steps, all inside a single transaction that rolls back on any failure:
  1. lock the order row (SELECT ... FOR UPDATE)
  2. replay an existing trade for (buyer, idempotency_key), or reject reuse
     of the key with different parameters
  3. lock both account rows in user_id order, check preconditions
     (quantity, self-trade, funds)
  4. debit buyer, credit seller, shrink or delete the order, credit the
     buyer's inventory, append the trade and two balance-audit rows

The seller's inventory is not touched: listings reserve nothing.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.domain.repository import AccountRepositoryProtocol
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_clearing.application.schemas import BuyResponse, TransactionResponse
from src.rx_clearing.domain.models import Trade
from src.rx_clearing.domain.settlement import (
    account_lock_sequence,
    check_preconditions,
    is_same_request,
)
from src.rx_clearing.infrastructure.trades_repository import TradesRepository
from src.rx_common.cents import cents_to_display
from src.rx_common.enums import LedgerEntryType
from src.rx_common.errors import (
    AccountNotFoundError,
    DuplicateTradeError,
    InvalidQuantityError,
    OrderNotFoundError,
)
from src.rx_common.id_generator import generate_id
from src.rx_order.domain.models import Order
from src.rx_order.domain.repository import OrderRepositoryProtocol
from src.rx_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        trades: TradesRepository | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._trades = trades or TradesRepository()

    async def buy(
        self,
        db: AsyncSession,
        buyer_id: str,
        order_id: str,
        quantity: int,
        idempotency_key: str,
    ) -> BuyResponse:
        try:
            order = await self._orders.get_by_id(order_id, db, for_update=True)

            # Checked after the lock: a concurrent retry with the same key
            # waits on the order row, then finds the committed trade here.
            existing = await self._trades.get_by_idempotency_key(buyer_id, idempotency_key, db)
            if existing is not None:
                if not is_same_request(existing, order_id, quantity):
                    raise DuplicateTradeError(idempotency_key)
                response = await self._replay(db, existing, buyer_id, order)
                await db.commit()
                return response

            if order is None:
                raise OrderNotFoundError(order_id)

            buyer = None
            for user_id in account_lock_sequence(buyer_id, order.seller_id):
                account = await self._accounts.get_account(db, user_id, for_update=True)
                if account is None:
                    raise AccountNotFoundError(user_id)
                if user_id == buyer_id:
                    buyer = account
            assert buyer is not None

            total = check_preconditions(order, buyer_id, quantity, buyer.balance)
            trade_id = generate_id()
            memo = f"{order.resource} x{quantity} @ {cents_to_display(order.unit_price)}"

            payment = await self._accounts.debit(
                db, buyer_id, total, LedgerEntryType.TRADE_PAYMENT.value,
                "TRADE", trade_id, f"Bought {memo}",
            )
            await self._accounts.credit(
                db, order.seller_id, total, LedgerEntryType.TRADE_RECEIPT.value,
                "TRADE", trade_id, f"Sold {memo}",
            )

            if quantity == order.remaining_quantity:
                await self._orders.delete(order_id, db)
                remaining = 0
            else:
                new_remaining = await self._orders.decrement_remaining(order_id, quantity, db)
                if new_remaining is None:
                    raise InvalidQuantityError(
                        f"requested {quantity}, order no longer has enough remaining"
                    )
                remaining = new_remaining

            inventory_after = await self._accounts.add_inventory(
                db, buyer_id, order.resource, quantity
            )
            trade = await self._trades.insert(
                Trade(
                    trade_id=trade_id,
                    order_id=order_id,
                    buyer_id=buyer_id,
                    seller_id=order.seller_id,
                    resource=order.resource,
                    quantity=quantity,
                    unit_price=order.unit_price,
                    total=total,
                    idempotency_key=idempotency_key,
                ),
                db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Trade %s settled: buyer=%s seller=%s %s x%d @ %d total=%d",
            trade_id, buyer_id, order.seller_id, order.resource,
            quantity, order.unit_price, total,
        )
        return BuyResponse(
            transaction=TransactionResponse.from_domain(trade, buyer_id),
            buyer_balance_cents=payment.balance_after,
            buyer_balance_display=cents_to_display(payment.balance_after),
            buyer_inventory_quantity=inventory_after,
            order_remaining_quantity=remaining,
        )

    async def _replay(
        self, db: AsyncSession, trade: Trade, buyer_id: str, order: Order | None
    ) -> BuyResponse:
        buyer = await self._accounts.get_account(db, buyer_id)
        if buyer is None:
            raise AccountNotFoundError(buyer_id)
        logger.info("Trade %s replayed for idempotency key %s", trade.trade_id, trade.idempotency_key)
        return BuyResponse(
            transaction=TransactionResponse.from_domain(trade, buyer_id),
            buyer_balance_cents=buyer.balance,
            buyer_balance_display=cents_to_display(buyer.balance),
            buyer_inventory_quantity=buyer.inventory.get(trade.resource, 0),
            order_remaining_quantity=order.remaining_quantity if order is not None else 0,
            replayed=True,
        )
