"""Order book service: create, cancel, per-resource book, market summary."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_common.datetime_utils import utc_now
from src.rx_common.errors import OrderNotFoundError, OrderOwnershipError
from src.rx_common.id_generator import generate_id
from src.rx_order.application.schemas import (
    CancelOrderResponse,
    MarketSummaryResponse,
    OrderBookResponse,
    OrderBookStatsResponse,
    OrderListResponse,
    OrderResponse,
    ResourceSummaryItem,
)
from src.rx_order.domain.book import (
    compute_stats,
    normalize_resource,
    sort_book,
    validate_price,
    validate_order_value,
    validate_quantity,
)
from src.rx_order.domain.models import Order
from src.rx_order.domain.repository import OrderRepositoryProtocol
from src.rx_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, repo: OrderRepositoryProtocol | None = None) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    async def create_order(
        self,
        db: AsyncSession,
        seller_id: str,
        resource: str,
        price_cents: int,
        quantity: int,
    ) -> OrderResponse:
        """List `quantity` units for sale. No inventory is reserved."""
        symbol = normalize_resource(resource)
        validate_price(price_cents)
        validate_quantity(quantity)
        validate_order_value(price_cents, quantity)

        now = utc_now()
        order = Order(
            id=generate_id(),
            seller_id=seller_id,
            resource=symbol,
            unit_price=price_cents,
            remaining_quantity=quantity,
            original_quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._repo.save(order, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Order %s listed: %s x%d @ %d by %s",
            order.id, symbol, quantity, price_cents, seller_id,
        )
        return OrderResponse.from_domain(order)

    async def cancel_order(
        self, db: AsyncSession, order_id: str, user_id: str
    ) -> CancelOrderResponse:
        """Owner-only delete. The row lock serialises with an in-flight buy."""
        try:
            order = await self._repo.get_by_id(order_id, db, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.seller_id != user_id:
                raise OrderOwnershipError(order_id)
            await self._repo.delete(order_id, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Order %s cancelled by owner", order_id)
        return CancelOrderResponse(
            order_id=order.id,
            resource=order.resource,
            cancelled_quantity=order.remaining_quantity,
        )

    async def get_order_book(self, db: AsyncSession, resource: str) -> OrderBookResponse:
        symbol = normalize_resource(resource)
        orders = sort_book(await self._repo.list_by_resource(symbol, db))
        return OrderBookResponse(
            resource=symbol,
            orders=[OrderResponse.from_domain(o) for o in orders],
            stats=OrderBookStatsResponse.from_domain(compute_stats(orders)),
        )

    async def get_market_summary(self, db: AsyncSession) -> MarketSummaryResponse:
        summaries = await self._repo.summary(db)
        return MarketSummaryResponse(
            resources=[
                ResourceSummaryItem(
                    resource=s.resource,
                    stats=OrderBookStatsResponse.from_domain(s.stats),
                )
                for s in summaries
            ]
        )

    async def list_own_orders(
        self,
        db: AsyncSession,
        seller_id: str,
        resource: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        symbol = normalize_resource(resource) if resource else None
        orders = await self._repo.list_by_seller(seller_id, symbol, limit + 1, cursor, db)
        has_more = len(orders) > limit
        page = orders[:limit]
        next_cursor = page[-1].id if has_more and page else None
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
