from datetime import datetime

from pydantic import BaseModel, Field

from src.rx_common.cents import cents_to_display
from src.rx_order.domain.models import Order, OrderBookStats


class CreateOrderRequest(BaseModel):
    resource: str = Field(..., description="GOLD, OIL, ORE, DIA, URA or CASH")
    price_cents: int = Field(..., description="Unit price in cents")
    quantity: int = Field(..., description="Units offered")


class OrderResponse(BaseModel):
    id: str
    seller_id: str
    resource: str
    unit_price_cents: int
    unit_price_display: str
    remaining_quantity: int
    original_quantity: int
    total_value_cents: int
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            seller_id=order.seller_id,
            resource=order.resource,
            unit_price_cents=order.unit_price,
            unit_price_display=cents_to_display(order.unit_price),
            remaining_quantity=order.remaining_quantity,
            original_quantity=order.original_quantity,
            total_value_cents=order.total_value,
            created_at=order.created_at,
        )


class OrderBookStatsResponse(BaseModel):
    order_count: int
    total_volume: int
    average_price_cents: int
    highest_price_cents: int
    lowest_price_cents: int

    @classmethod
    def from_domain(cls, stats: OrderBookStats) -> "OrderBookStatsResponse":
        return cls(
            order_count=stats.order_count,
            total_volume=stats.total_volume,
            average_price_cents=stats.average_price,
            highest_price_cents=stats.highest_price,
            lowest_price_cents=stats.lowest_price,
        )


class OrderBookResponse(BaseModel):
    resource: str
    orders: list[OrderResponse]
    stats: OrderBookStatsResponse


class ResourceSummaryItem(BaseModel):
    resource: str
    stats: OrderBookStatsResponse


class MarketSummaryResponse(BaseModel):
    resources: list[ResourceSummaryItem]


class CancelOrderResponse(BaseModel):
    order_id: str
    resource: str
    cancelled_quantity: int


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
