"""Order domain model: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Order:
    """A standing offer to sell `remaining_quantity` units at `unit_price` cents each.

    An order only exists while remaining_quantity > 0; settlement deletes it
    instead of storing zero.
    """

    id: str
    seller_id: str
    resource: str  # ResourceSymbol value
    unit_price: int  # cents, > 0
    remaining_quantity: int  # > 0
    original_quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_value(self) -> int:
        return self.unit_price * self.remaining_quantity

    @property
    def filled_quantity(self) -> int:
        return self.original_quantity - self.remaining_quantity


@dataclass
class OrderBookStats:
    order_count: int = 0
    total_volume: int = 0
    average_price: int = 0  # cents, volume weighted, rounded half up
    highest_price: int = 0
    lowest_price: int = 0


@dataclass
class ResourceSummary:
    resource: str
    stats: OrderBookStats
