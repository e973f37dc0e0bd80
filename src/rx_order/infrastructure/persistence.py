"""OrderRepository: raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_common.enums import RESOURCE_SYMBOLS
from src.rx_order.domain.models import Order, OrderBookStats, ResourceSummary

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, seller_id, resource, unit_price,
        remaining_quantity, original_quantity)
    VALUES (:id, :seller_id, :resource, :unit_price,
        :quantity, :quantity)
    RETURNING created_at, updated_at
""")

_SELECT_COLUMNS = """
    id, seller_id, resource, unit_price, remaining_quantity, original_quantity,
    created_at, updated_at
"""

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_GET_ORDER_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
    FOR UPDATE
""")

_DELETE_ORDER_SQL = text("DELETE FROM orders WHERE id = :id RETURNING id")

# Strictly greater: a decrement to zero must go through DELETE instead,
# remaining_quantity > 0 is a table CHECK.
_DECREMENT_SQL = text("""
    UPDATE orders
    SET remaining_quantity = remaining_quantity - :quantity,
        updated_at = NOW()
    WHERE id = :id AND remaining_quantity > :quantity
    RETURNING remaining_quantity
""")

_LIST_BY_RESOURCE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE resource = :resource
    ORDER BY unit_price DESC, created_at ASC, id ASC
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE seller_id = :seller_id
      AND (CAST(:resource AS TEXT) IS NULL OR resource = :resource)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_SUMMARY_SQL = text("""
    SELECT resource,
           COUNT(*) AS order_count,
           COALESCE(SUM(remaining_quantity), 0) AS total_volume,
           COALESCE(SUM(unit_price::numeric * remaining_quantity), 0) AS notional,
           MAX(unit_price) AS highest_price,
           MIN(unit_price) AS lowest_price
    FROM orders
    GROUP BY resource
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        seller_id=row.seller_id,
        resource=row.resource,
        unit_price=row.unit_price,
        remaining_quantity=row.remaining_quantity,
        original_quantity=row.original_quantity,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_stats(row: Any) -> OrderBookStats:
    volume = int(row.total_volume)
    notional = int(row.notional)
    return OrderBookStats(
        order_count=row.order_count,
        total_volume=volume,
        average_price=(notional + volume // 2) // volume if volume else 0,
        highest_price=row.highest_price or 0,
        lowest_price=row.lowest_price or 0,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "seller_id": order.seller_id,
                "resource": order.resource,
                "unit_price": order.unit_price,
                "quantity": order.remaining_quantity,
            },
        )
        row = result.fetchone()
        if row is not None:
            order.created_at = row.created_at
            order.updated_at = row.updated_at

    async def get_by_id(
        self, order_id: str, db: AsyncSession, for_update: bool = False
    ) -> Order | None:
        sql = _GET_ORDER_FOR_UPDATE_SQL if for_update else _GET_ORDER_BY_ID_SQL
        result = await db.execute(sql, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def delete(self, order_id: str, db: AsyncSession) -> bool:
        result = await db.execute(_DELETE_ORDER_SQL, {"id": order_id})
        return result.fetchone() is not None

    async def decrement_remaining(
        self, order_id: str, quantity: int, db: AsyncSession
    ) -> int | None:
        """Returns the new remaining quantity, or None if the guard failed."""
        result = await db.execute(_DECREMENT_SQL, {"id": order_id, "quantity": quantity})
        row = result.fetchone()
        return row.remaining_quantity if row else None

    async def list_by_resource(self, resource: str, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_BY_RESOURCE_SQL, {"resource": resource})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_seller(
        self,
        seller_id: str,
        resource: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_BY_SELLER_SQL,
            {
                "seller_id": seller_id,
                "resource": resource,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def summary(self, db: AsyncSession) -> list[ResourceSummary]:
        result = await db.execute(_SUMMARY_SQL)
        by_resource = {row.resource: _row_to_stats(row) for row in result.fetchall()}
        return [
            ResourceSummary(resource=symbol, stats=by_resource.get(symbol, OrderBookStats()))
            for symbol in RESOURCE_SYMBOLS
        ]
