"""Trades persistence: append-only inserts and user-perspective queries."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_clearing.domain.models import Trade
from src.rx_common.errors import InternalError

_COLUMNS = """
    t.trade_id, t.order_id, t.buyer_id, t.seller_id, t.resource,
    t.quantity, t.unit_price, t.total, t.idempotency_key, t.executed_at
"""

_INSERT_SQL = text("""
    INSERT INTO transactions
        (trade_id, order_id, buyer_id, seller_id, resource,
         quantity, unit_price, total, idempotency_key)
    VALUES
        (:trade_id, :order_id, :buyer_id, :seller_id, :resource,
         :quantity, :unit_price, :total, :idempotency_key)
    RETURNING executed_at
""")

_GET_BY_KEY_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM transactions t
    WHERE t.buyer_id = :buyer_id AND t.idempotency_key = :idempotency_key
""")

_GET_RECEIPT_SQL = text(f"""
    SELECT {_COLUMNS},
           b.display_name AS buyer_display_name,
           s.display_name AS seller_display_name
    FROM transactions t
    LEFT JOIN accounts b ON b.user_id = t.buyer_id
    LEFT JOIN accounts s ON s.user_id = t.seller_id
    WHERE t.trade_id = :trade_id
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM transactions t
    WHERE (
            (CAST(:tx_type AS TEXT) IS NULL
             AND (t.buyer_id = :user_id OR t.seller_id = :user_id))
         OR (:tx_type = 'purchase' AND t.buyer_id = :user_id)
         OR (:tx_type = 'sale' AND t.seller_id = :user_id)
          )
      AND (CAST(:cursor_id AS TEXT) IS NULL OR t.trade_id < :cursor_id)
    ORDER BY t.trade_id DESC
    LIMIT :limit
""")

_COUNT_SQL = text("SELECT COUNT(*) FROM transactions")


def _row_to_trade(row: Any) -> Trade:
    return Trade(
        trade_id=row.trade_id,
        order_id=row.order_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        resource=row.resource,
        quantity=row.quantity,
        unit_price=row.unit_price,
        total=row.total,
        idempotency_key=row.idempotency_key,
        executed_at=row.executed_at,
        buyer_display_name=getattr(row, "buyer_display_name", None),
        seller_display_name=getattr(row, "seller_display_name", None),
    )


class TradesRepository:
    async def insert(self, trade: Trade, db: AsyncSession) -> Trade:
        result = await db.execute(
            _INSERT_SQL,
            {
                "trade_id": trade.trade_id,
                "order_id": trade.order_id,
                "buyer_id": trade.buyer_id,
                "seller_id": trade.seller_id,
                "resource": trade.resource,
                "quantity": trade.quantity,
                "unit_price": trade.unit_price,
                "total": trade.total,
                "idempotency_key": trade.idempotency_key,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Trade insert returned no rows")
        return Trade(
            trade_id=trade.trade_id,
            order_id=trade.order_id,
            buyer_id=trade.buyer_id,
            seller_id=trade.seller_id,
            resource=trade.resource,
            quantity=trade.quantity,
            unit_price=trade.unit_price,
            total=trade.total,
            idempotency_key=trade.idempotency_key,
            executed_at=row.executed_at,
        )

    async def get_by_idempotency_key(
        self, buyer_id: str, idempotency_key: str, db: AsyncSession
    ) -> Trade | None:
        result = await db.execute(
            _GET_BY_KEY_SQL,
            {"buyer_id": buyer_id, "idempotency_key": idempotency_key},
        )
        row = result.fetchone()
        return _row_to_trade(row) if row else None

    async def get_receipt(self, trade_id: str, db: AsyncSession) -> Trade | None:
        result = await db.execute(_GET_RECEIPT_SQL, {"trade_id": trade_id})
        row = result.fetchone()
        return _row_to_trade(row) if row else None

    async def list_by_user(
        self,
        user_id: str,
        tx_type: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Trade]:
        rows = (
            await db.execute(
                _LIST_SQL,
                {
                    "user_id": user_id,
                    "tx_type": tx_type,
                    "limit": limit,
                    "cursor_id": cursor_id,
                },
            )
        ).fetchall()
        return [_row_to_trade(r) for r in rows]

    async def count(self, db: AsyncSession) -> int:
        return (await db.execute(_COUNT_SQL)).scalar_one()
