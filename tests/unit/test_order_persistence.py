"""OrderRepository.summary row mapping (mocked session)."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from src.rx_common.enums import RESOURCE_SYMBOLS
from src.rx_order.infrastructure.persistence import OrderRepository


def _db_returning(rows: list[SimpleNamespace]) -> AsyncMock:
    result = MagicMock()
    result.fetchall.return_value = rows
    db = AsyncMock()
    db.execute.return_value = result
    return db


class TestSummary:
    async def test_notional_computed_as_numeric(self) -> None:
        db = _db_returning([])
        await OrderRepository().summary(db)
        sql = str(db.execute.await_args.args[0])
        assert "unit_price::numeric * remaining_quantity" in sql

    async def test_notional_beyond_bigint_maps_cleanly(self) -> None:
        # Two GOLD listings of 9_000 @ 10**15 cents: each fits BIGINT, the sum does not
        db = _db_returning([
            SimpleNamespace(
                resource="GOLD",
                order_count=2,
                total_volume=Decimal(18_000),
                notional=Decimal(18 * 10**18),
                highest_price=10**15,
                lowest_price=10**15,
            )
        ])
        summary = await OrderRepository().summary(db)

        assert [s.resource for s in summary] == list(RESOURCE_SYMBOLS)
        gold = summary[0].stats
        assert gold.order_count == 2
        assert gold.total_volume == 18_000
        assert gold.average_price == 10**15
        assert all(s.stats.order_count == 0 for s in summary[1:])
