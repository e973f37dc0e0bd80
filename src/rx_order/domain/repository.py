"""OrderRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_order.domain.models import Order, ResourceSummary


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def get_by_id(
        self, order_id: str, db: AsyncSession, for_update: bool = False
    ) -> Order | None: ...

    async def delete(self, order_id: str, db: AsyncSession) -> bool: ...

    async def decrement_remaining(
        self, order_id: str, quantity: int, db: AsyncSession
    ) -> int | None: ...

    async def list_by_resource(self, resource: str, db: AsyncSession) -> list[Order]: ...

    async def list_by_seller(
        self,
        seller_id: str,
        resource: str | None,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Order]: ...

    async def summary(self, db: AsyncSession) -> list[ResourceSummary]: ...
