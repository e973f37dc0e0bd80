"""Transaction history and receipts, always from the caller's viewpoint."""
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_clearing.application.schemas import (
    ReceiptResponse,
    TransactionListResponse,
    TransactionResponse,
)
from src.rx_clearing.infrastructure.trades_repository import TradesRepository
from src.rx_common.errors import TransactionAccessDeniedError, TransactionNotFoundError


class TransactionsService:
    def __init__(self, repo: TradesRepository | None = None) -> None:
        self._repo = repo or TradesRepository()

    async def list_history(
        self,
        db: AsyncSession,
        user_id: str,
        tx_type: str | None,
        limit: int,
        cursor: str | None,
    ) -> TransactionListResponse:
        trades = await self._repo.list_by_user(user_id, tx_type, limit + 1, cursor, db)
        has_more = len(trades) > limit
        page = trades[:limit]
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(t, user_id) for t in page],
            next_cursor=page[-1].trade_id if has_more and page else None,
            has_more=has_more,
        )

    async def get_receipt(
        self, db: AsyncSession, user_id: str, trade_id: str
    ) -> ReceiptResponse:
        trade = await self._repo.get_receipt(trade_id, db)
        if trade is None:
            raise TransactionNotFoundError(trade_id)
        if not trade.is_party(user_id):
            raise TransactionAccessDeniedError(trade_id)
        return ReceiptResponse.from_domain(trade, user_id)
