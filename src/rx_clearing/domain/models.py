"""Trade domain model: one immutable record per completed settlement."""
from dataclasses import dataclass
from datetime import datetime

from src.rx_common.enums import TransactionType


@dataclass(frozen=True)
class Trade:
    trade_id: str
    order_id: str
    buyer_id: str
    seller_id: str
    resource: str
    quantity: int
    unit_price: int  # cents
    total: int  # cents, quantity * unit_price
    idempotency_key: str
    executed_at: datetime | None = None
    buyer_display_name: str | None = None
    seller_display_name: str | None = None

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def viewpoint(self, user_id: str) -> TransactionType:
        """Purchase or sale is derived from who is asking, never stored."""
        if user_id == self.buyer_id:
            return TransactionType.PURCHASE
        return TransactionType.SALE

    def counterparty(self, user_id: str) -> str:
        return self.seller_id if user_id == self.buyer_id else self.buyer_id
