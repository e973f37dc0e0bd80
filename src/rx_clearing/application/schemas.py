"""Pydantic schemas for settlement and transaction history."""
from pydantic import BaseModel, Field

from src.rx_clearing.domain.models import Trade
from src.rx_common.cents import cents_to_display
from src.rx_common.datetime_utils import isoformat_or_none


class BuyRequest(BaseModel):
    quantity: int = Field(..., description="Units to buy from the order")
    idempotency_key: str = Field(
        ..., min_length=1, max_length=64, description="Client token; a retry with the same key replays"
    )


class TransactionResponse(BaseModel):
    trade_id: str
    order_id: str
    type: str  # purchase | sale, from the caller's viewpoint
    resource: str
    quantity: int
    unit_price_cents: int
    unit_price_display: str
    total_cents: int
    total_display: str
    buyer_id: str
    seller_id: str
    counterparty_id: str
    executed_at: str | None

    @classmethod
    def from_domain(cls, trade: Trade, viewer_id: str) -> "TransactionResponse":
        return cls(
            trade_id=trade.trade_id,
            order_id=trade.order_id,
            type=trade.viewpoint(viewer_id).value,
            resource=trade.resource,
            quantity=trade.quantity,
            unit_price_cents=trade.unit_price,
            unit_price_display=cents_to_display(trade.unit_price),
            total_cents=trade.total,
            total_display=cents_to_display(trade.total),
            buyer_id=trade.buyer_id,
            seller_id=trade.seller_id,
            counterparty_id=trade.counterparty(viewer_id),
            executed_at=isoformat_or_none(trade.executed_at),
        )


class ReceiptResponse(TransactionResponse):
    buyer_display_name: str | None
    seller_display_name: str | None

    @classmethod
    def from_domain(cls, trade: Trade, viewer_id: str) -> "ReceiptResponse":
        base = TransactionResponse.from_domain(trade, viewer_id)
        return cls(
            **base.model_dump(),
            buyer_display_name=trade.buyer_display_name,
            seller_display_name=trade.seller_display_name,
        )


class BuyResponse(BaseModel):
    transaction: TransactionResponse
    buyer_balance_cents: int
    buyer_balance_display: str
    buyer_inventory_quantity: int
    order_remaining_quantity: int  # 0 when the order was filled and removed
    replayed: bool = False


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    next_cursor: str | None
    has_more: bool


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]
