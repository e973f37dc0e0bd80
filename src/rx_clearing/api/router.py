"""Settlement and transaction history REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_clearing.application.schemas import BuyRequest
from src.rx_clearing.application.settlement_service import SettlementService
from src.rx_clearing.application.transactions_service import TransactionsService
from src.rx_common.database import get_db_session
from src.rx_common.enums import TransactionType
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import get_current_user
from src.rx_gateway.user.db_models import UserModel

router = APIRouter(tags=["transactions"])

_settlement = SettlementService()
_transactions = TransactionsService()


@router.post("/orders/{order_id}/buy")
async def buy(
    order_id: str,
    body: BuyRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settlement.buy(
        db, str(current_user.id), order_id, body.quantity, body.idempotency_key
    )
    resp = success_response(data.model_dump(), request)
    resp.message = (
        f"Bought {data.transaction.quantity} {data.transaction.resource} "
        f"for {data.transaction.total_display}"
    )
    return resp


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    type: TransactionType | None = Query(None, description="purchase or sale"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _transactions.list_history(
        db, str(current_user.id), type.value if type else None, limit, cursor
    )
    return success_response(data.model_dump(), request)


@router.get("/transactions/{trade_id}")
async def get_receipt(
    trade_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _transactions.get_receipt(db, str(current_user.id), trade_id)
    return success_response(data.model_dump(), request)
