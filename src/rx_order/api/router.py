"""rx_order REST API: listing, cancellation, order book views."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_common.database import get_db_session
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import get_current_user
from src.rx_gateway.user.db_models import UserModel
from src.rx_order.application.schemas import CreateOrderRequest
from src.rx_order.application.service import OrderService

router = APIRouter(tags=["orders"])

_service = OrderService()


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_order(
        db, str(current_user.id), body.resource, body.price_cents, body.quantity
    )
    resp = success_response(data.model_dump(mode="json"), request)
    resp.message = "Order created"
    return resp


@router.delete("/orders/{order_id}")
async def cancel_order(
    order_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.cancel_order(db, order_id, str(current_user.id))
    resp = success_response(data.model_dump(), request)
    resp.message = "Order cancelled"
    return resp


@router.get("/orders")
async def list_own_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    resource: str | None = Query(None, description="Filter by resource symbol"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    data = await _service.list_own_orders(
        db, str(current_user.id), resource, limit, cursor
    )
    return success_response(data.model_dump(mode="json"), request)


@router.get("/orderbook")
async def market_summary(
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_market_summary(db)
    return success_response(data.model_dump(), request)


@router.get("/orderbook/{resource}")
async def order_book(
    resource: str,
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_order_book(db, resource)
    return success_response(data.model_dump(mode="json"), request)
