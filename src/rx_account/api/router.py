"""rx_account REST API: dashboard, profile, balance audit trail, public profiles."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.application.schemas import UpdateProfileRequest
from src.rx_account.application.service import AccountApplicationService
from src.rx_common.database import get_db_session
from src.rx_common.enums import LedgerEntryType
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import get_current_user
from src.rx_gateway.user.db_models import UserModel

router = APIRouter(tags=["account"])

_service = AccountApplicationService()


@router.get("/account")
async def get_account(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_account(db, str(current_user.id))
    return success_response(data.model_dump(), request)


@router.patch("/account/profile")
async def update_profile(
    body: UpdateProfileRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_profile(
        db, str(current_user.id), body.display_name, body.profile_url, body.contact_handle
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Profile updated"
    return resp


@router.get("/account/ledger")
async def list_ledger(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by entry type"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db,
        str(current_user.id),
        cursor,
        limit,
        entry_type.value if entry_type else None,
    )
    return success_response(data.model_dump(), request)


@router.get("/users/{user_id}")
async def get_public_profile(
    user_id: str,
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_public_profile(db, user_id)
    return success_response(data.model_dump(), request)
