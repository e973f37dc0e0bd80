"""User-side request queue API: deposit requests and profile verification.

Admin notifications are scheduled with BackgroundTasks, so they run after
the response is sent and after the transaction has committed.
"""
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_common.database import get_db_session
from src.rx_common.enums import RequestStatus
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import get_current_user
from src.rx_gateway.user.db_models import UserModel
from src.rx_moderation.application.deposit_service import DepositService
from src.rx_moderation.application.schemas import CreateDepositRequest
from src.rx_moderation.application.verification_service import VerificationService
from src.rx_notify.application import messages
from src.rx_notify.infrastructure.telegram import TelegramNotifier, get_notifier

router = APIRouter(tags=["requests"])

_deposits = DepositService()
_verifications = VerificationService()


@router.post("/deposits", status_code=status.HTTP_201_CREATED)
async def create_deposit_request(
    body: CreateDepositRequest,
    background_tasks: BackgroundTasks,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    notifier: Annotated[TelegramNotifier, Depends(get_notifier)],
    request: Request,
    response: Response,
) -> ApiResponse:
    data, created = await _deposits.create(
        db, str(current_user.id), body.amount_cents, body.description, body.client_request_id
    )
    resp = success_response(data.model_dump(), request)
    if not created:
        resp.message = "Deposit request already submitted"
        response.status_code = status.HTTP_200_OK
        return resp

    background_tasks.add_task(
        notifier.send_message,
        messages.deposit_requested(
            data.id,
            data.display_name,
            current_user.email,
            data.amount_cents,
            data.description,
        ),
    )
    resp.message = "Deposit request submitted"
    return resp


@router.get("/deposits")
async def list_deposit_requests(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status_filter: RequestStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _deposits.list_requests(
        db,
        str(current_user.id),
        status_filter.value if status_filter else None,
        limit,
        cursor,
    )
    return success_response(data.model_dump(), request)


@router.post("/verifications", status_code=status.HTTP_201_CREATED)
async def request_verification(
    background_tasks: BackgroundTasks,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    notifier: Annotated[TelegramNotifier, Depends(get_notifier)],
    request: Request,
) -> ApiResponse:
    data = await _verifications.request(db, str(current_user.id))
    background_tasks.add_task(
        notifier.send_message,
        messages.verification_requested(
            data.id,
            data.display_name,
            data.profile_url,
            data.contact_handle,
            data.is_resubmission,
        ),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Verification request submitted"
    return resp


@router.get("/verifications/status")
async def verification_status(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _verifications.status(db, str(current_user.id))
    return success_response(data.model_dump(), request)


@router.get("/verifications")
async def list_verification_requests(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _verifications.list_requests(db, str(current_user.id), None, limit, cursor)
    return success_response(data.model_dump(), request)
