"""Admin REST API. Every endpoint requires a row in admin_roles."""
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_admin.application.schemas import GrantRoleRequest, SetBalanceRequest
from src.rx_admin.application.service import AdminService
from src.rx_common.database import get_db_session
from src.rx_common.enums import RequestStatus
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import require_admin
from src.rx_gateway.user.db_models import UserModel
from src.rx_moderation.application.deposit_service import DepositService
from src.rx_moderation.application.schemas import RejectRequest
from src.rx_moderation.application.verification_service import VerificationService
from src.rx_notify.application import messages
from src.rx_notify.infrastructure.telegram import TelegramNotifier, get_notifier

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminService()
_deposits = DepositService()
_verifications = VerificationService()

AdminUser = Annotated[UserModel, Depends(require_admin)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Notifier = Annotated[TelegramNotifier, Depends(get_notifier)]


# ---------------------------------------------------------------------------
# Deposit moderation
# ---------------------------------------------------------------------------


@router.get("/deposits")
async def list_deposits(
    admin: AdminUser,
    db: Db,
    request: Request,
    status: RequestStatus | None = Query(RequestStatus.PENDING),
    limit: int = Query(50, ge=1, le=200),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _deposits.list_requests(
        db, None, status.value if status else None, limit, cursor
    )
    return success_response(data.model_dump(), request)


@router.post("/deposits/{request_id}/approve")
async def approve_deposit(
    request_id: str,
    background_tasks: BackgroundTasks,
    admin: AdminUser,
    db: Db,
    notifier: Notifier,
    request: Request,
) -> ApiResponse:
    data = await _deposits.approve(db, request_id, str(admin.id))
    background_tasks.add_task(
        notifier.send_message,
        messages.deposit_approved(
            data.request.id, data.request.display_name, data.request.amount_cents
        ),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = f"Deposit approved: {data.request.amount_display} credited"
    return resp


@router.post("/deposits/{request_id}/reject")
async def reject_deposit(
    request_id: str,
    body: RejectRequest,
    background_tasks: BackgroundTasks,
    admin: AdminUser,
    db: Db,
    notifier: Notifier,
    request: Request,
) -> ApiResponse:
    data = await _deposits.reject(db, request_id, str(admin.id), body.reason)
    background_tasks.add_task(
        notifier.send_message,
        messages.deposit_rejected(
            data.request.id,
            data.request.display_name,
            data.request.amount_cents,
            data.request.rejection_reason,
        ),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Deposit rejected"
    return resp


# ---------------------------------------------------------------------------
# Verification moderation
# ---------------------------------------------------------------------------


@router.get("/verifications")
async def list_verifications(
    admin: AdminUser,
    db: Db,
    request: Request,
    status: RequestStatus | None = Query(RequestStatus.PENDING),
    limit: int = Query(50, ge=1, le=200),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _verifications.list_requests(
        db, None, status.value if status else None, limit, cursor
    )
    return success_response(data.model_dump(), request)


@router.post("/verifications/{request_id}/approve")
async def approve_verification(
    request_id: str,
    background_tasks: BackgroundTasks,
    admin: AdminUser,
    db: Db,
    notifier: Notifier,
    request: Request,
) -> ApiResponse:
    data = await _verifications.approve(db, request_id, str(admin.id))
    background_tasks.add_task(
        notifier.send_message, messages.verification_approved(data.id, data.display_name)
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Profile verified"
    return resp


@router.post("/verifications/{request_id}/reject")
async def reject_verification(
    request_id: str,
    body: RejectRequest,
    background_tasks: BackgroundTasks,
    admin: AdminUser,
    db: Db,
    notifier: Notifier,
    request: Request,
) -> ApiResponse:
    data = await _verifications.reject(db, request_id, str(admin.id), body.reason)
    background_tasks.add_task(
        notifier.send_message,
        messages.verification_rejected(data.id, data.display_name, data.rejection_reason),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Verification rejected"
    return resp


# ---------------------------------------------------------------------------
# Users, stats, roles, invariants
# ---------------------------------------------------------------------------


@router.get("/users")
async def search_users(
    admin: AdminUser,
    db: Db,
    request: Request,
    search: str | None = Query(None, max_length=255),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    items = await _service.search_users(db, search, limit)
    return success_response([i.model_dump() for i in items], request)


@router.put("/users/{user_id}/balance")
async def set_balance(
    user_id: str,
    body: SetBalanceRequest,
    admin: AdminUser,
    db: Db,
    request: Request,
) -> ApiResponse:
    data = await _service.set_balance(db, user_id, body.balance_cents, str(admin.id), body.reason)
    resp = success_response(data.model_dump(), request)
    resp.message = "Balance updated"
    return resp


@router.get("/stats")
async def get_stats(admin: AdminUser, db: Db, request: Request) -> ApiResponse:
    data = await _service.get_stats(db)
    return success_response(data.model_dump(), request)


@router.get("/roles")
async def list_roles(admin: AdminUser, db: Db, request: Request) -> ApiResponse:
    items = await _service.list_roles(db)
    return success_response([i.model_dump() for i in items], request)


@router.post("/roles")
async def grant_role(
    body: GrantRoleRequest, admin: AdminUser, db: Db, request: Request
) -> ApiResponse:
    granted = await _service.grant_role(db, body.user_id, str(admin.id))
    resp = success_response({"user_id": body.user_id, "granted": granted}, request)
    resp.message = "Admin role granted" if granted else "User already has the admin role"
    return resp


@router.delete("/roles/{user_id}")
async def revoke_role(
    user_id: str, admin: AdminUser, db: Db, request: Request
) -> ApiResponse:
    revoked = await _service.revoke_role(db, user_id, str(admin.id))
    resp = success_response({"user_id": user_id, "revoked": revoked}, request)
    resp.message = "Admin role revoked" if revoked else "User had no admin role"
    return resp


@router.get("/invariants")
async def check_invariants(admin: AdminUser, db: Db, request: Request) -> ApiResponse:
    data = await _service.check_invariants(db)
    return success_response(data.model_dump(), request)


@router.post("/notifications/test")
async def send_test_notification(
    admin: AdminUser, notifier: Notifier, request: Request
) -> ApiResponse:
    delivered = await _service.send_test_notification(notifier)
    resp = success_response({"delivered": delivered}, request)
    resp.message = "Test message sent" if delivered else "Test message not delivered"
    return resp
