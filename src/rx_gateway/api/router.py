"""Auth API router: register, login, refresh, current session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_common.cents import cents_to_display
from src.rx_common.database import get_db_session
from src.rx_common.errors import AccountNotFoundError
from src.rx_common.response import ApiResponse, success_response
from src.rx_gateway.auth.dependencies import get_current_user
from src.rx_gateway.user.db_models import UserModel
from src.rx_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    UserInfo,
)
from src.rx_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()
_accounts = AccountRepository()

Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Create login and account")
async def register(body: RegisterRequest, db: Db, request: Request) -> ApiResponse:
    # users row and accounts row commit together
    async with db.begin():
        user, display_name = await _service.register(
            body.username, body.email, body.password, db, display_name=body.display_name
        )

    resp = success_response(
        RegisterResponse(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            display_name=display_name,
            created_at=user.created_at.isoformat(),
        ).model_dump(),
        request,
    )
    resp.message = "User registered successfully"
    return resp


@router.post("/login", summary="Exchange credentials for tokens")
async def login(body: LoginRequest, db: Db, request: Request) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)
    user_id = str(user.id)

    resp = success_response(
        LoginResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.JWT_EXPIRE_MINUTES * 60,
            user=UserInfo(
                user_id=user_id,
                username=user.username,
                email=user.email,
                is_admin=await _service.is_admin(db, user_id),
            ),
        ).model_dump(),
        request,
    )
    resp.message = "Login successful"
    return resp


@router.post("/refresh", summary="Issue a new access token")
async def refresh_token(body: RefreshRequest, request: Request) -> ApiResponse:
    data = RefreshResponse(
        access_token=await _service.refresh(body.refresh_token),
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Token refreshed"
    return resp


@router.get("/me", summary="Current session")
async def me(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Db,
    request: Request,
) -> ApiResponse:
    user_id = str(current_user.id)
    account = await _accounts.get_account(db, user_id)
    if account is None:
        raise AccountNotFoundError(user_id)

    data = SessionResponse(
        user=UserInfo(
            user_id=user_id,
            username=current_user.username,
            email=current_user.email,
            is_admin=await _service.is_admin(db, user_id),
        ),
        display_name=account.display_name,
        balance_cents=account.balance,
        balance_display=cents_to_display(account.balance),
        is_verified=account.is_verified,
        is_profile_complete=account.is_profile_complete,
    )
    return success_response(data.model_dump(), request)
