"""User identity service: register, login, refresh.

Registration is the "first successful authentication": it creates the login
identity and the marketplace Account in one transaction. Transactions are
managed by the caller (router layer) via `async with db.begin()`.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rx_account.infrastructure.persistence import AccountRepository
from src.rx_admin.infrastructure.roles import AdminRoleRepository
from src.rx_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.rx_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.rx_gateway.auth.password import hash_password, verify_password
from src.rx_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    def __init__(
        self,
        accounts: AccountRepository | None = None,
        roles: AdminRoleRepository | None = None,
    ) -> None:
        self._accounts = accounts or AccountRepository()
        self._roles = roles or AdminRoleRepository()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
        display_name: str | None = None,
    ) -> tuple[UserModel, str]:
        """Register a new user and create their Account row.

        Returns (user, display_name). The caller must wrap this in
        `async with db.begin()`.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing

        name = (display_name or "").strip() or username
        await self._accounts.create_account(db, str(user.id), name, email)

        if email.lower() in settings.admin_bootstrap_emails:
            await self._roles.grant(db, str(user.id), granted_by=None)
            logger.info("Bootstrap admin role granted to user %s", user.id)

        return user, name

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        "User not found" and "wrong password" raise the same error.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def is_admin(self, db: AsyncSession, user_id: str) -> bool:
        return await self._roles.is_admin(db, user_id)

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
