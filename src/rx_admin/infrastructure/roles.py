"""AdminRoleRepository: the single admin role table.

Every privileged operation asks this table; there is no allow-list in code.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_IS_ADMIN_SQL = text("SELECT 1 FROM admin_roles WHERE user_id = :user_id")

_GRANT_SQL = text("""
    INSERT INTO admin_roles (user_id, granted_by)
    VALUES (:user_id, :granted_by)
    ON CONFLICT (user_id) DO NOTHING
    RETURNING user_id
""")

_REVOKE_SQL = text("DELETE FROM admin_roles WHERE user_id = :user_id RETURNING user_id")

_LIST_SQL = text("""
    SELECT r.user_id, r.granted_by, r.granted_at, a.display_name
    FROM admin_roles r
    LEFT JOIN accounts a ON a.user_id = r.user_id
    ORDER BY r.granted_at
""")


@dataclass
class AdminRole:
    user_id: str
    granted_by: str | None
    granted_at: datetime | None
    display_name: str | None = None


class AdminRoleRepository:
    async def is_admin(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_IS_ADMIN_SQL, {"user_id": user_id})
        return result.fetchone() is not None

    async def grant(
        self, db: AsyncSession, user_id: str, granted_by: str | None
    ) -> bool:
        """Returns False when the user already held the role."""
        result = await db.execute(
            _GRANT_SQL, {"user_id": user_id, "granted_by": granted_by}
        )
        return result.fetchone() is not None

    async def revoke(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_REVOKE_SQL, {"user_id": user_id})
        return result.fetchone() is not None

    async def list_admins(self, db: AsyncSession) -> list[AdminRole]:
        result = await db.execute(_LIST_SQL)
        return [
            AdminRole(
                user_id=row.user_id,
                granted_by=row.granted_by,
                granted_at=row.granted_at,
                display_name=row.display_name,
            )
            for row in result.fetchall()
        ]
