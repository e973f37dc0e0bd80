"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

Balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (insufficient funds)
or the account does not exist.

Transaction ownership: the CALLER (application service or router) commits or
rolls back. Nothing here calls commit().
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rx_account.domain.models import Account, LedgerEntry, PublicProfile
from src.rx_common.enums import LedgerEntryType
from src.rx_common.errors import AccountNotFoundError, InsufficientBalanceError, InternalError

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = """
    user_id, display_name, email, balance, profile_url, contact_handle,
    is_verified, verification_status, version,
    created_at, updated_at, profile_updated_at
"""

_CREATE_ACCOUNT_SQL = text("""
    INSERT INTO accounts (user_id, display_name, email)
    VALUES (:user_id, :display_name, :email)
    ON CONFLICT (user_id) DO NOTHING
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
    FOR UPDATE
""")

_GET_INVENTORY_SQL = text("""
    SELECT resource, quantity
    FROM inventories
    WHERE user_id = :user_id
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE accounts
    SET display_name = :display_name,
        profile_url = :profile_url,
        contact_handle = :contact_handle,
        profile_updated_at = NOW(),
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

_CREDIT_SQL = text("""
    UPDATE accounts
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING balance
""")

_DEBIT_SQL = text("""
    UPDATE accounts
    SET balance = balance - :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING balance
""")

# The CTE snapshots the pre-override balance under the row lock so the audit
# row can carry the delta.
_SET_BALANCE_SQL = text("""
    WITH prev AS (
        SELECT balance FROM accounts WHERE user_id = :user_id FOR UPDATE
    )
    UPDATE accounts a
    SET balance = :new_balance,
        version = a.version + 1,
        updated_at = NOW()
    FROM prev
    WHERE a.user_id = :user_id
    RETURNING prev.balance AS old_balance, a.balance AS new_balance
""")

_SET_VERIFICATION_SQL = text("""
    UPDATE accounts
    SET verification_status = :status,
        is_verified = COALESCE(:is_verified, is_verified),
        updated_at = NOW()
    WHERE user_id = :user_id
""")

_UPSERT_INVENTORY_SQL = text("""
    INSERT INTO inventories (user_id, resource, quantity)
    VALUES (:user_id, :resource, :quantity)
    ON CONFLICT (user_id, resource) DO UPDATE
        SET quantity = inventories.quantity + EXCLUDED.quantity,
            updated_at = NOW()
    RETURNING quantity
""")

_PUBLIC_PROFILE_SQL = text("""
    SELECT a.user_id, a.display_name, a.profile_url, a.is_verified, a.created_at,
           (SELECT COUNT(*) FROM orders o WHERE o.seller_id = a.user_id) AS open_orders
    FROM accounts a
    WHERE a.user_id = :user_id
""")

_SEARCH_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE (:pattern IS NULL
           OR display_name ILIKE :pattern
           OR email ILIKE :pattern
           OR user_id = :search)
    ORDER BY created_at DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# SQL: balance audit trail
# ---------------------------------------------------------------------------

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_account(row: object, inventory: dict[str, int] | None = None) -> Account:
    return Account(
        user_id=row.user_id,  # type: ignore[attr-defined]
        display_name=row.display_name,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        inventory=inventory or {},
        profile_url=row.profile_url,  # type: ignore[attr-defined]
        contact_handle=row.contact_handle,  # type: ignore[attr-defined]
        is_verified=row.is_verified,  # type: ignore[attr-defined]
        verification_status=row.verification_status,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        profile_updated_at=row.profile_updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository: all balance operations atomic at the SQL level."""

    async def create_account(
        self, db: AsyncSession, user_id: str, display_name: str, email: str
    ) -> None:
        await db.execute(
            _CREATE_ACCOUNT_SQL,
            {"user_id": user_id, "display_name": display_name, "email": email},
        )

    async def _load_inventory(self, db: AsyncSession, user_id: str) -> dict[str, int]:
        result = await db.execute(_GET_INVENTORY_SQL, {"user_id": user_id})
        return {row.resource: row.quantity for row in result.fetchall()}

    async def get_account(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> Account | None:
        sql = _GET_ACCOUNT_FOR_UPDATE_SQL if for_update else _GET_ACCOUNT_SQL
        result = await db.execute(sql, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_account(row, await self._load_inventory(db, user_id))

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        display_name: str,
        profile_url: str | None,
        contact_handle: str | None,
    ) -> Account | None:
        result = await db.execute(
            _UPDATE_PROFILE_SQL,
            {
                "user_id": user_id,
                "display_name": display_name,
                "profile_url": profile_url,
                "contact_handle": contact_handle,
            },
        )
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_account(row, await self._load_inventory(db, user_id))

    async def get_public_profile(
        self, db: AsyncSession, user_id: str
    ) -> PublicProfile | None:
        result = await db.execute(_PUBLIC_PROFILE_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return PublicProfile(
            user_id=row.user_id,
            display_name=row.display_name,
            profile_url=row.profile_url,
            is_verified=row.is_verified,
            open_orders=row.open_orders,
            member_since=row.created_at,
        )

    async def _insert_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": user_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": balance_after,
                "reference_type": ref_type,
                "reference_id": ref_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(user_id)
        return await self._insert_ledger(
            db, user_id, entry_type, amount, row.balance, ref_type, ref_id, description
        )

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            acc_result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
            acc_row = acc_result.fetchone()
            if acc_row is None:
                raise AccountNotFoundError(user_id)
            raise InsufficientBalanceError(amount, acc_row.balance)
        return await self._insert_ledger(
            db, user_id, entry_type, -amount, row.balance, ref_type, ref_id, description
        )

    async def set_balance(
        self,
        db: AsyncSession,
        user_id: str,
        new_balance: int,
        moderator_id: str,
        description: str | None,
    ) -> tuple[int, LedgerEntry]:
        """Overwrite the balance. Returns (previous balance, ADMIN_ADJUSTMENT row)."""
        result = await db.execute(
            _SET_BALANCE_SQL, {"user_id": user_id, "new_balance": new_balance}
        )
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(user_id)
        entry = await self._insert_ledger(
            db,
            user_id,
            LedgerEntryType.ADMIN_ADJUSTMENT.value,
            row.new_balance - row.old_balance,
            row.new_balance,
            "ADMIN",
            moderator_id,
            description,
        )
        return row.old_balance, entry

    async def add_inventory(
        self, db: AsyncSession, user_id: str, resource: str, quantity: int
    ) -> int:
        result = await db.execute(
            _UPSERT_INVENTORY_SQL,
            {"user_id": user_id, "resource": resource, "quantity": quantity},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Inventory upsert returned no rows")
        return row.quantity

    async def set_verification(
        self, db: AsyncSession, user_id: str, status: str, is_verified: bool | None = None
    ) -> None:
        await db.execute(
            _SET_VERIFICATION_SQL,
            {"user_id": user_id, "status": status, "is_verified": is_verified},
        )

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "limit": limit,
                "entry_type": entry_type,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def search_accounts(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[Account]:
        term = search.strip() if search else None
        result = await db.execute(
            _SEARCH_ACCOUNTS_SQL,
            {
                "pattern": f"%{term}%" if term else None,
                "search": term,
                "limit": limit,
            },
        )
        return [_row_to_account(row) for row in result.fetchall()]
