"""Ledger consistency checks.

Per account: balance == SUM(balance-audit amounts).
Global: SUM(balances) == approved deposits + admin adjustments, and trade
payments and receipts cancel out (trades move money, never create it).
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_ACCOUNT_DRIFT_SQL = text("""
    SELECT a.user_id, a.balance, COALESCE(SUM(l.amount), 0) AS ledger_sum
    FROM accounts a
    LEFT JOIN ledger_entries l ON l.user_id = a.user_id
    GROUP BY a.user_id, a.balance
    HAVING a.balance <> COALESCE(SUM(l.amount), 0)
    ORDER BY a.user_id
    LIMIT 100
""")
_TOTAL_BALANCE_SQL = text("SELECT COALESCE(SUM(balance), 0) FROM accounts")
_EXTERNAL_FLOW_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM ledger_entries
    WHERE entry_type IN ('DEPOSIT_APPROVED', 'ADMIN_ADJUSTMENT')
""")
_TRADE_FLOW_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM ledger_entries
    WHERE entry_type IN ('TRADE_PAYMENT', 'TRADE_RECEIPT')
""")
_TRADE_TOTAL_MISMATCH_SQL = text("""
    SELECT trade_id FROM transactions
    WHERE total <> quantity * unit_price
    LIMIT 100
""")


async def verify_ledger_consistency(db: AsyncSession) -> list[str]:
    """Returns a list of violation strings; empty means consistent."""
    violations: list[str] = []

    for row in (await db.execute(_ACCOUNT_DRIFT_SQL)).fetchall():
        violations.append(
            f"account {row.user_id}: balance={row.balance} != ledger_sum={row.ledger_sum}"
        )

    total_balance = (await db.execute(_TOTAL_BALANCE_SQL)).scalar_one()
    external = (await db.execute(_EXTERNAL_FLOW_SQL)).scalar_one()
    if total_balance != external:
        violations.append(
            f"global: total_balance={total_balance} != deposits+adjustments={external}"
        )

    trade_flow = (await db.execute(_TRADE_FLOW_SQL)).scalar_one()
    if trade_flow != 0:
        violations.append(f"trades not zero-sum: net={trade_flow}")

    for row in (await db.execute(_TRADE_TOTAL_MISMATCH_SQL)).fetchall():
        violations.append(f"trade {row.trade_id}: total != quantity * unit_price")

    for msg in violations:
        logger.error("Ledger invariant violated: %s", msg)
    return violations
