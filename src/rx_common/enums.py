"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class ResourceSymbol(str, Enum):
    """Tradeable in-game commodities."""

    GOLD = "GOLD"
    OIL = "OIL"
    ORE = "ORE"
    DIA = "DIA"
    URA = "URA"
    CASH = "CASH"


RESOURCE_SYMBOLS: tuple[str, ...] = tuple(s.value for s in ResourceSymbol)


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationState(str, Enum):
    """Denormalised verification status kept on the account row."""

    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TransactionType(str, Enum):
    """Viewpoint of a ledger entry: derived, never stored."""

    PURCHASE = "purchase"
    SALE = "sale"


class LedgerEntryType(str, Enum):
    DEPOSIT_APPROVED = "DEPOSIT_APPROVED"
    TRADE_PAYMENT = "TRADE_PAYMENT"
    TRADE_RECEIPT = "TRADE_RECEIPT"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"
