"""Enum values must match the DB CHECK constraints."""

from src.rx_common.enums import (
    RESOURCE_SYMBOLS,
    LedgerEntryType,
    RequestStatus,
    ResourceSymbol,
    TransactionType,
    VerificationState,
)


def test_resource_symbols() -> None:
    assert RESOURCE_SYMBOLS == ("GOLD", "OIL", "ORE", "DIA", "URA", "CASH")
    assert ResourceSymbol("GOLD") is ResourceSymbol.GOLD


def test_request_status_values() -> None:
    assert {s.value for s in RequestStatus} == {"pending", "approved", "rejected"}


def test_verification_state_includes_none() -> None:
    assert VerificationState.NONE.value == "none"
    assert len(VerificationState) == 4


def test_transaction_type() -> None:
    assert TransactionType.PURCHASE.value == "purchase"
    assert TransactionType.SALE.value == "sale"


def test_ledger_entry_types() -> None:
    assert {t.value for t in LedgerEntryType} == {
        "DEPOSIT_APPROVED",
        "TRADE_PAYMENT",
        "TRADE_RECEIPT",
        "ADMIN_ADJUSTMENT",
    }


def test_str_enum_compares_to_plain_string() -> None:
    assert RequestStatus.PENDING == "pending"
