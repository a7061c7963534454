"""Ledger domain exports"""

from .exceptions import InvalidLedgerEntryError
from .models import LedgerEntry, LedgerEntryKind, LedgerPage, NewLedgerEntry, ReconciliationReport
from .service import LedgerService

__all__ = [
    "InvalidLedgerEntryError",
    "LedgerEntry",
    "LedgerEntryKind",
    "LedgerPage",
    "LedgerService",
    "NewLedgerEntry",
    "ReconciliationReport",
]
