"""Domain models for the append-only transaction log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class LedgerEntryKind(str, Enum):
    EARNED = "earned"
    SPENT = "spent"
    ADJUSTED = "adjusted"


@dataclass(slots=True)
class NewLedgerEntry:
    kind: LedgerEntryKind
    hours: Decimal
    description: str
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None


@dataclass(slots=True)
class LedgerEntry:
    id: int
    kind: LedgerEntryKind
    hours: Decimal
    description: str
    from_account_id: Optional[str]
    to_account_id: Optional[str]
    reference_id: Optional[str]
    reference_type: Optional[str]
    created_at: datetime

    def touches(self, account_id: str) -> bool:
        return account_id in (self.from_account_id, self.to_account_id)


@dataclass(slots=True)
class LedgerPage:
    total: int
    limit: int
    offset: int
    entries: list[LedgerEntry] = field(default_factory=list)


@dataclass(slots=True)
class ReconciliationReport:
    account_id: str
    balance: Decimal
    ledger_net: Decimal

    @property
    def consistent(self) -> bool:
        return self.balance == self.ledger_net
