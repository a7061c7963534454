"""Domain models for account balances."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(slots=True)
class BalanceSnapshot:
    account_id: str
    balance: Decimal
    updated_at: Optional[datetime]
