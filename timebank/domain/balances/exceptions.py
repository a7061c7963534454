"""Balance domain specific exceptions."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from timebank.core.errors import ErrorKind, TimeBankError


class InsufficientBalanceError(TimeBankError):
    """Raised when a debit would take an account below its floor."""

    def __init__(
        self,
        account_id: str,
        requested: Decimal,
        available: Decimal,
        floor: Optional[Decimal],
    ) -> None:
        super().__init__(
            f"Insufficient balance: {requested} hours requested, {available} available",
            "INSUFFICIENT_BALANCE",
            ErrorKind.INSUFFICIENT_BALANCE,
        )
        self.account_id = account_id
        self.requested = requested
        self.available = available
        self.floor = floor
