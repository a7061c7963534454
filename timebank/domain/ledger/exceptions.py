"""Ledger domain specific exceptions."""

from timebank.core.errors import ErrorKind, TimeBankError


class InvalidLedgerEntryError(TimeBankError):
    """Raised when an entry does not have the shape its kind requires."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_LEDGER_ENTRY", ErrorKind.INVALID_INPUT)
