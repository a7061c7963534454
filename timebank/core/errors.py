"""Error hierarchy shared by every time bank component.

Every failure carries a stable ``code`` and an ``ErrorKind`` so that callers
can map it to their own transport without inspecting message text. Messages
are safe to show to end users; storage details never appear in them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ALREADY_VOTED = "already_voted"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    INTERNAL = "internal"


class TimeBankError(Exception):
    """Base exception for all time bank errors."""

    def __init__(self, message: str, code: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "kind": self.kind.value,
                "message": self.message,
            }
        }


class InvalidAmountError(TimeBankError):
    """Quantity of hours is non-positive or malformed."""

    def __init__(self, value: Any, reason: str = "hours must be a positive number") -> None:
        super().__init__(
            f"Invalid amount {value!r}: {reason}",
            "INVALID_AMOUNT",
            ErrorKind.INVALID_AMOUNT,
        )
        self.value = value


class UnauthorizedError(TimeBankError):
    """Caller is not allowed to perform the requested action."""

    def __init__(self, account_id: str, action: str) -> None:
        super().__init__(
            f"Account '{account_id}' is not allowed to {action}",
            "UNAUTHORIZED",
            ErrorKind.UNAUTHORIZED,
        )
        self.account_id = account_id
        self.action = action


class InvalidInputError(TimeBankError):
    """Request payload failed schema validation."""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, "INVALID_INPUT", ErrorKind.INVALID_INPUT)
        self.details = details or []

    def to_response(self) -> dict[str, Any]:
        response = super().to_response()
        response["error"]["details"] = self.details
        return response


class StorageError(TimeBankError):
    """Database operation failed; the unit of work has been rolled back."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            "The operation could not be completed, please try again later",
            "STORAGE_ERROR",
            ErrorKind.INTERNAL,
        )
        self.operation = operation


__all__ = [
    "ErrorKind",
    "TimeBankError",
    "InvalidAmountError",
    "UnauthorizedError",
    "InvalidInputError",
    "StorageError",
]
