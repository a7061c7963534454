"""Claim workflow exceptions."""

from __future__ import annotations

from timebank.core.errors import ErrorKind, TimeBankError


class ClaimNotFoundError(TimeBankError):
    """Raised when the requested claim cannot be found."""

    def __init__(self, claim_id: str) -> None:
        super().__init__(f"Claim '{claim_id}' not found", "CLAIM_NOT_FOUND", ErrorKind.NOT_FOUND)
        self.claim_id = claim_id


class InvalidClaimStateError(TimeBankError):
    """Raised when a transition is attempted from a disallowed status."""

    def __init__(self, claim_id: str, status: str, action: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot {action} claim '{claim_id}' while it is {status}",
            "INVALID_CLAIM_STATE",
            ErrorKind.INVALID_STATE,
        )
        self.claim_id = claim_id
        self.status = status
        self.action = action


class AlreadyVotedError(TimeBankError):
    """Raised when a voter casts a second vote on the same claim."""

    def __init__(self, claim_id: str, voter_id: str) -> None:
        super().__init__(
            "You have already voted on this claim",
            "ALREADY_VOTED",
            ErrorKind.ALREADY_VOTED,
        )
        self.claim_id = claim_id
        self.voter_id = voter_id


class VotingDisabledError(InvalidClaimStateError):
    """Raised when a claim is sent to voting while community voting is off."""

    def __init__(self, claim_id: str, status: str) -> None:
        super().__init__(
            claim_id,
            status,
            "send to voting",
            message="Community voting is disabled; resolve the claim directly",
        )
