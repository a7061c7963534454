"""Domain models for earning claims and votes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .tally import VoteTally


class ClaimStatus(str, Enum):
    PENDING = "pending"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ClaimStatus.APPROVED, ClaimStatus.REJECTED)


class VoteChoice(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    ABSTAIN = "abstain"


@dataclass(slots=True)
class Claim:
    id: str
    claimant_id: str
    category_id: int
    hours_claimed: Decimal
    actual_hours_earned: Decimal
    description: str
    status: ClaimStatus
    created_at: datetime
    evidence_ref: Optional[str] = None
    resolver_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    resolved_at: Optional[datetime] = None


@dataclass(slots=True)
class Vote:
    id: str
    claim_id: str
    voter_id: str
    choice: VoteChoice
    created_at: datetime
    comment: Optional[str] = None


@dataclass(slots=True)
class ClaimWithVotes:
    claim: Claim
    tally: "VoteTally"
    votes: list[Vote] = field(default_factory=list)


@dataclass(slots=True)
class VoteOutcome:
    complete: bool
    result: Optional[ClaimStatus] = None
