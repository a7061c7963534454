"""Vote counting for claims under community review."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import ClaimStatus, Vote, VoteChoice


@dataclass(frozen=True, slots=True)
class VoteTally:
    approve: int = 0
    reject: int = 0
    abstain: int = 0

    @classmethod
    def from_choices(cls, choices: Iterable[VoteChoice | str]) -> "VoteTally":
        counts = {choice: 0 for choice in VoteChoice}
        for choice in choices:
            counts[VoteChoice(choice)] += 1
        return cls(
            approve=counts[VoteChoice.APPROVE],
            reject=counts[VoteChoice.REJECT],
            abstain=counts[VoteChoice.ABSTAIN],
        )

    @classmethod
    def from_votes(cls, votes: Iterable[Vote]) -> "VoteTally":
        return cls.from_choices(vote.choice for vote in votes)

    @property
    def total(self) -> int:
        return self.approve + self.reject + self.abstain

    def reached(self, quorum: int) -> bool:
        # abstentions count toward quorum but toward neither side
        return self.total >= quorum

    def outcome(self) -> ClaimStatus:
        """Majority of approvals over rejections wins; ties are rejected."""
        if self.approve > self.reject:
            return ClaimStatus.APPROVED
        return ClaimStatus.REJECTED
