"""Repository protocols for claims and their votes."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from timebank.db.models import ClaimVote as ClaimVoteModel, EarningClaim as EarningClaimModel


class ClaimRepository(Protocol):
    async def create_claim(
        self,
        *,
        claimant_id: str,
        category_id: int,
        hours_claimed_centihours: int,
        actual_hours_centihours: int,
        description: str,
        evidence_ref: str | None,
        created_at: datetime,
    ) -> EarningClaimModel:
        ...

    async def get_claim(self, claim_id: str, *, for_update: bool = False) -> EarningClaimModel | None:
        ...

    async def transition(
        self,
        claim_id: str,
        *,
        from_statuses: Sequence[str],
        status: str,
        resolver_id: str | None,
        rejection_reason: str | None = None,
        resolved_at: datetime | None = None,
    ) -> EarningClaimModel | None:
        ...

    async def list_by_claimant(self, claimant_id: str) -> Sequence[EarningClaimModel]:
        ...

    async def list_by_status(self, status: str) -> Sequence[EarningClaimModel]:
        ...


class VoteRepository(Protocol):
    async def has_voted(self, claim_id: str, voter_id: str) -> bool:
        ...

    async def add_vote(
        self,
        *,
        claim_id: str,
        voter_id: str,
        choice: str,
        comment: str | None,
        created_at: datetime,
    ) -> ClaimVoteModel:
        ...

    async def list_for_claim(self, claim_id: str) -> Sequence[ClaimVoteModel]:
        ...

    async def list_for_claims(self, claim_ids: Sequence[str]) -> Sequence[ClaimVoteModel]:
        ...
