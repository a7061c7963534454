"""SQLAlchemy implementation for claim votes"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select

from timebank.db.models import ClaimVote
from timebank.domain.common.repository import AsyncRepository


class SqlVoteRepository(AsyncRepository[ClaimVote]):
    async def has_voted(self, claim_id: str, voter_id: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(ClaimVote)
            .where(ClaimVote.claim_id == claim_id, ClaimVote.voter_id == voter_id)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one()) > 0

    async def add_vote(
        self,
        *,
        claim_id: str,
        voter_id: str,
        choice: str,
        comment: str | None,
        created_at: datetime,
    ) -> ClaimVote:
        # IntegrityError from the (claim_id, voter_id) unique constraint propagates
        vote = ClaimVote(
            claim_id=claim_id,
            voter_id=voter_id,
            choice=choice,
            comment=comment,
            created_at=created_at,
        )
        return await self.add(vote)

    async def list_for_claim(self, claim_id: str) -> Sequence[ClaimVote]:
        stmt = (
            select(ClaimVote)
            .where(ClaimVote.claim_id == claim_id)
            .order_by(ClaimVote.created_at, ClaimVote.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_for_claims(self, claim_ids: Sequence[str]) -> Sequence[ClaimVote]:
        if not claim_ids:
            return []
        stmt = (
            select(ClaimVote)
            .where(ClaimVote.claim_id.in_(list(claim_ids)))
            .order_by(ClaimVote.created_at, ClaimVote.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
