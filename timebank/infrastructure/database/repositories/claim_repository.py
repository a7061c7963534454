"""SQLAlchemy implementation for earning claims"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, select, update

from timebank.db.models import EarningClaim
from timebank.domain.common.repository import AsyncRepository


class SqlClaimRepository(AsyncRepository[EarningClaim]):
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
    ) -> EarningClaim:
        claim = EarningClaim(
            claimant_id=claimant_id,
            category_id=category_id,
            hours_claimed_centihours=hours_claimed_centihours,
            actual_hours_centihours=actual_hours_centihours,
            description=description,
            evidence_ref=evidence_ref,
            status="pending",
            created_at=created_at,
        )
        return await self.add(claim)

    async def get_claim(self, claim_id: str, *, for_update: bool = False) -> EarningClaim | None:
        stmt = (
            select(EarningClaim)
            .where(EarningClaim.id == claim_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def transition(
        self,
        claim_id: str,
        *,
        from_statuses: Sequence[str],
        status: str,
        resolver_id: str | None,
        rejection_reason: str | None = None,
        resolved_at: datetime | None = None,
    ) -> EarningClaim | None:
        """Move a claim out of one of ``from_statuses``; ``None`` when it was not in any of them."""
        values = {"status": status, "resolver_id": resolver_id}
        if rejection_reason is not None:
            values["rejection_reason"] = rejection_reason
        if resolved_at is not None:
            values["resolved_at"] = resolved_at
        stmt = (
            update(EarningClaim)
            .where(
                EarningClaim.id == claim_id,
                EarningClaim.status.in_(list(from_statuses)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_claim(claim_id)

    async def list_by_claimant(self, claimant_id: str) -> Sequence[EarningClaim]:
        stmt = (
            select(EarningClaim)
            .where(EarningClaim.claimant_id == claimant_id)
            .order_by(desc(EarningClaim.created_at), desc(EarningClaim.id))
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_by_status(self, status: str) -> Sequence[EarningClaim]:
        stmt = (
            select(EarningClaim)
            .where(EarningClaim.status == status)
            .order_by(desc(EarningClaim.created_at), desc(EarningClaim.id))
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
