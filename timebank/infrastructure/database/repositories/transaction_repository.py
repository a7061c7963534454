"""SQLAlchemy implementation for the transaction log"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, or_, select

from timebank.db.models import Transaction
from timebank.domain.common.repository import AsyncRepository


class SqlTransactionRepository(AsyncRepository[Transaction]):
    async def add_transaction(
        self,
        *,
        kind: str,
        hours_centihours: int,
        description: str,
        from_account_id: str | None,
        to_account_id: str | None,
        reference_id: str | None,
        reference_type: str | None,
        created_at: datetime,
    ) -> Transaction:
        tx = Transaction(
            kind=kind,
            hours_centihours=hours_centihours,
            description=description,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            reference_id=reference_id,
            reference_type=reference_type,
            created_at=created_at,
        )
        return await self.add(tx)

    async def list_transactions(self, limit: int, offset: int) -> Sequence[Transaction]:
        stmt = select(Transaction).order_by(desc(Transaction.id)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_transactions(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Transaction))
        return int(result.scalar_one())

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(_touches(account_id))
            .order_by(desc(Transaction.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_for_account(self, account_id: str) -> int:
        stmt = select(func.count()).select_from(Transaction).where(_touches(account_id))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def sum_into(self, account_id: str) -> int:
        stmt = select(func.coalesce(func.sum(Transaction.hours_centihours), 0)).where(
            Transaction.to_account_id == account_id
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def sum_out_of(self, account_id: str) -> int:
        stmt = select(func.coalesce(func.sum(Transaction.hours_centihours), 0)).where(
            Transaction.from_account_id == account_id
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_for_reference(self, reference_type: str, reference_id: str) -> Sequence[Transaction]:
        stmt = (
            select(Transaction)
            .where(
                Transaction.reference_type == reference_type,
                Transaction.reference_id == reference_id,
            )
            .order_by(Transaction.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()


def _touches(account_id: str):
    return or_(
        Transaction.from_account_id == account_id,
        Transaction.to_account_id == account_id,
    )
