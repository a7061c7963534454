"""SQLAlchemy implementation for the balance domain"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from timebank.db.models import Balance
from timebank.domain.common.repository import AsyncRepository, utcnow


class SqlBalanceRepository(AsyncRepository[Balance]):
    async def get_balance(self, account_id: str, *, for_update: bool = False) -> Balance | None:
        stmt = (
            select(Balance)
            .where(Balance.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_balance(self, account_id: str) -> Balance:
        now = utcnow()
        values = {
            "account_id": account_id,
            "balance_centihours": 0,
            "updated_at": now,
            "created_at": now,
        }
        # concurrent creators converge on one row
        if self.dialect_name == "postgresql":
            stmt = pg_insert(Balance).values(**values).on_conflict_do_nothing()
        elif self.dialect_name == "sqlite":
            stmt = sqlite_insert(Balance).values(**values).on_conflict_do_nothing()
        else:
            stmt = insert(Balance).values(**values)
        await self.session.execute(stmt)

        balance = await self.get_balance(account_id)
        if balance is None:
            raise RuntimeError(f"failed to create balance for {account_id}")
        return balance

    async def apply_delta(
        self,
        account_id: str,
        delta_centihours: int,
        *,
        floor_centihours: int | None = None,
    ) -> tuple[int, datetime] | None:
        stmt = update(Balance).where(Balance.account_id == account_id)
        if floor_centihours is not None:
            stmt = stmt.where(Balance.balance_centihours + delta_centihours >= floor_centihours)
        stmt = (
            stmt.values(
                balance_centihours=Balance.balance_centihours + delta_centihours,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
            .returning(Balance.balance_centihours, Balance.updated_at)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return int(row[0]), row[1]

    async def list_balances(self, limit: int, offset: int) -> Sequence[Balance]:
        stmt = (
            select(Balance)
            .order_by(desc(Balance.balance_centihours), Balance.account_id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_balances(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Balance))
        return int(result.scalar_one())
