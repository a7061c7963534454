"""SQLAlchemy implementation for category lookup"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select

from timebank.db.models import Category
from timebank.domain.common.repository import AsyncRepository


class SqlCategoryRepository(AsyncRepository[Category]):
    async def get_category(self, category_id: int) -> Category | None:
        stmt = select(Category).where(Category.id == category_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_categories(self) -> Sequence[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return result.scalars().all()

    async def count_categories(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Category))
        return int(result.scalar_one())

    async def create_category(
        self,
        *,
        name: str,
        description: str | None,
        earn_rate_centi: int,
        icon: str | None,
    ) -> Category:
        category = Category(
            name=name,
            description=description,
            earn_rate_centi=earn_rate_centi,
            icon=icon,
        )
        await self.add(category)
        await self.session.refresh(category)
        return category
