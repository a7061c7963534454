"""Read-side access to categories and their earn rates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from timebank.core.hours import from_centihours, to_centihours
from timebank.db.models import Category as CategoryModel
from timebank.infrastructure.database.repositories.category_repository import SqlCategoryRepository

from .exceptions import CategoryNotFoundError
from .models import DEFAULT_CATEGORIES, Category
from .repository import CategoryRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CategoryService:
    repository: CategoryRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CategoryService":
        return cls(SqlCategoryRepository(session))

    async def get_category(self, category_id: int) -> Category:
        model = await self.repository.get_category(category_id)
        if model is None:
            raise CategoryNotFoundError(category_id)
        return self._to_domain(model)

    async def list_categories(self) -> list[Category]:
        return [self._to_domain(model) for model in await self.repository.list_categories()]

    async def seed_defaults(self) -> int:
        """Insert the default category set into an empty table; returns rows added."""
        if await self.repository.count_categories() > 0:
            logger.info("Categories already seeded, skipping")
            return 0
        for name, description, earn_rate, icon in DEFAULT_CATEGORIES:
            await self.repository.create_category(
                name=name,
                description=description,
                earn_rate_centi=to_centihours(earn_rate),
                icon=icon,
            )
        logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))
        return len(DEFAULT_CATEGORIES)

    @staticmethod
    def _to_domain(model: CategoryModel) -> Category:
        return Category(
            id=model.id,
            name=model.name,
            earn_rate=from_centihours(model.earn_rate_centi),
            description=model.description,
            icon=model.icon,
        )
