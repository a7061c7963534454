"""Repository protocol for category lookup."""

from __future__ import annotations

from typing import Protocol, Sequence

from timebank.db.models import Category as CategoryModel


class CategoryRepository(Protocol):
    async def get_category(self, category_id: int) -> CategoryModel | None:
        ...

    async def list_categories(self) -> Sequence[CategoryModel]:
        ...

    async def count_categories(self) -> int:
        ...

    async def create_category(
        self,
        *,
        name: str,
        description: str | None,
        earn_rate_centi: int,
        icon: str | None,
    ) -> CategoryModel:
        ...
