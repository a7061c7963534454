"""Integration Tests: category seeding and lookup."""

from decimal import Decimal

import pytest

from timebank.domain.categories import DEFAULT_CATEGORIES, CategoryNotFoundError, CategoryService


async def test_seed_defaults_is_idempotent(test_db):
    service = CategoryService.with_session(test_db)

    assert await service.seed_defaults() == len(DEFAULT_CATEGORIES)
    assert await service.seed_defaults() == 0
    assert len(await service.list_categories()) == len(DEFAULT_CATEGORIES)


async def test_lookup(categories, test_db):
    service = CategoryService.with_session(test_db)

    tech = await service.get_category(categories["Tech Support"].id)
    assert tech.earn_rate == Decimal("1.50")
    assert tech.icon == "laptop"

    with pytest.raises(CategoryNotFoundError):
        await service.get_category(12345)
