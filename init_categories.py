"""
Seed the default earning categories.
Creates the tables on a fresh database and inserts the category set once.
"""
import asyncio

from timebank.core.config import get_settings
from timebank.domain.categories import CategoryService
from timebank.infrastructure.database import get_session, init_db
from timebank.infrastructure.observability import setup_logging


async def seed_default_categories() -> None:
    """Insert the default categories unless some already exist"""
    await init_db()

    async for db in get_session():
        service = CategoryService.with_session(db)
        added = await service.seed_defaults()
        await db.commit()

        if added == 0:
            print("Categories already exist, nothing to seed")
            return

        print("=" * 50)
        print(f"Seeded {added} default categories:")
        for category in await service.list_categories():
            print(f"  #{category.id:<3} {category.name:<24} x{category.earn_rate}")
        print("=" * 50)


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings.logging.level, settings.logging.format)
    asyncio.run(seed_default_categories())
