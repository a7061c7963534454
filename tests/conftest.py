"""Root conftest: shared fixtures for the ledger tests.

Invariants:
    - Every test gets a fresh SQLite database with all tables created
    - Sessions come from a factory with expire_on_commit=False, like production
    - Default categories are seeded before any claim is submitted

Design Decisions:
    - The database is a file under tmp_path rather than :memory: so that
      sessions opened concurrently hold separate connections
    - Each test owns its lock registry; nothing leaks through get_container()
"""

import os
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")

from timebank.core.config import LedgerSettings, Settings, VotingSettings  # noqa: E402
from timebank.core.locks import KeyedLocks  # noqa: E402
from timebank.db import models  # noqa: E402,F401
from timebank.domain.adjustments import AdjustmentService  # noqa: E402
from timebank.domain.categories import CategoryService  # noqa: E402
from timebank.domain.claims import ClaimWorkflow  # noqa: E402
from timebank.infrastructure.database import Base  # noqa: E402
from timebank.infrastructure.database.repositories import SqlCategoryRepository  # noqa: E402


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        ledger=LedgerSettings(),
        voting=VotingSettings(required_votes=3),
    )


@pytest.fixture
def locks():
    return KeyedLocks()


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'timebank.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def categories(test_session_factory):
    """Default category set, keyed by name."""
    async with test_session_factory() as session:
        service = CategoryService.with_session(session)
        await service.seed_defaults()
        await session.commit()
        return {category.name: category for category in await service.list_categories()}


@pytest.fixture
def make_category(test_session_factory):
    """Factory inserting a category with an arbitrary earn rate; returns its id."""

    async def _make(name: str = "Custom", earn_rate: str = "1.00") -> int:
        async with test_session_factory() as session:
            model = await SqlCategoryRepository(session).create_category(
                name=name,
                description=None,
                earn_rate_centi=int(Decimal(earn_rate) * 100),
                icon=None,
            )
            await session.commit()
            return model.id

    return _make


@pytest.fixture
async def workflow_for(test_session_factory, settings, locks):
    """Open a fresh session and build a claim workflow on it, one per call site."""
    sessions: list[AsyncSession] = []

    def _build(custom: Settings | None = None) -> ClaimWorkflow:
        session = test_session_factory()
        sessions.append(session)
        return ClaimWorkflow.with_session(session, settings=custom or settings, locks=locks)

    yield _build
    for session in sessions:
        await session.close()


@pytest.fixture
async def workflow(test_db, settings, locks, categories):
    return ClaimWorkflow.with_session(test_db, settings=settings, locks=locks)


@pytest.fixture
async def adjustments(test_db, settings, locks):
    return AdjustmentService.with_session(test_db, settings=settings, locks=locks)
