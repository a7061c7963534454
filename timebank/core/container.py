"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timebank.core.config import Settings, get_settings
from timebank.core.locks import KeyedLocks
from timebank.infrastructure.database.session import get_engine, get_session_factory


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    # shared by every workflow in the process so writers of one claim or account queue up
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return get_session_factory()


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer(settings=get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
