"""Database infrastructure helpers (engine, sessions, units of work)."""

from .base import Base
from .session import get_engine, get_session, get_session_factory, init_db, session_scope, unit_of_work

__all__ = [
    "Base",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "session_scope",
    "unit_of_work",
]
