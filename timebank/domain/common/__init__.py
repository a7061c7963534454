"""Shared domain helpers."""

from .repository import AsyncRepository, utcnow

__all__ = ["AsyncRepository", "utcnow"]
