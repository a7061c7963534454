"""Outer entry points into the time bank."""

from .facade import TimeBankFacade

__all__ = ["TimeBankFacade"]
