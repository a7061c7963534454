"""Per-entity asyncio locks serializing writers of one claim or one account."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field


def claim_key(claim_id: str) -> str:
    return f"claim:{claim_id}"


def account_key(account_id: str) -> str:
    return f"account:{account_id}"


@dataclass(slots=True)
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLocks:
    """Registry of named locks, created on demand and dropped once idle.

    ``hold`` acquires several keys in sorted order so two callers asking for
    overlapping key sets can never deadlock. Locks are not reentrant: code
    already holding a key must not ask for it again.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def is_locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self._acquire(key))
            yield

    @asynccontextmanager
    async def _acquire(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)


__all__ = ["KeyedLocks", "account_key", "claim_key"]
