"""Unit Tests: KeyedLocks registry.

Invariants:
    - Holders of one key run one at a time
    - Different keys do not block each other
    - Idle locks are dropped from the registry
"""

import asyncio

from timebank.core.locks import KeyedLocks, account_key, claim_key


def test_key_helpers():
    assert claim_key("abc") == "claim:abc"
    assert account_key("alice") == "account:alice"


async def test_same_key_serializes_holders():
    locks = KeyedLocks()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("claim:1"):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (
        ["a-in", "a-out", "b-in", "b-out"],
        ["b-in", "b-out", "a-in", "a-out"],
    )


async def test_distinct_keys_run_concurrently():
    locks = KeyedLocks()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def first() -> None:
        async with locks.hold("account:a"):
            inside.set()
            await release.wait()

    task = asyncio.create_task(first())
    await inside.wait()
    async with locks.hold("account:b"):
        assert locks.is_locked("account:a")
        assert locks.is_locked("account:b")
    release.set()
    await task


async def test_overlapping_key_sets_do_not_deadlock():
    locks = KeyedLocks()

    async def forward() -> None:
        async with locks.hold("account:a", "account:b"):
            await asyncio.sleep(0.005)

    async def backward() -> None:
        async with locks.hold("account:b", "account:a"):
            await asyncio.sleep(0.005)

    await asyncio.wait_for(asyncio.gather(forward(), backward(), forward()), timeout=2)


async def test_idle_entries_are_dropped():
    locks = KeyedLocks()
    async with locks.hold("claim:1", "account:x"):
        assert len(locks) == 2
    assert len(locks) == 0
    assert not locks.is_locked("claim:1")


async def test_entry_released_when_body_raises():
    locks = KeyedLocks()
    try:
        async with locks.hold("claim:1"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0
