"""Integration Tests: BalanceService against a real SQLite database.

Invariants:
    - Balances are created lazily at zero and exactly once
    - A debit never takes the balance below the configured floor
    - A refused debit leaves the balance untouched
"""

from decimal import Decimal

import pytest

from timebank.core.config import LedgerSettings
from timebank.core.errors import InvalidAmountError
from timebank.domain.balances import BalanceService, InsufficientBalanceError


@pytest.fixture
def balances(test_db):
    return BalanceService.with_session(test_db, LedgerSettings())


async def test_first_read_creates_zero_balance(balances):
    snapshot = await balances.get_balance("alice")
    assert snapshot.account_id == "alice"
    assert snapshot.balance == Decimal("0")

    again = await balances.get_balance("alice")
    assert again.balance == Decimal("0")
    _, total = await balances.list_balances()
    assert total == 1


async def test_credit_then_debit(balances):
    credited = await balances.credit("alice", "3.5")
    assert credited.balance == Decimal("3.50")

    debited = await balances.debit("alice", Decimal("1.25"))
    assert debited.balance == Decimal("2.25")
    assert (await balances.get_balance("alice")).balance == Decimal("2.25")


async def test_debit_below_floor_is_refused(balances):
    await balances.credit("alice", "2")

    with pytest.raises(InsufficientBalanceError) as excinfo:
        await balances.debit("alice", "5")

    assert excinfo.value.available == Decimal("2")
    assert excinfo.value.requested == Decimal("5")
    assert (await balances.get_balance("alice")).balance == Decimal("2.00")


async def test_debit_to_exactly_zero_is_allowed(balances):
    await balances.credit("alice", "2")
    snapshot = await balances.debit("alice", "2")
    assert snapshot.balance == Decimal("0")


@pytest.mark.parametrize("amount", ["0", "-1", "x"])
async def test_non_positive_amounts_are_rejected(balances, amount):
    with pytest.raises(InvalidAmountError):
        await balances.credit("alice", amount)
    with pytest.raises(InvalidAmountError):
        await balances.debit("alice", amount)


async def test_bounded_negative_floor(test_db):
    balances = BalanceService.with_session(
        test_db,
        LedgerSettings(allow_negative_balance=True, max_negative_balance=Decimal("3")),
    )
    assert (await balances.debit("bob", "3")).balance == Decimal("-3")
    with pytest.raises(InsufficientBalanceError):
        await balances.debit("bob", "0.01")


async def test_unbounded_negative_floor(test_db):
    balances = BalanceService.with_session(test_db, LedgerSettings(allow_negative_balance=True))
    assert balances.floor is None
    assert (await balances.debit("bob", "100")).balance == Decimal("-100")
    assert await balances.has_sufficient_balance("bob", "1000")


async def test_has_sufficient_balance(balances):
    await balances.credit("alice", "2")
    assert await balances.has_sufficient_balance("alice", "2")
    assert not await balances.has_sufficient_balance("alice", "2.01")


async def test_sufficiency_check_does_not_open_a_balance(balances, test_db):
    assert await balances.has_sufficient_balance("nobody", "0.01") is False
    await test_db.commit()

    _, total = await balances.list_balances()
    assert total == 0


async def test_list_balances_highest_first(balances):
    await balances.credit("low", "1")
    await balances.credit("high", "9")
    await balances.credit("mid", "4")

    snapshots, total = await balances.list_balances(limit=2, offset=0)

    assert total == 3
    assert [item.account_id for item in snapshots] == ["high", "mid"]
