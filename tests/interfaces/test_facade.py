"""Integration Tests: TimeBankFacade end to end.

Invariants:
    - Every call opens and closes its own session
    - Responses are pydantic schemas, never ORM rows
    - Schema validation failures surface as InvalidInputError
    - Facades built without a lock registry share the container's registry
    - Pagination limits are clamped to 1..500 and offsets to >= 0
"""

from decimal import Decimal

import pytest

from timebank.core.container import ApplicationContainer
from timebank.core.errors import InvalidInputError
from timebank.domain.balances import InsufficientBalanceError
from timebank.domain.claims import AlreadyVotedError
from timebank.interfaces import TimeBankFacade
from timebank.schemas import ClaimDetailResponse, ClaimResponse


@pytest.fixture
def facade(test_session_factory, settings, locks):
    return TimeBankFacade(test_session_factory, settings, locks)


async def test_claim_lifecycle_through_facade(facade, categories):
    claim = await facade.submit_claim("alice", categories["Home Repair"].id, "2.5", "Fixed a door", None)
    assert isinstance(claim, ClaimResponse)
    assert claim.actual_hours_earned == Decimal("3.00")

    pending = await facade.get_pending_claims()
    assert [item.id for item in pending] == [claim.id]

    await facade.send_to_voting(claim.id, "admin")
    for voter in ("bob", "carol"):
        outcome = await facade.record_vote(claim.id, voter, "approve")
        assert outcome.complete is False

    voting = await facade.get_voting_claims()
    assert isinstance(voting[0], ClaimDetailResponse)
    assert voting[0].approve_count == 2
    assert voting[0].total_votes == 2

    outcome = await facade.record_vote(claim.id, "dave", "reject", "not convinced")
    assert outcome.complete is True
    assert outcome.result == "approved"

    balance = await facade.get_balance("alice")
    assert balance.balance == Decimal("3.00")

    mine = await facade.get_user_claims("alice")
    assert mine[0].status == "approved"
    assert mine[0].reject_count == 1

    ledger = await facade.get_public_ledger()
    assert ledger.total == 1
    assert ledger.entries[0].description == "Earned: Fixed a door"

    report = await facade.reconcile("alice")
    assert report.consistent is True


async def test_duplicate_vote_through_facade(facade, categories):
    claim = await facade.submit_claim("alice", categories["Other"].id, 1, "Walked a dog")
    await facade.send_to_voting(claim.id, "admin")
    await facade.record_vote(claim.id, "bob", "approve")

    with pytest.raises(AlreadyVotedError) as excinfo:
        await facade.record_vote(claim.id, "bob", "approve")
    assert excinfo.value.to_response()["error"]["kind"] == "already_voted"


async def test_direct_approve_and_reject(facade, categories):
    first = await facade.submit_claim("alice", categories["Other"].id, "1", "One")
    second = await facade.submit_claim("alice", categories["Other"].id, "1", "Two")

    approved = await facade.approve_claim(first.id, "admin")
    rejected = await facade.reject_claim(second.id, "admin", "Duplicate of another claim")

    assert approved.status == "approved"
    assert rejected.status == "rejected"
    assert rejected.rejection_reason == "Duplicate of another claim"
    assert (await facade.get_claim(second.id)).rejection_reason == "Duplicate of another claim"
    assert (await facade.get_balance("alice")).balance == Decimal("1.00")


async def test_invalid_inputs(facade, categories):
    with pytest.raises(InvalidInputError):
        await facade.submit_claim("alice", categories["Other"].id, "1000", "Too many hours")
    with pytest.raises(InvalidInputError):
        await facade.submit_claim("", categories["Other"].id, "1", "No claimant")
    with pytest.raises(InvalidInputError) as excinfo:
        await facade.record_vote("claim", "bob", "maybe")
    assert excinfo.value.to_response()["error"]["details"]
    with pytest.raises(InvalidInputError):
        await facade.reject_claim("claim", "admin", "")


async def test_adjust_and_transfer(facade):
    await facade.adjust_balance("alice", "4", "starter hours", "root")
    transfer = await facade.transfer_hours("alice", "bob", "1.5", "Painted a fence", "req-9")

    assert transfer.spender.balance == Decimal("2.50")
    assert transfer.provider.balance == Decimal("1.50")
    assert transfer.entry.kind == "spent"

    with pytest.raises(InsufficientBalanceError):
        await facade.transfer_hours("bob", "alice", "2", "Overdraw")

    history = await facade.get_user_transactions("alice")
    assert history.total == 2
    assert [entry.kind for entry in history.entries] == ["spent", "adjusted"]


async def test_pagination_is_clamped(facade):
    for account in ("a", "b", "c"):
        await facade.adjust_balance(account, "1", "seed", "root")

    page = await facade.get_all_balances(limit=0, offset=-5)
    assert (page.limit, page.offset) == (1, 0)
    assert page.total == 3
    assert len(page.balances) == 1

    ledger = await facade.get_public_ledger(limit=10_000)
    assert ledger.limit == 500
    assert ledger.total == 3


async def test_empty_identifiers_are_rejected_before_any_write(facade, categories):
    claim = await facade.submit_claim("alice", categories["Other"].id, "1", "Sorted the post")

    with pytest.raises(InvalidInputError):
        await facade.approve_claim(claim.id, "")
    with pytest.raises(InvalidInputError):
        await facade.approve_claim("", "admin")
    with pytest.raises(InvalidInputError):
        await facade.send_to_voting(claim.id, "")
    with pytest.raises(InvalidInputError):
        await facade.get_balance("")
    with pytest.raises(InvalidInputError):
        await facade.reconcile("")
    with pytest.raises(InvalidInputError):
        await facade.get_user_transactions("")
    with pytest.raises(InvalidInputError):
        await facade.get_user_claims("")

    assert (await facade.get_claim(claim.id)).status == "pending"
    assert (await facade.get_all_balances()).total == 0


async def test_default_locks_come_from_the_container(monkeypatch, test_session_factory, settings):
    container = ApplicationContainer(settings=settings)
    monkeypatch.setattr("timebank.interfaces.facade.get_container", lambda: container)

    first = TimeBankFacade(test_session_factory, settings)
    second = TimeBankFacade(test_session_factory, settings)

    assert first.locks is container.locks
    assert second.locks is first.locks
