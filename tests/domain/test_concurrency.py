"""Concurrency Tests: simultaneous writers on one claim or one account.

Invariants:
    - Concurrent votes that reach quorum resolve the claim exactly once
    - Concurrent approvals credit the claimant exactly once
    - Concurrent debits never take a balance below the floor
    - A claim resolves at most once even when writers do not share a lock registry

Design Decisions:
    - Each concurrent caller gets its own session, as separate requests would
    - Outcomes are collected with return_exceptions so losers can be inspected
"""

import asyncio
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from timebank.domain.adjustments import AdjustmentService
from timebank.domain.balances import InsufficientBalanceError
from timebank.core.locks import KeyedLocks
from timebank.domain.claims import ClaimStatus, ClaimWorkflow, InvalidClaimStateError, VoteOutcome
from timebank.domain.ledger import LedgerService


async def test_simultaneous_votes_reaching_quorum(workflow_for, categories, test_session_factory):
    setup = workflow_for()
    claim = await setup.submit("alice", categories["Gardening"].id, "3", "Weeded the allotment")
    await setup.send_to_voting(claim.id, "admin")
    await setup.record_vote(claim.id, "bob", "approve")
    await setup.record_vote(claim.id, "carol", "approve")

    results = await asyncio.gather(
        workflow_for().record_vote(claim.id, "dave", "approve"),
        workflow_for().record_vote(claim.id, "erin", "approve"),
        return_exceptions=True,
    )

    outcomes = [r for r in results if isinstance(r, VoteOutcome)]
    refused = [r for r in results if isinstance(r, InvalidClaimStateError)]
    assert len(outcomes) == 1 and len(refused) == 1
    assert outcomes[0].result is ClaimStatus.APPROVED

    async with test_session_factory() as session:
        entries = await LedgerService.with_session(session).entries_for_claim(claim.id)
        assert len(entries) == 1
        report = await AdjustmentService.with_session(session, locks=setup.locks).reconcile("alice")
        assert report.balance == Decimal("3.00")
        assert report.consistent


async def test_simultaneous_direct_approvals(workflow_for, categories, test_session_factory):
    claim = await workflow_for().submit("alice", categories["Cooking/Food"].id, "2", "Batch cooked soup")

    results = await asyncio.gather(
        *(workflow_for().approve_direct(claim.id, f"admin-{n}") for n in range(4)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, InvalidClaimStateError)) == 3
    async with test_session_factory() as session:
        assert len(await LedgerService.with_session(session).entries_for_claim(claim.id)) == 1
        assert await LedgerService.with_session(session).net_hours("alice") == Decimal("2.00")


async def test_simultaneous_debits_respect_floor(test_session_factory, settings, locks):
    async with test_session_factory() as session:
        await AdjustmentService.with_session(session, settings=settings, locks=locks).adjust_balance(
            "alice", "5", "seed", "root"
        )

    async def debit():
        async with test_session_factory() as session:
            service = AdjustmentService.with_session(session, settings=settings, locks=locks)
            return await service.adjust_balance("alice", "-2", "spend", "root")

    results = await asyncio.gather(*(debit() for _ in range(5)), return_exceptions=True)

    assert sum(1 for r in results if isinstance(r, InsufficientBalanceError)) == 3
    async with test_session_factory() as session:
        report = await AdjustmentService.with_session(session, settings=settings, locks=locks).reconcile("alice")
        assert report.balance == Decimal("1.00")
        assert report.consistent
    assert len(locks) == 0


# =============================================================================
# Writers with separate lock registries
# =============================================================================


async def test_quorum_votes_without_shared_locks_credit_once(
    workflow_for, categories, test_session_factory, settings
):
    setup = workflow_for()
    claim = await setup.submit("alice", categories["Gardening"].id, "3", "Pruned the orchard")
    await setup.send_to_voting(claim.id, "admin")
    await setup.record_vote(claim.id, "bob", "approve")
    await setup.record_vote(claim.id, "carol", "approve")

    async def vote_alone(voter):
        async with test_session_factory() as session:
            workflow = ClaimWorkflow.with_session(session, settings=settings, locks=KeyedLocks())
            return await workflow.record_vote(claim.id, voter, "approve")

    results = await asyncio.gather(vote_alone("dave"), vote_alone("erin"), return_exceptions=True)

    completed = [r for r in results if isinstance(r, VoteOutcome) and r.complete]
    assert len(completed) == 1
    assert completed[0].result is ClaimStatus.APPROVED
    assert all(
        isinstance(r, (InvalidClaimStateError, OperationalError)) for r in results if r is not completed[0]
    )

    async with test_session_factory() as session:
        entries = await LedgerService.with_session(session).entries_for_claim(claim.id)
        assert [entry.kind for entry in entries] == ["earned"]
        report = await AdjustmentService.with_session(session, locks=KeyedLocks()).reconcile("alice")
        assert report.balance == Decimal("3.00")
        assert report.consistent


async def test_direct_approvals_without_shared_locks_credit_once(
    categories, test_session_factory, settings
):
    async with test_session_factory() as session:
        claim = await ClaimWorkflow.with_session(session, settings=settings, locks=KeyedLocks()).submit(
            "alice", categories["Cooking/Food"].id, "2", "Fed the street party"
        )

    async def approve_alone(admin):
        async with test_session_factory() as session:
            workflow = ClaimWorkflow.with_session(session, settings=settings, locks=KeyedLocks())
            return await workflow.approve_direct(claim.id, admin)

    results = await asyncio.gather(approve_alone("admin-1"), approve_alone("admin-2"), return_exceptions=True)

    approved = [r for r in results if not isinstance(r, Exception)]
    assert len(approved) == 1
    assert approved[0].status is ClaimStatus.APPROVED
    assert all(isinstance(r, (InvalidClaimStateError, OperationalError)) for r in results if isinstance(r, Exception))

    async with test_session_factory() as session:
        assert len(await LedgerService.with_session(session).entries_for_claim(claim.id)) == 1
        assert await LedgerService.with_session(session).net_hours("alice") == Decimal("2.00")
