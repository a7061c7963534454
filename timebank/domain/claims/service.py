"""Earning claim workflow.

A claim moves pending -> (voting ->) approved | rejected. Approval, from an
administrator or from a vote reaching quorum, changes the claim status,
credits the claimant and appends one ``earned`` ledger entry in a single unit
of work. Writers of one claim are serialized through the shared lock registry,
and the claimant's account lock is held alongside it whenever hours may move.
Every status change is a conditional update on the status it leaves, so two
writers that do not share a registry still resolve a claim at most once.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.core.config import Settings, VotingSettings, get_settings
from timebank.core.errors import InvalidAmountError, InvalidInputError, UnauthorizedError
from timebank.core.hours import CENT, HoursLike, from_centihours, parse_hours, quantize_hours, to_centihours
from timebank.core.locks import KeyedLocks, account_key, claim_key
from timebank.db.models import ClaimVote as ClaimVoteModel, EarningClaim as EarningClaimModel
from timebank.domain.balances.service import BalanceService
from timebank.domain.categories.service import CategoryService
from timebank.domain.common.repository import utcnow
from timebank.domain.ledger.service import LedgerService
from timebank.infrastructure.database.repositories.claim_repository import SqlClaimRepository
from timebank.infrastructure.database.repositories.vote_repository import SqlVoteRepository
from timebank.infrastructure.database.session import unit_of_work

from .exceptions import AlreadyVotedError, ClaimNotFoundError, InvalidClaimStateError, VotingDisabledError
from .models import Claim, ClaimStatus, ClaimWithVotes, Vote, VoteChoice, VoteOutcome
from .repository import ClaimRepository, VoteRepository
from .tally import VoteTally

logger = logging.getLogger(__name__)

VOTE_REJECTION_REASON = "Rejected by vote"

_RESOLVABLE = (ClaimStatus.PENDING, ClaimStatus.VOTING)


@dataclass(slots=True)
class ClaimWorkflow:
    session: AsyncSession
    claims: ClaimRepository
    votes: VoteRepository
    categories: CategoryService
    balances: BalanceService
    ledger: LedgerService
    locks: KeyedLocks
    voting: VotingSettings = field(default_factory=VotingSettings)

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        settings: Settings | None = None,
        locks: KeyedLocks | None = None,
    ) -> "ClaimWorkflow":
        settings = settings or get_settings()
        if locks is None:
            from timebank.core.container import get_container

            locks = get_container().locks
        return cls(
            session=session,
            claims=SqlClaimRepository(session),
            votes=SqlVoteRepository(session),
            categories=CategoryService.with_session(session),
            balances=BalanceService.with_session(session, settings.ledger),
            ledger=LedgerService.with_session(session, settings.ledger),
            locks=locks,
            voting=settings.voting,
        )

    # -- commands ---------------------------------------------------------

    async def submit(
        self,
        claimant_id: str,
        category_id: int,
        hours_claimed: HoursLike,
        description: str,
        evidence_ref: Optional[str] = None,
    ) -> Claim:
        self._refuse_system_identity(claimant_id, "submit claims")
        hours = parse_hours(hours_claimed)

        async with unit_of_work(self.session):
            category = await self.categories.get_category(category_id)
            # the rate in force now is frozen into the claim
            earned = quantize_hours(hours * category.earn_rate)
            if earned < CENT:
                raise InvalidAmountError(hours_claimed, "earns less than 0.01 hours at this category's rate")
            model = await self.claims.create_claim(
                claimant_id=claimant_id,
                category_id=category.id,
                hours_claimed_centihours=to_centihours(hours),
                actual_hours_centihours=to_centihours(earned),
                description=description,
                evidence_ref=evidence_ref,
                created_at=utcnow(),
            )
            claim = self._to_claim(model)

        logger.info(
            "Claim %s submitted by %s: %s hours in %s (earns %s)",
            claim.id,
            claimant_id,
            claim.hours_claimed,
            category.name,
            claim.actual_hours_earned,
            extra={"claim_id": claim.id, "account_id": claimant_id},
        )
        return claim

    async def approve_direct(self, claim_id: str, approver_id: str) -> Claim:
        self._refuse_system_identity(approver_id, "approve claims")
        claimant_id = await self._claimant_of(claim_id)

        async with self.locks.hold(claim_key(claim_id)), self.locks.hold(account_key(claimant_id)):
            async with unit_of_work(self.session):
                model = await self._load(claim_id, for_update=True)
                self._require_status(model, _RESOLVABLE, "approve")
                return await self._approve_locked(model, approver_id, _RESOLVABLE)

    async def reject_direct(self, claim_id: str, approver_id: str, reason: str) -> Claim:
        self._refuse_system_identity(approver_id, "reject claims")

        async with self.locks.hold(claim_key(claim_id)):
            async with unit_of_work(self.session):
                model = await self._load(claim_id, for_update=True)
                self._require_status(model, _RESOLVABLE, "reject")
                return await self._reject_locked(model, approver_id, reason, _RESOLVABLE)

    async def send_to_voting(self, claim_id: str, approver_id: str) -> Claim:
        self._refuse_system_identity(approver_id, "send claims to voting")

        async with self.locks.hold(claim_key(claim_id)):
            async with unit_of_work(self.session):
                model = await self._load(claim_id, for_update=True)
                self._require_status(model, (ClaimStatus.PENDING,), "send to voting")
                if not self.voting.enabled:
                    logger.warning(
                        "Refused to open voting on claim %s: voting disabled",
                        claim_id,
                        extra={"claim_id": claim_id, "error_code": "INVALID_CLAIM_STATE"},
                    )
                    raise VotingDisabledError(claim_id, model.status)
                model = await self._transition(
                    model,
                    (ClaimStatus.PENDING,),
                    "send to voting",
                    status=ClaimStatus.VOTING.value,
                    resolver_id=approver_id,
                )
                claim = self._to_claim(model)

        logger.info(
            "Claim %s sent to voting by %s",
            claim_id,
            approver_id,
            extra={"claim_id": claim_id},
        )
        return claim

    async def record_vote(
        self,
        claim_id: str,
        voter_id: str,
        choice: VoteChoice | str,
        comment: Optional[str] = None,
    ) -> VoteOutcome:
        self._refuse_system_identity(voter_id, "vote")
        try:
            choice = VoteChoice(choice)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown vote choice {choice!r}") from exc
        claimant_id = await self._claimant_of(claim_id)

        async with self.locks.hold(claim_key(claim_id)), self.locks.hold(account_key(claimant_id)):
            async with unit_of_work(self.session):
                model = await self._load(claim_id, for_update=True)
                if await self.votes.has_voted(claim_id, voter_id):
                    raise self._already_voted(claim_id, voter_id)
                self._require_status(model, (ClaimStatus.VOTING,), "vote on")

                try:
                    await self.votes.add_vote(
                        claim_id=claim_id,
                        voter_id=voter_id,
                        choice=choice.value,
                        comment=comment,
                        created_at=utcnow(),
                    )
                except IntegrityError as exc:
                    raise self._already_voted(claim_id, voter_id) from exc

                tally = VoteTally.from_choices(row.choice for row in await self.votes.list_for_claim(claim_id))
                logger.info(
                    "Vote %s on claim %s by %s (%d/%d)",
                    choice.value,
                    claim_id,
                    voter_id,
                    tally.total,
                    self.voting.required_votes,
                    extra={"claim_id": claim_id, "voter_id": voter_id},
                )
                if not tally.reached(self.voting.required_votes):
                    return VoteOutcome(complete=False)

                result = tally.outcome()
                resolver = self.voting.system_resolver_id
                if result is ClaimStatus.APPROVED:
                    await self._approve_locked(model, resolver, (ClaimStatus.VOTING,))
                else:
                    await self._reject_locked(model, resolver, VOTE_REJECTION_REASON, (ClaimStatus.VOTING,))
                return VoteOutcome(complete=True, result=result)

    # -- queries ----------------------------------------------------------

    async def get_claim(self, claim_id: str) -> ClaimWithVotes:
        model = await self._load(claim_id)
        votes = [self._to_vote(row) for row in await self.votes.list_for_claim(claim_id)]
        return ClaimWithVotes(claim=self._to_claim(model), tally=VoteTally.from_votes(votes), votes=votes)

    async def list_user_claims(self, claimant_id: str) -> list[ClaimWithVotes]:
        return await self._with_votes(await self.claims.list_by_claimant(claimant_id))

    async def list_pending(self) -> list[ClaimWithVotes]:
        return await self._with_votes(await self.claims.list_by_status(ClaimStatus.PENDING.value))

    async def list_voting(self) -> list[ClaimWithVotes]:
        return await self._with_votes(await self.claims.list_by_status(ClaimStatus.VOTING.value))

    # -- internals --------------------------------------------------------

    async def _approve_locked(
        self,
        model: EarningClaimModel,
        resolver_id: str,
        allowed: Sequence[ClaimStatus],
    ) -> Claim:
        """Resolve as approved. Caller holds the claim and claimant locks inside a unit of work."""
        model = await self._transition(
            model,
            allowed,
            "approve",
            status=ClaimStatus.APPROVED.value,
            resolver_id=resolver_id,
            resolved_at=utcnow(),
        )
        earned = from_centihours(model.actual_hours_centihours)
        await self.balances.credit(model.claimant_id, earned)
        await self.ledger.record_earning(
            claim_id=model.id,
            claimant_id=model.claimant_id,
            hours=earned,
            description=model.description,
        )
        logger.info(
            "Claim %s approved by %s, %s credited %s hours",
            model.id,
            resolver_id,
            model.claimant_id,
            earned,
            extra={"claim_id": model.id, "account_id": model.claimant_id},
        )
        return self._to_claim(model)

    async def _reject_locked(
        self,
        model: EarningClaimModel,
        resolver_id: str,
        reason: str,
        allowed: Sequence[ClaimStatus],
    ) -> Claim:
        model = await self._transition(
            model,
            allowed,
            "reject",
            status=ClaimStatus.REJECTED.value,
            resolver_id=resolver_id,
            rejection_reason=reason,
            resolved_at=utcnow(),
        )
        logger.info(
            "Claim %s rejected by %s: %s",
            model.id,
            resolver_id,
            reason,
            extra={"claim_id": model.id},
        )
        return self._to_claim(model)

    async def _transition(
        self,
        model: EarningClaimModel,
        allowed: Sequence[ClaimStatus],
        action: str,
        **values,
    ) -> EarningClaimModel:
        """Conditional status change; the row must still be in one of ``allowed``."""
        claim_id = model.id
        updated = await self.claims.transition(
            claim_id,
            from_statuses=[status.value for status in allowed],
            **values,
        )
        if updated is not None:
            return updated
        current = await self._load(claim_id)
        logger.warning(
            "Refused to %s claim %s: status moved to %s concurrently",
            action,
            claim_id,
            current.status,
            extra={"claim_id": claim_id, "error_code": "INVALID_CLAIM_STATE"},
        )
        raise InvalidClaimStateError(claim_id, current.status, action)

    async def _claimant_of(self, claim_id: str) -> str:
        # claimant never changes, so it is safe to read before taking locks
        return (await self._load(claim_id)).claimant_id

    async def _load(self, claim_id: str, *, for_update: bool = False) -> EarningClaimModel:
        model = await self.claims.get_claim(claim_id, for_update=for_update)
        if model is None:
            raise ClaimNotFoundError(claim_id)
        return model

    async def _with_votes(self, models: Sequence[EarningClaimModel]) -> list[ClaimWithVotes]:
        grouped: dict[str, list[Vote]] = defaultdict(list)
        for row in await self.votes.list_for_claims([model.id for model in models]):
            grouped[row.claim_id].append(self._to_vote(row))
        return [
            ClaimWithVotes(
                claim=self._to_claim(model),
                tally=VoteTally.from_votes(grouped[model.id]),
                votes=grouped[model.id],
            )
            for model in models
        ]

    def _require_status(self, model: EarningClaimModel, allowed: Sequence[ClaimStatus], action: str) -> None:
        status = ClaimStatus(model.status)
        if status in allowed:
            return
        logger.warning(
            "Refused to %s claim %s in status %s",
            action,
            model.id,
            status.value,
            extra={"claim_id": model.id, "error_code": "INVALID_CLAIM_STATE"},
        )
        raise InvalidClaimStateError(model.id, status.value, action)

    def _refuse_system_identity(self, account_id: str, action: str) -> None:
        if account_id == self.voting.system_resolver_id:
            logger.warning(
                "Refused reserved identity %s trying to %s",
                account_id,
                action,
                extra={"account_id": account_id, "error_code": "UNAUTHORIZED"},
            )
            raise UnauthorizedError(account_id, action)

    @staticmethod
    def _already_voted(claim_id: str, voter_id: str) -> AlreadyVotedError:
        logger.warning(
            "Duplicate vote on claim %s by %s",
            claim_id,
            voter_id,
            extra={"claim_id": claim_id, "voter_id": voter_id, "error_code": "ALREADY_VOTED"},
        )
        return AlreadyVotedError(claim_id, voter_id)

    @staticmethod
    def _to_claim(model: EarningClaimModel) -> Claim:
        return Claim(
            id=model.id,
            claimant_id=model.claimant_id,
            category_id=model.category_id,
            hours_claimed=from_centihours(model.hours_claimed_centihours),
            actual_hours_earned=from_centihours(model.actual_hours_centihours),
            description=model.description,
            status=ClaimStatus(model.status),
            created_at=model.created_at,
            evidence_ref=model.evidence_ref,
            resolver_id=model.resolver_id,
            rejection_reason=model.rejection_reason,
            resolved_at=model.resolved_at,
        )

    @staticmethod
    def _to_vote(model: ClaimVoteModel) -> Vote:
        return Vote(
            id=model.id,
            claim_id=model.claim_id,
            voter_id=model.voter_id,
            choice=VoteChoice(model.choice),
            created_at=model.created_at,
            comment=model.comment,
        )
