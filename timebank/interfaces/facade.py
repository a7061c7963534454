"""Entry point exposing the time bank operations to an outer surface.

Each call validates its input with the pydantic schemas, opens its own session
from the configured factory and returns response schemas. Domain failures
propagate as ``TimeBankError`` subclasses; storage failures as ``StorageError``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timebank.core.config import Settings
from timebank.core.container import ApplicationContainer, get_container
from timebank.core.errors import InvalidInputError
from timebank.core.locks import KeyedLocks
from timebank.domain.adjustments import AdjustmentService
from timebank.domain.balances import BalanceService
from timebank.domain.claims import ClaimWorkflow
from timebank.domain.ledger import LedgerService
from timebank.infrastructure.database.session import session_scope, unit_of_work
from timebank.schemas import (
    AccountQuery,
    AdjustBalanceRequest,
    BalanceListResponse,
    BalanceResponse,
    ClaimActionRequest,
    ClaimDetailResponse,
    ClaimRejectRequest,
    ClaimResponse,
    ClaimSubmitRequest,
    LedgerPageResponse,
    PageQuery,
    ReconciliationResponse,
    TransferRequest,
    TransferResponse,
    VoteOutcomeResponse,
    VoteRequest,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

LEDGER_PAGE_SIZE = 50
BALANCE_PAGE_SIZE = 100


def _parse(schema: type[RequestT], **data: Any) -> RequestT:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        details = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        logger.warning(
            "Rejected %s input: %s",
            schema.__name__,
            details,
            extra={"error_code": "INVALID_INPUT"},
        )
        raise InvalidInputError(f"Invalid {schema.__name__} payload", details) from exc


class TimeBankFacade:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self.session_factory = session_factory
        self.settings = settings
        # writers share the process-wide registry unless a caller supplies one
        self.locks = locks if locks is not None else get_container().locks

    @classmethod
    def from_container(cls, container: ApplicationContainer | None = None) -> "TimeBankFacade":
        container = container or get_container()
        return cls(container.session_factory, container.settings, container.locks)

    # -- balances ---------------------------------------------------------

    async def get_balance(self, account_id: str) -> BalanceResponse:
        query = _parse(AccountQuery, account_id=account_id)
        async with session_scope(self.session_factory, "get_balance") as session:
            async with unit_of_work(session):
                snapshot = await BalanceService.with_session(session, self.settings.ledger).get_balance(query.account_id)
        return BalanceResponse.model_validate(snapshot)

    async def get_all_balances(self, limit: int = BALANCE_PAGE_SIZE, offset: int = 0) -> BalanceListResponse:
        page = _parse(PageQuery, limit=limit, offset=offset)
        async with session_scope(self.session_factory, "get_all_balances") as session:
            service = BalanceService.with_session(session, self.settings.ledger)
            snapshots, total = await service.list_balances(page.limit, page.offset)
        return BalanceListResponse(
            total=total,
            limit=page.limit,
            offset=page.offset,
            balances=[BalanceResponse.model_validate(item) for item in snapshots],
        )

    # -- claims -----------------------------------------------------------

    async def submit_claim(
        self,
        claimant_id: str,
        category_id: int,
        hours_claimed: Decimal | int | float | str,
        description: str,
        evidence_ref: Optional[str] = None,
    ) -> ClaimResponse:
        request = _parse(
            ClaimSubmitRequest,
            claimant_id=claimant_id,
            category_id=category_id,
            hours_claimed=hours_claimed,
            description=description,
            evidence_ref=evidence_ref,
        )
        async with session_scope(self.session_factory, "submit_claim") as session:
            claim = await self._workflow(session).submit(
                request.claimant_id,
                request.category_id,
                request.hours_claimed,
                request.description,
                request.evidence_ref,
            )
        return ClaimResponse.model_validate(claim)

    async def get_claim(self, claim_id: str) -> ClaimDetailResponse:
        async with session_scope(self.session_factory, "get_claim") as session:
            item = await self._workflow(session).get_claim(claim_id)
        return ClaimDetailResponse.from_domain(item)

    async def get_user_claims(self, claimant_id: str) -> list[ClaimDetailResponse]:
        query = _parse(AccountQuery, account_id=claimant_id)
        async with session_scope(self.session_factory, "get_user_claims") as session:
            items = await self._workflow(session).list_user_claims(query.account_id)
        return [ClaimDetailResponse.from_domain(item) for item in items]

    async def get_pending_claims(self) -> list[ClaimDetailResponse]:
        async with session_scope(self.session_factory, "get_pending_claims") as session:
            items = await self._workflow(session).list_pending()
        return [ClaimDetailResponse.from_domain(item) for item in items]

    async def get_voting_claims(self) -> list[ClaimDetailResponse]:
        async with session_scope(self.session_factory, "get_voting_claims") as session:
            items = await self._workflow(session).list_voting()
        return [ClaimDetailResponse.from_domain(item) for item in items]

    async def approve_claim(self, claim_id: str, approver_id: str) -> ClaimResponse:
        request = _parse(ClaimActionRequest, claim_id=claim_id, approver_id=approver_id)
        async with session_scope(self.session_factory, "approve_claim") as session:
            claim = await self._workflow(session).approve_direct(request.claim_id, request.approver_id)
        return ClaimResponse.model_validate(claim)

    async def reject_claim(self, claim_id: str, approver_id: str, reason: str) -> ClaimResponse:
        request = _parse(ClaimRejectRequest, claim_id=claim_id, approver_id=approver_id, reason=reason)
        async with session_scope(self.session_factory, "reject_claim") as session:
            claim = await self._workflow(session).reject_direct(
                request.claim_id,
                request.approver_id,
                request.reason,
            )
        return ClaimResponse.model_validate(claim)

    async def send_to_voting(self, claim_id: str, approver_id: str) -> ClaimResponse:
        request = _parse(ClaimActionRequest, claim_id=claim_id, approver_id=approver_id)
        async with session_scope(self.session_factory, "send_to_voting") as session:
            claim = await self._workflow(session).send_to_voting(request.claim_id, request.approver_id)
        return ClaimResponse.model_validate(claim)

    async def record_vote(
        self,
        claim_id: str,
        voter_id: str,
        choice: str,
        comment: Optional[str] = None,
    ) -> VoteOutcomeResponse:
        request = _parse(VoteRequest, claim_id=claim_id, voter_id=voter_id, choice=choice, comment=comment)
        async with session_scope(self.session_factory, "record_vote") as session:
            outcome = await self._workflow(session).record_vote(
                request.claim_id,
                request.voter_id,
                request.choice,
                request.comment,
            )
        return VoteOutcomeResponse.model_validate(outcome)

    # -- ledger -----------------------------------------------------------

    async def get_public_ledger(self, limit: int = LEDGER_PAGE_SIZE, offset: int = 0) -> LedgerPageResponse:
        page = _parse(PageQuery, limit=limit, offset=offset)
        async with session_scope(self.session_factory, "get_public_ledger") as session:
            result = await LedgerService.with_session(session, self.settings.ledger).list_all(page.limit, page.offset)
        return LedgerPageResponse.model_validate(result)

    async def get_user_transactions(
        self,
        account_id: str,
        limit: int = LEDGER_PAGE_SIZE,
        offset: int = 0,
    ) -> LedgerPageResponse:
        page = _parse(PageQuery, limit=limit, offset=offset)
        query = _parse(AccountQuery, account_id=account_id)
        async with session_scope(self.session_factory, "get_user_transactions") as session:
            service = LedgerService.with_session(session, self.settings.ledger)
            result = await service.list_for_account(query.account_id, page.limit, page.offset)
        return LedgerPageResponse.model_validate(result)

    # -- administration ---------------------------------------------------

    async def adjust_balance(
        self,
        account_id: str,
        hours: Decimal | int | float | str,
        reason: str,
        admin_id: str,
    ) -> BalanceResponse:
        request = _parse(AdjustBalanceRequest, account_id=account_id, hours=hours, reason=reason, admin_id=admin_id)
        async with session_scope(self.session_factory, "adjust_balance") as session:
            snapshot = await self._adjustments(session).adjust_balance(
                request.account_id,
                request.hours,
                request.reason,
                request.admin_id,
            )
        return BalanceResponse.model_validate(snapshot)

    async def transfer_hours(
        self,
        spender_id: str,
        provider_id: str,
        hours: Decimal | int | float | str,
        title: str,
        request_id: Optional[str] = None,
    ) -> TransferResponse:
        request = _parse(
            TransferRequest,
            spender_id=spender_id,
            provider_id=provider_id,
            hours=hours,
            request_id=request_id,
            title=title,
        )
        async with session_scope(self.session_factory, "transfer_hours") as session:
            result = await self._adjustments(session).transfer_hours(
                request.spender_id,
                request.provider_id,
                request.hours,
                request.request_id,
                request.title,
            )
        return TransferResponse.model_validate(result)

    async def reconcile(self, account_id: str) -> ReconciliationResponse:
        query = _parse(AccountQuery, account_id=account_id)
        async with session_scope(self.session_factory, "reconcile") as session:
            report = await self._adjustments(session).reconcile(query.account_id)
        return ReconciliationResponse.model_validate(report)

    def _workflow(self, session: AsyncSession) -> ClaimWorkflow:
        return ClaimWorkflow.with_session(session, settings=self.settings, locks=self.locks)

    def _adjustments(self, session: AsyncSession) -> AdjustmentService:
        return AdjustmentService.with_session(session, settings=self.settings, locks=self.locks)
