"""Transaction log domain service.

The log is append-only: entries are validated and stored, never updated or
removed, and form the audit trail every balance must reconcile against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from timebank.core.config import LedgerSettings, get_settings
from timebank.core.hours import HoursLike, from_centihours, parse_hours, to_centihours
from timebank.db.models import Transaction as TransactionModel
from timebank.domain.common.repository import utcnow
from timebank.infrastructure.database.repositories.transaction_repository import SqlTransactionRepository

from .exceptions import InvalidLedgerEntryError
from .models import LedgerEntry, LedgerEntryKind, LedgerPage, NewLedgerEntry
from .repository import TransactionRepository

logger = logging.getLogger(__name__)

EARNING_REFERENCE = "earning"
REQUEST_REFERENCE = "request"


@dataclass(slots=True)
class LedgerService:
    repository: TransactionRepository
    description_max_length: int = 500

    @classmethod
    def with_session(cls, session: AsyncSession, settings: LedgerSettings | None = None) -> "LedgerService":
        ledger = settings or get_settings().ledger
        return cls(SqlTransactionRepository(session), description_max_length=ledger.description_max_length)

    async def append(self, entry: NewLedgerEntry) -> LedgerEntry:
        hours = parse_hours(entry.hours)
        self._validate(entry)
        model = await self.repository.add_transaction(
            kind=entry.kind.value,
            hours_centihours=to_centihours(hours),
            description=entry.description,
            from_account_id=entry.from_account_id,
            to_account_id=entry.to_account_id,
            reference_id=entry.reference_id,
            reference_type=entry.reference_type,
            created_at=utcnow(),
        )
        recorded = self._to_entry(model)
        logger.info(
            "Recorded %s entry #%s for %s hours",
            recorded.kind.value,
            recorded.id,
            recorded.hours,
            extra={"entry_id": recorded.id},
        )
        return recorded

    async def record_earning(
        self,
        *,
        claim_id: str,
        claimant_id: str,
        hours: HoursLike,
        description: str,
    ) -> LedgerEntry:
        return await self.append(
            NewLedgerEntry(
                kind=LedgerEntryKind.EARNED,
                hours=parse_hours(hours),
                description=self._system_description("Earned: ", description, 450),
                to_account_id=claimant_id,
                reference_id=claim_id,
                reference_type=EARNING_REFERENCE,
            )
        )

    async def record_spending(
        self,
        *,
        spender_id: str,
        provider_id: str,
        hours: HoursLike,
        request_id: Optional[str],
        title: str,
    ) -> LedgerEntry:
        return await self.append(
            NewLedgerEntry(
                kind=LedgerEntryKind.SPENT,
                hours=parse_hours(hours),
                description=self._system_description("Request: ", title, 450),
                from_account_id=spender_id,
                to_account_id=provider_id,
                reference_id=request_id,
                reference_type=REQUEST_REFERENCE if request_id is not None else None,
            )
        )

    async def record_adjustment(
        self,
        account_id: str,
        signed_hours: HoursLike,
        reason: str,
        admin_id: str,
    ) -> LedgerEntry:
        hours = parse_hours(signed_hours, allow_negative=True)
        credit = hours > 0
        return await self.append(
            NewLedgerEntry(
                kind=LedgerEntryKind.ADJUSTED,
                hours=abs(hours),
                description=self._system_description(f"Admin adjustment by {admin_id}: ", reason, 400),
                from_account_id=None if credit else account_id,
                to_account_id=account_id if credit else None,
            )
        )

    async def list_all(self, limit: int = 50, offset: int = 0) -> LedgerPage:
        rows = await self.repository.list_transactions(limit, offset)
        total = await self.repository.count_transactions()
        return LedgerPage(total=total, limit=limit, offset=offset, entries=[self._to_entry(row) for row in rows])

    async def list_for_account(self, account_id: str, limit: int = 50, offset: int = 0) -> LedgerPage:
        rows = await self.repository.list_for_account(account_id, limit, offset)
        total = await self.repository.count_for_account(account_id)
        return LedgerPage(total=total, limit=limit, offset=offset, entries=[self._to_entry(row) for row in rows])

    async def entries_for_claim(self, claim_id: str) -> list[LedgerEntry]:
        rows = await self.repository.list_for_reference(EARNING_REFERENCE, claim_id)
        return [self._to_entry(row) for row in rows]

    async def net_hours(self, account_id: str) -> Decimal:
        """Hours into the account minus hours out of it, over the whole log."""
        inflow = await self.repository.sum_into(account_id)
        outflow = await self.repository.sum_out_of(account_id)
        return from_centihours(inflow - outflow)

    def _system_description(self, prefix: str, text: str, text_limit: int) -> str:
        return (prefix + (text or "")[:text_limit])[: self.description_max_length]

    def _validate(self, entry: NewLedgerEntry) -> None:
        source, destination = entry.from_account_id, entry.to_account_id
        if entry.kind is LedgerEntryKind.EARNED:
            if source is not None or destination is None:
                raise InvalidLedgerEntryError("earned entries need a destination and no source")
        elif entry.kind is LedgerEntryKind.ADJUSTED:
            if (source is None) == (destination is None):
                raise InvalidLedgerEntryError("adjusted entries need exactly one of source or destination")
        elif entry.kind is LedgerEntryKind.SPENT:
            if source is None or destination is None:
                raise InvalidLedgerEntryError("spent entries need both a source and a destination")
            if source == destination:
                raise InvalidLedgerEntryError("spent entries cannot move hours to the same account")

        if entry.description is None or len(entry.description) > self.description_max_length:
            raise InvalidLedgerEntryError(
                f"description must be at most {self.description_max_length} characters"
            )

    @staticmethod
    def _to_entry(model: TransactionModel) -> LedgerEntry:
        return LedgerEntry(
            id=model.id,
            kind=LedgerEntryKind(model.kind),
            hours=from_centihours(model.hours_centihours),
            description=model.description,
            from_account_id=model.from_account_id,
            to_account_id=model.to_account_id,
            reference_id=model.reference_id,
            reference_type=model.reference_type,
            created_at=model.created_at,
        )
