"""Administrative balance corrections and provider payments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from timebank.core.config import Settings, get_settings
from timebank.core.errors import InvalidInputError
from timebank.core.hours import HoursLike, parse_hours
from timebank.core.locks import KeyedLocks, account_key
from timebank.domain.balances.models import BalanceSnapshot
from timebank.domain.balances.service import BalanceService
from timebank.domain.ledger.models import LedgerEntry, ReconciliationReport
from timebank.domain.ledger.service import LedgerService
from timebank.infrastructure.database.session import unit_of_work

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransferResult:
    spender: BalanceSnapshot
    provider: BalanceSnapshot
    entry: LedgerEntry


@dataclass(slots=True)
class AdjustmentService:
    session: AsyncSession
    balances: BalanceService
    ledger: LedgerService
    locks: KeyedLocks

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        settings: Settings | None = None,
        locks: KeyedLocks | None = None,
    ) -> "AdjustmentService":
        settings = settings or get_settings()
        if locks is None:
            from timebank.core.container import get_container

            locks = get_container().locks
        return cls(
            session=session,
            balances=BalanceService.with_session(session, settings.ledger),
            ledger=LedgerService.with_session(session, settings.ledger),
            locks=locks,
        )

    async def adjust_balance(
        self,
        account_id: str,
        signed_hours: HoursLike,
        reason: str,
        admin_id: str,
    ) -> BalanceSnapshot:
        """Credit (positive) or debit (negative) an account outside the claim flow."""
        hours = parse_hours(signed_hours, allow_negative=True)

        async with self.locks.hold(account_key(account_id)):
            async with unit_of_work(self.session):
                if hours > 0:
                    snapshot = await self.balances.credit(account_id, hours)
                else:
                    snapshot = await self.balances.debit(account_id, -hours)
                entry = await self.ledger.record_adjustment(account_id, hours, reason, admin_id)

        logger.info(
            "Admin %s adjusted %s by %s hours (entry #%s): %s",
            admin_id,
            account_id,
            hours,
            entry.id,
            reason,
            extra={"account_id": account_id, "entry_id": entry.id},
        )
        return snapshot

    async def transfer_hours(
        self,
        spender_id: str,
        provider_id: str,
        hours: HoursLike,
        request_id: Optional[str],
        title: str,
    ) -> TransferResult:
        """Pay a provider for a fulfilled request: one ``spent`` entry, both balances move."""
        amount = parse_hours(hours)
        if spender_id == provider_id:
            raise InvalidInputError("Cannot transfer hours to the same account")

        async with self.locks.hold(account_key(spender_id), account_key(provider_id)):
            async with unit_of_work(self.session):
                spender = await self.balances.debit(spender_id, amount)
                provider = await self.balances.credit(provider_id, amount)
                entry = await self.ledger.record_spending(
                    spender_id=spender_id,
                    provider_id=provider_id,
                    hours=amount,
                    request_id=request_id,
                    title=title,
                )

        logger.info(
            "Transferred %s hours from %s to %s (entry #%s)",
            amount,
            spender_id,
            provider_id,
            entry.id,
            extra={"account_id": spender_id, "entry_id": entry.id},
        )
        return TransferResult(spender=spender, provider=provider, entry=entry)

    async def reconcile(self, account_id: str) -> ReconciliationReport:
        """Compare the stored balance with the net of the account's ledger entries."""
        async with self.locks.hold(account_key(account_id)):
            async with unit_of_work(self.session):
                snapshot = await self.balances.get_balance(account_id)
                net = await self.ledger.net_hours(account_id)

        report = ReconciliationReport(account_id=account_id, balance=snapshot.balance, ledger_net=net)
        if not report.consistent:
            logger.error(
                "Balance of %s (%s) disagrees with ledger net %s",
                account_id,
                report.balance,
                report.ledger_net,
                extra={"account_id": account_id, "error_code": "RECONCILIATION_MISMATCH"},
            )
        return report
