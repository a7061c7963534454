"""Balance domain service.

Holds one mutable balance per account and enforces the configured floor. It
never writes ledger entries: callers pair every credit or debit with exactly
one entry inside the same unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from timebank.core.config import LedgerSettings, get_settings
from timebank.core.hours import HoursLike, from_centihours, parse_hours, to_centihours
from timebank.db.models import Balance as BalanceModel
from timebank.infrastructure.database.repositories.balance_repository import SqlBalanceRepository

from .exceptions import InsufficientBalanceError
from .models import BalanceSnapshot
from .repository import BalanceRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BalanceService:
    repository: BalanceRepository
    floor: Optional[Decimal] = Decimal("0")

    @classmethod
    def with_session(cls, session: AsyncSession, settings: LedgerSettings | None = None) -> "BalanceService":
        ledger = settings or get_settings().ledger
        return cls(SqlBalanceRepository(session), floor=ledger.floor)

    async def get_balance(self, account_id: str) -> BalanceSnapshot:
        model = await self._ensure_balance(account_id)
        return self._to_snapshot(model)

    async def credit(self, account_id: str, hours: HoursLike) -> BalanceSnapshot:
        amount = parse_hours(hours)
        await self._ensure_balance(account_id, for_update=True)
        row = await self.repository.apply_delta(account_id, to_centihours(amount))
        if row is None:
            raise RuntimeError(f"balance row for {account_id} vanished during credit")
        snapshot = BalanceSnapshot(account_id, from_centihours(row[0]), row[1])
        logger.info(
            "Credited %s hours to %s, balance now %s",
            amount,
            account_id,
            snapshot.balance,
            extra={"account_id": account_id},
        )
        return snapshot

    async def debit(self, account_id: str, hours: HoursLike) -> BalanceSnapshot:
        amount = parse_hours(hours)
        await self._ensure_balance(account_id, for_update=True)
        floor_centihours = None if self.floor is None else to_centihours(self.floor)
        row = await self.repository.apply_delta(
            account_id,
            -to_centihours(amount),
            floor_centihours=floor_centihours,
        )
        if row is None:
            current = await self.repository.get_balance(account_id)
            available = from_centihours(current.balance_centihours if current else 0)
            logger.warning(
                "Refused debit of %s hours from %s (available %s)",
                amount,
                account_id,
                available,
                extra={"account_id": account_id, "error_code": "INSUFFICIENT_BALANCE"},
            )
            raise InsufficientBalanceError(account_id, amount, available, self.floor)

        snapshot = BalanceSnapshot(account_id, from_centihours(row[0]), row[1])
        logger.info(
            "Debited %s hours from %s, balance now %s",
            amount,
            account_id,
            snapshot.balance,
            extra={"account_id": account_id},
        )
        return snapshot

    async def has_sufficient_balance(self, account_id: str, hours: HoursLike) -> bool:
        amount = parse_hours(hours)
        if self.floor is None:
            return True
        # read only: a missing row counts as zero and is not created
        model = await self.repository.get_balance(account_id)
        current = from_centihours(model.balance_centihours if model else 0)
        return current - amount >= self.floor

    async def list_balances(self, limit: int = 100, offset: int = 0) -> tuple[list[BalanceSnapshot], int]:
        rows = await self.repository.list_balances(limit, offset)
        total = await self.repository.count_balances()
        return [self._to_snapshot(row) for row in rows], total

    async def _ensure_balance(self, account_id: str, *, for_update: bool = False) -> BalanceModel:
        model = await self.repository.get_balance(account_id, for_update=for_update)
        if model is None:
            model = await self.repository.create_balance(account_id)
            logger.info("Opened balance for %s", account_id, extra={"account_id": account_id})
        return model

    @staticmethod
    def _to_snapshot(model: BalanceModel) -> BalanceSnapshot:
        return BalanceSnapshot(
            account_id=model.account_id,
            balance=from_centihours(model.balance_centihours),
            updated_at=model.updated_at,
        )
