"""Repository protocol for balance operations."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from timebank.db.models import Balance as BalanceModel


class BalanceRepository(Protocol):
    async def get_balance(self, account_id: str, *, for_update: bool = False) -> BalanceModel | None:
        ...

    async def create_balance(self, account_id: str) -> BalanceModel:
        ...

    async def apply_delta(
        self,
        account_id: str,
        delta_centihours: int,
        *,
        floor_centihours: int | None = None,
    ) -> tuple[int, datetime] | None:
        ...

    async def list_balances(self, limit: int, offset: int) -> Sequence[BalanceModel]:
        ...

    async def count_balances(self) -> int:
        ...
