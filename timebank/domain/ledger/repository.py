"""Repository protocol for the transaction log."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from timebank.db.models import Transaction as TransactionModel


class TransactionRepository(Protocol):
    async def add_transaction(
        self,
        *,
        kind: str,
        hours_centihours: int,
        description: str,
        from_account_id: str | None,
        to_account_id: str | None,
        reference_id: str | None,
        reference_type: str | None,
        created_at: datetime,
    ) -> TransactionModel:
        ...

    async def list_transactions(self, limit: int, offset: int) -> Sequence[TransactionModel]:
        ...

    async def count_transactions(self) -> int:
        ...

    async def list_for_account(self, account_id: str, limit: int, offset: int) -> Sequence[TransactionModel]:
        ...

    async def count_for_account(self, account_id: str) -> int:
        ...

    async def sum_into(self, account_id: str) -> int:
        ...

    async def sum_out_of(self, account_id: str) -> int:
        ...

    async def list_for_reference(self, reference_type: str, reference_id: str) -> Sequence[TransactionModel]:
        ...
