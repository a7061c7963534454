"""SQLAlchemy-backed repository implementations."""

from .balance_repository import SqlBalanceRepository
from .category_repository import SqlCategoryRepository
from .claim_repository import SqlClaimRepository
from .transaction_repository import SqlTransactionRepository
from .vote_repository import SqlVoteRepository

__all__ = [
    "SqlBalanceRepository",
    "SqlCategoryRepository",
    "SqlClaimRepository",
    "SqlTransactionRepository",
    "SqlVoteRepository",
]
