"""Balance domain exports"""

from .exceptions import InsufficientBalanceError
from .models import BalanceSnapshot
from .service import BalanceService

__all__ = [
    "BalanceSnapshot",
    "BalanceService",
    "InsufficientBalanceError",
]
