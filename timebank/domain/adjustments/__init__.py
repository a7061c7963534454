"""Adjustment domain exports"""

from .service import AdjustmentService, TransferResult

__all__ = ["AdjustmentService", "TransferResult"]
