"""
transactions/ - Atomic design change batches.
"""

from .schemas import TransactionStatus, StateChange, Transaction
from .manager import TransactionManager

__all__ = [
    "TransactionStatus",
    "StateChange",
    "Transaction",
    "TransactionManager",
]
