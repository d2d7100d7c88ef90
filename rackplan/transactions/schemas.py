"""
transactions/schemas.py - Transaction data structures

Records for design change batches: the batch itself and each relocation
it applies.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionStatus(Enum):
    """Transaction status."""
    PENDING = "pending"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class StateChange:
    """Record of a single state change."""

    change_id: str = ""
    transaction_id: str = ""

    path: str = ""
    old_value: Any = None
    new_value: Any = None

    source: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "change_id": self.change_id,
            "transaction_id": self.transaction_id,
            "path": self.path,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "source": self.source,
        }


@dataclass
class Transaction:
    """Complete transaction record."""

    transaction_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    status: TransactionStatus = TransactionStatus.PENDING

    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    # Site the batch started from
    site_id: str = ""
    initial_snapshot: Dict[str, Any] = field(default_factory=dict)

    changes: List[StateChange] = field(default_factory=list)

    # Metadata
    source: str = ""
    description: str = ""
    failure_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == TransactionStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "status": self.status.value,
            "site_id": self.site_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "num_changes": len(self.changes),
            "changes": [c.to_dict() for c in self.changes],
            "source": self.source,
            "failure_reason": self.failure_reason,
        }
