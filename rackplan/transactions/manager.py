"""
transactions/manager.py - Transaction management

Wraps a design change batch. The manager snapshots the site a batch starts
from, collects the changes the batch records and keeps an audit history.
Sites are immutable from the batch's point of view, so rolling back means
handing the caller the snapshot back.
"""

from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional
import logging
import uuid

from rackplan.core.models import Site

from .schemas import StateChange, Transaction, TransactionStatus


class TransactionManager:
    """
    Manages transactions for atomic design change batches.

    Transactions do not nest; a batch always covers one site.
    """

    def __init__(self, max_history: int = 100):
        self.logger = logging.getLogger("rackplan.transactions")

        self._active: Optional[Transaction] = None

        # Completed transactions (for audit)
        self._history: List[Transaction] = []
        self._max_history = max_history

    @property
    def active_transaction(self) -> Optional[Transaction]:
        """Get current active transaction."""
        return self._active

    def begin(
        self,
        site: Site,
        source: str = "",
        description: str = "",
    ) -> Transaction:
        """Begin a new transaction over ``site``."""
        if self._active is not None:
            raise RuntimeError(
                f"Transaction {self._active.transaction_id} is already active"
            )

        tx = Transaction(
            transaction_id=str(uuid.uuid4())[:8],
            status=TransactionStatus.ACTIVE,
            site_id=site.id,
            initial_snapshot=site.to_dict(),
            source=source,
            description=description,
        )
        self._active = tx

        self.logger.info(f"Transaction {tx.transaction_id} started for site {site.id}")

        return tx

    def commit(self, transaction_id: str = None) -> bool:
        """Commit the active transaction."""
        tx = self._resolve(transaction_id, "commit")
        if tx is None:
            return False

        tx.status = TransactionStatus.COMMITTED
        tx.completed_at = datetime.now(timezone.utc)
        self._finish(tx)

        self.logger.info(
            f"Transaction {tx.transaction_id} committed ({len(tx.changes)} changes)"
        )

        return True

    def rollback(self, transaction_id: str = None, reason: str = None) -> bool:
        """Roll back the active transaction."""
        tx = self._resolve(transaction_id, "rollback")
        if tx is None:
            return False

        tx.status = TransactionStatus.ROLLED_BACK
        tx.completed_at = datetime.now(timezone.utc)
        tx.failure_reason = reason
        self._finish(tx)

        self.logger.info(f"Transaction {tx.transaction_id} rolled back")

        return True

    def record_change(
        self,
        path: str,
        old_value: Any,
        new_value: Any,
        source: str = "",
    ) -> Optional[StateChange]:
        """Record a state change in active transaction."""
        tx = self._active
        if not tx:
            return None

        change = StateChange(
            change_id=str(uuid.uuid4())[:8],
            transaction_id=tx.transaction_id,
            path=path,
            old_value=old_value,
            new_value=new_value,
            source=source,
        )

        tx.changes.append(change)

        return change

    @contextmanager
    def transaction(
        self,
        site: Site,
        source: str = "",
        description: str = "",
    ) -> Iterator[Transaction]:
        """Context manager for transactions; any exception rolls back and re-raises."""
        tx = self.begin(site, source=source, description=description)
        try:
            yield tx
        except Exception as e:
            if tx.is_active:
                self.rollback(tx.transaction_id, reason=str(e))
            raise
        else:
            if tx.is_active:
                self.commit(tx.transaction_id)

    def _resolve(self, transaction_id: Optional[str], action: str) -> Optional[Transaction]:
        tx = self._active
        if tx is None or (transaction_id and tx.transaction_id != transaction_id):
            self.logger.error(f"Cannot {action}: transaction {transaction_id} not found")
            return None
        if tx.status != TransactionStatus.ACTIVE:
            self.logger.error(f"Cannot {action}: transaction {tx.transaction_id} is {tx.status.value}")
            return None
        return tx

    def _finish(self, tx: Transaction) -> None:
        self._active = None
        self._history.append(tx)

        # Trim history
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def get_history(self, limit: int = 20) -> List[Transaction]:
        """Get transaction history."""
        return self._history[-limit:]

    def history_dicts(self, limit: int = 20) -> List[Dict[str, Any]]:
        return [tx.to_dict() for tx in self.get_history(limit)]
