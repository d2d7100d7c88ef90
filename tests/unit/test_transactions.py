"""
Unit tests for transactions/manager.py and transactions/schemas.py
"""

import pytest

from rackplan.transactions.manager import TransactionManager
from rackplan.transactions.schemas import Transaction, TransactionStatus


class TestTransactionLifecycle:
    """Begin / commit / rollback."""

    def test_begin_snapshots_site(self, small_site):
        manager = TransactionManager()
        tx = manager.begin(small_site, source="test")
        assert tx.status == TransactionStatus.ACTIVE
        assert tx.site_id == "site-t"
        assert tx.initial_snapshot == small_site.to_dict()
        assert manager.active_transaction is tx

    def test_no_nesting(self, small_site):
        manager = TransactionManager()
        manager.begin(small_site)
        with pytest.raises(RuntimeError):
            manager.begin(small_site)

    def test_commit(self, small_site):
        manager = TransactionManager()
        tx = manager.begin(small_site)
        assert manager.commit(tx.transaction_id)
        assert tx.status == TransactionStatus.COMMITTED
        assert tx.completed_at is not None
        assert manager.active_transaction is None
        assert manager.get_history() == [tx]

    def test_rollback_records_reason(self, small_site):
        manager = TransactionManager()
        tx = manager.begin(small_site)
        assert manager.rollback(reason="overlap")
        assert tx.status == TransactionStatus.ROLLED_BACK
        assert tx.failure_reason == "overlap"

    def test_commit_unknown_id(self, small_site):
        manager = TransactionManager()
        manager.begin(small_site)
        assert not manager.commit("nope")
        assert manager.active_transaction is not None

    def test_commit_without_transaction(self):
        assert not TransactionManager().commit()

    def test_record_change_requires_transaction(self):
        assert TransactionManager().record_change("a", 1, 2) is None

    def test_record_change(self, small_site):
        manager = TransactionManager()
        tx = manager.begin(small_site)
        change = manager.record_change("equipment.eq-a1.location", {"rackUnit": 1}, {"rackUnit": 5}, source="t")
        assert change.transaction_id == tx.transaction_id
        assert tx.changes == [change]

    def test_history_trimmed(self, small_site):
        manager = TransactionManager(max_history=3)
        for _ in range(5):
            manager.commit(manager.begin(small_site).transaction_id)
        assert len(manager.get_history()) == 3
        assert len(manager.history_dicts(limit=2)) == 2


class TestTransactionContext:
    """The ``transaction`` context manager."""

    def test_commits_on_success(self, small_site):
        manager = TransactionManager()
        with manager.transaction(small_site) as tx:
            manager.record_change("x", None, 1)
        assert tx.status == TransactionStatus.COMMITTED
        assert len(tx.changes) == 1

    def test_rolls_back_and_reraises(self, small_site):
        manager = TransactionManager()
        with pytest.raises(ValueError):
            with manager.transaction(small_site) as tx:
                raise ValueError("bad batch")
        assert tx.status == TransactionStatus.ROLLED_BACK
        assert tx.failure_reason == "bad batch"
        assert manager.active_transaction is None


class TestTransactionSchema:
    """Serialization."""

    def test_to_dict(self):
        tx = Transaction(site_id="site-1")
        data = tx.to_dict()
        assert data["status"] == "pending"
        assert data["site_id"] == "site-1"
        assert data["num_changes"] == 0
        assert data["completed_at"] is None
        assert not tx.is_active
