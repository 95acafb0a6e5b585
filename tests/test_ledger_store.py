"""Tests for the ledger store: ids, guarded updates, atomicity, append-only enforcement."""

import os
import shutil
import sys
import tempfile
import unittest
from datetime import date, datetime, timezone
from pathlib import Path

os.environ.setdefault("LOG_TO_FILE", "false")
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text, update

from batch_ledger.db.models import AuditLog
from batch_ledger.db.store import LedgerStore
from batch_ledger.exceptions import ImmutabilityViolationError, StorageFault
from batch_ledger.models.domain import AuditAction, BatchStatus, QualityGrade

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def _insert(tx, name="Amoxicillin", quantity=100, status=BatchStatus.ACTIVE):
    return tx.insert_batch(
        name=name,
        manufacturing_date=date(2025, 6, 1),
        expiry_date=date(2027, 6, 1),
        quantity=quantity,
        location="Vault A",
        quality_grade=QualityGrade.A_PLUS,
        production_line="Line 1",
        status=status,
    )


class StoreTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = LedgerStore(f"sqlite:///{self.tmpdir}/ledger.db", clock=lambda: FIXED_NOW)
        self.store.init_schema()

    def tearDown(self):
        self.store.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)


class TestLedgerStorePrimitives(StoreTestCase):
    def test_insert_assigns_increasing_ids(self):
        with self.store.transaction() as tx:
            first = _insert(tx, "A")
            second = _insert(tx, "B")
        with self.store.transaction() as tx:
            third = _insert(tx, "C")
        self.assertLess(first, second)
        self.assertLess(second, third)

    def test_get_all_batches_newest_first(self):
        with self.store.transaction() as tx:
            ids = [_insert(tx, name) for name in ("A", "B", "C")]
        with self.store.snapshot() as snap:
            listed = [b.id for b in snap.get_all_batches()]
        self.assertEqual(listed, sorted(ids, reverse=True))

    def test_guarded_update_only_matches_expected_status(self):
        with self.store.transaction() as tx:
            batch_id = _insert(tx)
        with self.store.transaction() as tx:
            self.assertEqual(
                tx.update_batch_status(batch_id, BatchStatus.DISPATCHED, expected_status=BatchStatus.ACTIVE), 1
            )
        with self.store.transaction() as tx:
            self.assertEqual(
                tx.update_batch_status(batch_id, BatchStatus.DISPATCHED, expected_status=BatchStatus.ACTIVE), 0
            )
            self.assertEqual(tx.update_batch_status(9999, BatchStatus.DISPATCHED), 0)
        with self.store.snapshot() as snap:
            self.assertIs(snap.get_batch(batch_id).status, BatchStatus.DISPATCHED)

    def test_bulk_update_by_name_and_status(self):
        with self.store.transaction() as tx:
            a1 = _insert(tx, "X")
            a2 = _insert(tx, "X")
            other = _insert(tx, "Y")
            done = _insert(tx, "X", status=BatchStatus.DISPATCHED)
        with self.store.transaction() as tx:
            affected = tx.bulk_update_status_by_name_and_status(
                "X", BatchStatus.ACTIVE, BatchStatus.RECALLED, "Quarantine"
            )
        self.assertEqual(affected, 2)
        with self.store.snapshot() as snap:
            for batch_id in (a1, a2):
                row = snap.get_batch(batch_id)
                self.assertIs(row.status, BatchStatus.RECALLED)
                self.assertEqual(row.location, "Quarantine")
            self.assertIs(snap.get_batch(other).status, BatchStatus.ACTIVE)
            self.assertIs(snap.get_batch(done).status, BatchStatus.DISPATCHED)
            self.assertEqual(snap.get_batch(done).location, "Vault A")

    def test_aggregate_active_empty_and_filled(self):
        with self.store.snapshot() as snap:
            empty = snap.aggregate_active()
        self.assertEqual((empty.count, empty.total_quantity), (0, 0))
        with self.store.transaction() as tx:
            _insert(tx, quantity=40)
            _insert(tx, quantity=60)
            _insert(tx, quantity=500, status=BatchStatus.RECALLED)
        with self.store.snapshot() as snap:
            agg = snap.aggregate_active()
        self.assertEqual((agg.count, agg.total_quantity), (2, 100))

    def test_audit_entries_stamped_by_store_clock(self):
        with self.store.transaction() as tx:
            batch_id = _insert(tx)
            log_id = tx.insert_audit_entry(AuditAction.INSERT, batch_id, "New batch Amoxicillin added.")
        with self.store.snapshot() as snap:
            entries = snap.list_audit_entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].log_id, log_id)
        self.assertEqual(entries[0].timestamp.replace(tzinfo=timezone.utc), FIXED_NOW)

    def test_list_audit_entries_filters(self):
        with self.store.transaction() as tx:
            b1 = _insert(tx, "A")
            b2 = _insert(tx, "B")
            tx.insert_audit_entry(AuditAction.INSERT, b1, "a")
            tx.insert_audit_entry(AuditAction.INSERT, b2, "b")
            tx.insert_audit_entry(AuditAction.RECALL_BULK, None, "r")
        with self.store.snapshot() as snap:
            self.assertEqual([e.details for e in snap.list_audit_entries(batch_id=b2)], ["b"])
            self.assertEqual(len(snap.list_audit_entries(action=AuditAction.INSERT)), 2)
            self.assertEqual(len(snap.list_audit_entries(limit=1)), 1)
            self.assertEqual(snap.count_audit_entries(), 3)
            self.assertEqual(snap.count_audit_entries(batch_id=b1), 1)

    def test_run_in_transaction_returns_result(self):
        batch_id = self.store.run_in_transaction(lambda tx: _insert(tx))
        with self.store.snapshot() as snap:
            self.assertIsNotNone(snap.get_batch(batch_id))


class TestLedgerStoreAtomicity(StoreTestCase):
    def test_exception_rolls_back_everything(self):
        with self.assertRaises(RuntimeError):
            with self.store.transaction() as tx:
                batch_id = _insert(tx)
                tx.insert_audit_entry(AuditAction.INSERT, batch_id, "New batch added.")
                raise RuntimeError("abort")
        with self.store.snapshot() as snap:
            self.assertEqual(snap.count_batches(), 0)
            self.assertEqual(snap.count_audit_entries(), 0)

    def test_cancellation_rolls_back(self):
        with self.assertRaises(KeyboardInterrupt):
            with self.store.transaction() as tx:
                _insert(tx)
                raise KeyboardInterrupt
        with self.store.snapshot() as snap:
            self.assertEqual(snap.count_batches(), 0)

    def test_database_error_becomes_storage_fault(self):
        with self.assertRaises(StorageFault):
            with self.store.transaction() as tx:
                _insert(tx, "ok")
                _insert(tx, name=None)
        with self.store.snapshot() as snap:
            self.assertEqual(snap.count_batches(), 0)

    def test_store_usable_after_fault(self):
        with self.assertRaises(StorageFault):
            with self.store.transaction() as tx:
                _insert(tx, name=None)
        with self.store.transaction() as tx:
            _insert(tx)
        with self.store.snapshot() as snap:
            self.assertEqual(snap.count_batches(), 1)


class TestAppendOnly(StoreTestCase):
    def setUp(self):
        super().setUp()
        with self.store.transaction() as tx:
            self.batch_id = _insert(tx)
            tx.insert_audit_entry(AuditAction.INSERT, self.batch_id, "New batch Amoxicillin added.")

    def _assert_audit_unchanged(self):
        with self.store.snapshot() as snap:
            entries = snap.list_audit_entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].details, "New batch Amoxicillin added.")

    def test_orm_edit_of_audit_entry_rejected(self):
        with self.assertRaises(ImmutabilityViolationError):
            with self.store.transaction() as tx:
                entry = tx.list_audit_entries()[0]
                entry.details = "rewritten"
        self._assert_audit_unchanged()

    def test_orm_bulk_update_of_audit_rejected(self):
        with self.assertRaises(ImmutabilityViolationError):
            with self.store.transaction() as tx:
                tx.session.execute(update(AuditLog).values(details="rewritten"))
        self._assert_audit_unchanged()

    def test_raw_sql_update_of_audit_rejected(self):
        with self.assertRaises(StorageFault):
            with self.store.transaction() as tx:
                tx.session.execute(text("UPDATE audit_logs SET details = 'rewritten'"))
        self._assert_audit_unchanged()

    def test_raw_sql_delete_rejected(self):
        with self.assertRaises(StorageFault):
            with self.store.transaction() as tx:
                tx.session.execute(text("DELETE FROM audit_logs"))
        with self.assertRaises(StorageFault):
            with self.store.transaction() as tx:
                tx.session.execute(text("DELETE FROM batches"))
        self._assert_audit_unchanged()
        with self.store.snapshot() as snap:
            self.assertEqual(snap.count_batches(), 1)

    def test_batch_identity_fields_frozen(self):
        with self.assertRaises(ImmutabilityViolationError):
            with self.store.transaction() as tx:
                batch = tx.get_batch(self.batch_id)
                batch.quantity = 1
        with self.store.snapshot() as snap:
            self.assertEqual(snap.get_batch(self.batch_id).quantity, 100)


class TestInMemoryStore(unittest.TestCase):
    def test_memory_store_shares_one_database(self):
        store = LedgerStore("sqlite:///:memory:")
        try:
            store.init_schema()
            with store.transaction() as tx:
                batch_id = _insert(tx)
            with store.snapshot() as snap:
                self.assertEqual(snap.get_batch(batch_id).name, "Amoxicillin")
        finally:
            store.dispose()


if __name__ == "__main__":
    unittest.main()
