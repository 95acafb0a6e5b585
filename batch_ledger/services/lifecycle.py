"""Lifecycle engine: batch business rules, each mutation committed together with its audit entry."""

from datetime import date, datetime
from typing import Any, Optional

from batch_ledger.config import QUARANTINE_LOCATION
from batch_ledger.db.store import LedgerStore
from batch_ledger.exceptions import NotFoundError, ValidationError
from batch_ledger.models.domain import (
    AuditAction,
    BatchEvent,
    BatchStatus,
    derive_quality_grade,
    next_status,
    source_status,
)
from batch_ledger.models.outputs import (
    AddBatchResult,
    AuditEntryRecord,
    BatchRecord,
    DispatchResult,
    RecallResult,
    SystemValidationReport,
)
from batch_ledger.utils.hashing import hash_payload
from batch_ledger.utils.logger import get_logger

logger = get_logger("batch_ledger.services.lifecycle")

# Largest value an SQLite INTEGER column holds.
MAX_STORED_INTEGER = 2**63 - 1


def _storable_id(value: int) -> bool:
    return 0 < value <= MAX_STORED_INTEGER


def _parse_date(value: Any) -> Optional[date]:
    """Accept a date, an ISO date string or a full ISO timestamp (taken at its date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    s = value.strip()
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        return None


def _parse_quantity(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _checksum_row(batch) -> dict[str, Any]:
    return {
        "id": batch.id,
        "name": batch.name,
        "mfg": batch.manufacturing_date,
        "exp": batch.expiry_date,
        "quantity": batch.quantity,
        "location": batch.location,
        "quality_grade": batch.quality_grade,
        "line": batch.production_line,
    }


class LifecycleEngine:
    """Owns the batch state machine. Consumes the ledger store exclusively."""

    def __init__(self, store: LedgerStore, quarantine_location: str = QUARANTINE_LOCATION):
        self.store = store
        self.quarantine_location = quarantine_location

    def add_batch(
        self,
        name: Any,
        manufacturing_date: Any,
        expiry_date: Any,
        quantity: Any,
        location: Optional[str] = None,
        production_line: Optional[str] = None,
    ) -> AddBatchResult:
        """Validate and create a batch in ACTIVE, with its INSERT audit entry.

        Raises ValidationError listing every violated rule; nothing is written then.
        """
        clean_name = name.strip() if isinstance(name, str) else ""
        mfg = _parse_date(manufacturing_date)
        exp = _parse_date(expiry_date)
        qty = _parse_quantity(quantity)

        violations: list[str] = []
        if not clean_name:
            violations.append("name is required")
        if mfg is None:
            violations.append("invalid manufacturing date")
        if exp is None:
            violations.append("invalid expiry date")
        if mfg is not None and exp is not None and exp <= mfg:
            violations.append("invalid date range")
        if qty is None or qty <= 0 or qty > MAX_STORED_INTEGER:
            violations.append("invalid quantity")
        if violations:
            logger.warning("lifecycle.add_batch.invalid", name=clean_name, violations=violations)
            raise ValidationError(violations)

        status = next_status(None, BatchEvent.CREATE)
        grade = derive_quality_grade(exp, self.store.now().date())
        with self.store.transaction() as tx:
            batch_id = tx.insert_batch(
                name=clean_name,
                manufacturing_date=mfg,
                expiry_date=exp,
                quantity=qty,
                location=location,
                quality_grade=grade,
                production_line=production_line,
                status=status,
            )
            tx.insert_audit_entry(AuditAction.INSERT, batch_id, f"New batch {clean_name} added.")

        logger.info("lifecycle.add_batch.ok", batch_id=batch_id, name=clean_name, quality_grade=grade.value)
        return AddBatchResult(id=batch_id, status=status, quality_grade=grade)

    def dispatch_batch(self, batch_id: int) -> DispatchResult:
        """Release an ACTIVE batch for distribution.

        The ACTIVE guard and the write are one UPDATE statement. Raises
        NotFoundError when the id is unknown or the batch is no longer ACTIVE.
        """
        if not _storable_id(batch_id):
            logger.warning("lifecycle.dispatch.not_eligible", batch_id=batch_id, current_status=None)
            raise NotFoundError(batch_id)
        required = source_status(BatchEvent.DISPATCH)
        target = next_status(required, BatchEvent.DISPATCH)
        with self.store.transaction() as tx:
            affected = tx.update_batch_status(batch_id, target, expected_status=required)
            if affected == 0:
                existing = tx.get_batch(batch_id)
                current = existing.status.value if existing is not None else None
                logger.warning("lifecycle.dispatch.not_eligible", batch_id=batch_id, current_status=current)
                raise NotFoundError(batch_id, current)
            tx.insert_audit_entry(AuditAction.DISPATCH, batch_id, f"Batch #{batch_id} released for distribution.")

        logger.info("lifecycle.dispatch.ok", batch_id=batch_id)
        return DispatchResult(message=f"Batch #{batch_id} dispatched successfully.")

    def process_recall(self, drug_name: str) -> RecallResult:
        """Recall every ACTIVE batch named drug_name into quarantine.

        Always appends one RECALL_BULK entry, also when nothing matched.
        """
        required = source_status(BatchEvent.RECALL)
        target = next_status(required, BatchEvent.RECALL)
        with self.store.transaction() as tx:
            affected = tx.bulk_update_status_by_name_and_status(
                drug_name, required, target, self.quarantine_location
            )
            tx.insert_audit_entry(
                AuditAction.RECALL_BULK,
                None,
                f"Bulk recall executed for drug: {drug_name}. Affected: {affected}",
            )

        logger.info("lifecycle.recall.ok", drug_name=drug_name, affected=affected)
        return RecallResult(
            message=f"Recall processed: {affected} batches flagged.",
            affected_count=affected,
        )

    def validate_system(self) -> SystemValidationReport:
        """Count and sum ACTIVE batches and hash them, all from one snapshot."""
        with self.store.snapshot() as snap:
            aggregate = snap.aggregate_active()
            active = snap.get_batches_by_status(BatchStatus.ACTIVE)
            checksum = hash_payload([_checksum_row(b) for b in active])

        logger.debug(
            "lifecycle.validate.ok",
            active_batches=aggregate.count,
            total_units=aggregate.total_quantity,
        )
        return SystemValidationReport(
            active_batches=aggregate.count,
            total_units=aggregate.total_quantity,
            integrity_checksum=checksum,
        )

    def list_batches(self) -> list[BatchRecord]:
        """All batches, newest first."""
        with self.store.snapshot() as snap:
            return [BatchRecord.model_validate(b) for b in snap.get_all_batches()]

    def get_batch(self, batch_id: int) -> BatchRecord:
        if not _storable_id(batch_id):
            raise NotFoundError(batch_id)
        with self.store.snapshot() as snap:
            row = snap.get_batch(batch_id)
            if row is None:
                raise NotFoundError(batch_id)
            return BatchRecord.model_validate(row)

    def list_audit_entries(
        self,
        batch_id: Optional[int] = None,
        action: Optional[AuditAction] = None,
        limit: Optional[int] = None,
    ) -> list[AuditEntryRecord]:
        """Audit trail in commit order."""
        if batch_id is not None and not _storable_id(batch_id):
            return []
        with self.store.snapshot() as snap:
            rows = snap.list_audit_entries(batch_id=batch_id, action=action, limit=limit)
            return [AuditEntryRecord.model_validate(r) for r in rows]
