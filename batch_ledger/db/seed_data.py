"""Seed the demo batches from CSV into an empty ledger."""

from datetime import date
from pathlib import Path
from typing import Any

from batch_ledger.db.store import LedgerSession, LedgerStore
from batch_ledger.exceptions import UnknownStatusError
from batch_ledger.models.domain import AuditAction, QualityGrade, derive_quality_grade, parse_status
from batch_ledger.utils.csv_loader import load_seed_batches
from batch_ledger.utils.logger import get_logger

logger = get_logger("batch_ledger.db.seed_data")


def _parse_int(val: Any, default: int = 0) -> int:
    try:
        return int(val) if val is not None and str(val).strip() else default
    except (TypeError, ValueError):
        return default


def _parse_date(val: Any) -> date | None:
    if val is None or not str(val).strip():
        return None
    s = str(val).strip()
    try:
        return date.fromisoformat(s)
    except (TypeError, ValueError):
        return None


def _seed_rows(tx: LedgerSession, rows: list[dict[str, Any]], today: date) -> int:
    if tx.count_batches() > 0:
        logger.info("seed.skipped", reason="ledger not empty")
        return 0
    inserted = 0
    for r in rows:
        name = (r.get("name") or "").strip()
        mfg = _parse_date(r.get("mfg"))
        exp = _parse_date(r.get("exp"))
        quantity = _parse_int(r.get("quantity"))
        if not name or mfg is None or exp is None or exp <= mfg or quantity <= 0:
            logger.warning("seed.row_skipped", row=r)
            continue
        try:
            status = parse_status(r.get("status") or "ACTIVE")
        except UnknownStatusError:
            logger.warning("seed.row_skipped", row=r)
            continue
        grade_raw = (r.get("quality_grade") or "").strip()
        grade = QualityGrade(grade_raw) if grade_raw in {g.value for g in QualityGrade} else derive_quality_grade(exp, today)
        batch_id = tx.insert_batch(
            name=name,
            manufacturing_date=mfg,
            expiry_date=exp,
            quantity=quantity,
            location=(r.get("location") or "").strip() or None,
            quality_grade=grade,
            production_line=(r.get("line") or "").strip() or None,
            status=status,
        )
        tx.insert_audit_entry(AuditAction.INSERT, batch_id, f"Seeded batch {name} from demo data.")
        inserted += 1
    return inserted


def seed_demo_batches(store: LedgerStore, csv_path: Path | None = None) -> int:
    """Insert the demo batches (each with its INSERT audit entry) if the ledger has no batches.

    Returns the number of batches inserted; 0 when the ledger already had data.
    """
    rows = load_seed_batches(csv_path)
    today = store.now().date()
    with store.transaction() as tx:
        inserted = _seed_rows(tx, rows, today)
    if inserted:
        logger.info("seed.ok", inserted=inserted)
    return inserted
