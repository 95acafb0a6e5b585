"""Audit repository: append and read audit_logs rows. There is no update or delete."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from batch_ledger.db.models.audit_log import AuditLog
from batch_ledger.models.domain import AuditAction


def insert(
    session: Session,
    action: AuditAction,
    batch_id: Optional[int],
    details: str,
    timestamp: datetime,
) -> int:
    """Append one entry and return its log_id."""
    row = AuditLog(action=action, batch_id=batch_id, details=details, timestamp=timestamp)
    session.add(row)
    session.flush()
    return row.log_id


def list_entries(
    session: Session,
    batch_id: Optional[int] = None,
    action: Optional[AuditAction] = None,
    limit: Optional[int] = None,
) -> list[AuditLog]:
    """Entries in commit order (log_id ascending), optionally filtered."""
    q = select(AuditLog)
    if batch_id is not None:
        q = q.where(AuditLog.batch_id == batch_id)
    if action is not None:
        q = q.where(AuditLog.action == action)
    q = q.order_by(AuditLog.log_id.asc())
    if limit is not None:
        q = q.limit(limit)
    return list(session.scalars(q).all())


def count(session: Session, batch_id: Optional[int] = None) -> int:
    q = select(func.count(AuditLog.log_id))
    if batch_id is not None:
        q = q.where(AuditLog.batch_id == batch_id)
    return int(session.scalar(q) or 0)
