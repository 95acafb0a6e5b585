"""Re-export all ORM models so Base.metadata has all tables."""

from batch_ledger.db.models.audit_log import AuditLog
from batch_ledger.db.models.batch import Batch

__all__ = [
    "Batch",
    "AuditLog",
]
