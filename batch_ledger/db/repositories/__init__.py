"""DB repositories: session-scoped functions over the ledger tables."""

from batch_ledger.db.repositories import audit_repo, batch_repo
from batch_ledger.db.repositories.batch_repo import StatusAggregate

__all__ = [
    "audit_repo",
    "batch_repo",
    "StatusAggregate",
]
