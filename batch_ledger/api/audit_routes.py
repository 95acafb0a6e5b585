"""Audit trail API route."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from batch_ledger.api.deps import get_engine
from batch_ledger.models.domain import AuditAction
from batch_ledger.services.lifecycle import LifecycleEngine

router = APIRouter(prefix="/api", tags=["audit"])


@router.get("/audit-logs")
def list_audit_logs(
    batch_id: Optional[int] = Query(None, description="Only entries for this batch"),
    action: Optional[AuditAction] = Query(None, description="INSERT, DISPATCH or RECALL_BULK"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    engine: LifecycleEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Return audit entries in commit order (log_id ascending)."""
    entries = engine.list_audit_entries(batch_id=batch_id, action=action, limit=limit)
    return {"items": [e.model_dump(mode="json") for e in entries], "count": len(entries)}
