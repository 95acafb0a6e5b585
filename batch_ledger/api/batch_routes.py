"""Batch lifecycle API routes: list, get, add, dispatch, recall, validate.

Handlers are plain functions so FastAPI runs them in its threadpool; the
store serializes the writes.
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from batch_ledger.api.deps import get_engine
from batch_ledger.models.inputs import BatchCreateInput, RecallInput
from batch_ledger.services.lifecycle import LifecycleEngine

router = APIRouter(prefix="/api", tags=["batches"])


@router.get("/batches")
def list_batches(engine: LifecycleEngine = Depends(get_engine)) -> list[dict[str, Any]]:
    """All batches, newest first."""
    return [b.model_dump(mode="json", by_alias=True) for b in engine.list_batches()]


@router.get("/batches/{batch_id}")
def get_batch(batch_id: int, engine: LifecycleEngine = Depends(get_engine)) -> dict[str, Any]:
    return engine.get_batch(batch_id).model_dump(mode="json", by_alias=True)


@router.post("/batches", status_code=status.HTTP_201_CREATED)
def add_batch(body: BatchCreateInput, engine: LifecycleEngine = Depends(get_engine)) -> dict[str, Any]:
    """Create a batch in ACTIVE; 400 lists every violated rule."""
    result = engine.add_batch(
        name=body.name,
        manufacturing_date=body.manufacturing_date,
        expiry_date=body.expiry_date,
        quantity=body.quantity,
        location=body.location,
        production_line=body.production_line,
    )
    return result.model_dump(mode="json")


@router.post("/batches/{batch_id}/dispatch")
def dispatch_batch(batch_id: int, engine: LifecycleEngine = Depends(get_engine)) -> dict[str, Any]:
    return engine.dispatch_batch(batch_id).model_dump(mode="json")


@router.post("/recall")
def process_recall(body: RecallInput, engine: LifecycleEngine = Depends(get_engine)) -> dict[str, Any]:
    """Bulk recall by drug name. Zero matches is still a success."""
    return engine.process_recall(body.drug_name).model_dump(mode="json", by_alias=True)


@router.get("/validate")
def validate_system(engine: LifecycleEngine = Depends(get_engine)) -> dict[str, Any]:
    return engine.validate_system().model_dump(mode="json")
