"""Request-scoped access to the lifecycle engine held on app.state."""

from fastapi import HTTPException, Request

from batch_ledger.services.lifecycle import LifecycleEngine


def get_engine(request: Request) -> LifecycleEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Ledger not initialized")
    return engine
