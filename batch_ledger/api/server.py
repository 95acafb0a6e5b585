"""FastAPI adapter over the lifecycle engine."""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from batch_ledger.api.audit_routes import router as audit_router
from batch_ledger.api.batch_routes import router as batch_router
from batch_ledger.db import create_store
from batch_ledger.exceptions import (
    BatchLedgerError,
    NotFoundError,
    StorageFault,
    ValidationError,
)
from batch_ledger.services.lifecycle import LifecycleEngine
from batch_ledger.utils.logger import bind_context, clear_context, get_logger

logger = get_logger("batch_ledger.api.server")


def _error_body(exc: BatchLedgerError) -> dict[str, Any]:
    body: dict[str, Any] = {"error": exc.reason, "code": exc.code}
    if isinstance(exc, ValidationError):
        body["violations"] = exc.violations
    return body


def _register_error_handlers(app: FastAPI) -> None:
    """Client errors for validation/not-found, server errors for storage faults."""

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=_error_body(exc))

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content=_error_body(exc))

    @app.exception_handler(StorageFault)
    async def _storage_fault(request: Request, exc: StorageFault) -> JSONResponse:
        logger.error("api.storage_fault", path=request.url.path, code=exc.code, error=exc.reason)
        return JSONResponse(status_code=500, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "invalid request", "code": "INVALID_REQUEST", "detail": jsonable_encoder(exc.errors())},
        )


def create_app(
    engine: Optional[LifecycleEngine] = None,
    database_url: Optional[str] = None,
    seed: Optional[bool] = None,
) -> FastAPI:
    """Create the FastAPI app.

    If engine is passed it is used as is (tests, embedding). Otherwise the
    lifespan builds a store from database_url (or DATABASE_URL) and disposes
    it on shutdown.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        owned_store = None
        if getattr(app.state, "engine", None) is None:
            owned_store = create_store(database_url, seed=seed)
            app.state.engine = LifecycleEngine(owned_store)
            logger.info("api.startup", database_url=owned_store.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            if owned_store is not None:
                owned_store.dispose()
                app.state.engine = None
                logger.info("api.shutdown")

    app = FastAPI(
        title="Batch Ledger API",
        version="1.0.0",
        description="Pharmaceutical batch lifecycle and audit ledger",
        lifespan=_lifespan,
    )
    app.state.engine = engine
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.middleware("http")
    async def _request_log_context(request: Request, call_next):
        bind_context(method=request.method, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()

    _register_error_handlers(app)
    app.include_router(batch_router)
    app.include_router(audit_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
