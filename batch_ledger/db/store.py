"""Ledger store: engine, transactional scope and the row primitives the lifecycle engine uses.

One LedgerStore is built per process and handed to whatever needs it; there
is no module-level connection.
"""

import threading
from contextlib import contextmanager, nullcontext
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from batch_ledger.config import DATABASE_URL, DB_BUSY_TIMEOUT_SECONDS, DB_ECHO
from batch_ledger.db import immutability  # noqa: F401  (registers guards and triggers)
from batch_ledger.db.base import Base
from batch_ledger.db.models import AuditLog, Batch
from batch_ledger.db.repositories import StatusAggregate, audit_repo, batch_repo
from batch_ledger.exceptions import StorageFault
from batch_ledger.models.domain import AuditAction, BatchStatus, QualityGrade
from batch_ledger.utils.logger import get_logger

logger = get_logger("batch_ledger.db.store")

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return False
    return parsed.database in (None, "", ":memory:") or parsed.query.get("mode") == "memory"


def _create_engine(url: str, echo: bool, busy_timeout: float) -> Engine:
    """Create the engine. SQLite gets thread-safe connections and real read transactions."""
    if make_url(url).get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    memory = _is_memory_sqlite(url)
    if not memory:
        Path(make_url(url).database).parent.mkdir(parents=True, exist_ok=True)
    kwargs: dict[str, Any] = {
        "echo": echo,
        "connect_args": {"check_same_thread": False, "timeout": busy_timeout},
    }
    if memory:
        # Every thread must see the same in-memory database.
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        # pysqlite only opens a transaction before DML; take over so reads are transactional too.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            if not memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


class LedgerSession:
    """Store primitives bound to one open transaction (or read snapshot)."""

    def __init__(self, session: Session, clock: Callable[[], datetime]):
        self.session = session
        self._clock = clock

    def insert_batch(
        self,
        *,
        name: str,
        manufacturing_date: date,
        expiry_date: date,
        quantity: int,
        location: Optional[str],
        quality_grade: QualityGrade,
        production_line: Optional[str] = None,
        status: BatchStatus = BatchStatus.ACTIVE,
    ) -> int:
        return batch_repo.insert(
            self.session,
            name=name,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
            quantity=quantity,
            location=location,
            status=status,
            quality_grade=quality_grade,
            production_line=production_line,
        )

    def update_batch_status(
        self,
        batch_id: int,
        new_status: BatchStatus,
        new_location: Optional[str] = None,
        expected_status: Optional[BatchStatus] = None,
    ) -> int:
        """Returns 0 when no row matched; callers read that as not found."""
        return batch_repo.update_status(
            self.session, batch_id, new_status, new_location, expected_status
        )

    def bulk_update_status_by_name_and_status(
        self,
        name: str,
        from_status: BatchStatus,
        to_status: BatchStatus,
        new_location: Optional[str],
    ) -> int:
        return batch_repo.bulk_update_status(self.session, name, from_status, to_status, new_location)

    def insert_audit_entry(self, action: AuditAction, batch_id: Optional[int], details: str) -> int:
        """Append an audit entry stamped with the store's clock."""
        return audit_repo.insert(self.session, action, batch_id, details, self._clock())

    def get_batch(self, batch_id: int) -> Optional[Batch]:
        return batch_repo.get(self.session, batch_id)

    def get_all_batches(self) -> list[Batch]:
        return batch_repo.list_all(self.session)

    def get_batches_by_status(self, status: BatchStatus) -> list[Batch]:
        return batch_repo.list_by_status(self.session, status)

    def aggregate_active(self) -> StatusAggregate:
        return batch_repo.aggregate_by_status(self.session, BatchStatus.ACTIVE)

    def count_batches(self) -> int:
        return batch_repo.count(self.session)

    def list_audit_entries(
        self,
        batch_id: Optional[int] = None,
        action: Optional[AuditAction] = None,
        limit: Optional[int] = None,
    ) -> list[AuditLog]:
        return audit_repo.list_entries(self.session, batch_id=batch_id, action=action, limit=limit)

    def count_audit_entries(self, batch_id: Optional[int] = None) -> int:
        return audit_repo.count(self.session, batch_id=batch_id)


class LedgerStore:
    """Durable storage for batches and audit entries with atomic multi-row mutation.

    Writes are serialized by a process-local lock on top of the database's
    own locking; the ledger has a single writer by construction.
    """

    def __init__(
        self,
        database_url: str = DATABASE_URL,
        *,
        echo: bool = DB_ECHO,
        busy_timeout: float = DB_BUSY_TIMEOUT_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.database_url = database_url
        self._engine = _create_engine(database_url, echo, busy_timeout)
        self._shared_connection = _is_memory_sqlite(database_url)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )
        self._write_lock = threading.Lock()
        self._clock = clock or _utc_now

    @property
    def engine(self) -> Engine:
        return self._engine

    def now(self) -> datetime:
        return self._clock()

    def init_schema(self) -> None:
        """Create tables (and SQLite append-only triggers) if missing."""
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            logger.exception("store.init_schema.failed", error=str(e))
            raise StorageFault(f"schema creation failed: {e}") from e
        logger.debug("store.init_schema.ok", url=self._engine.url.render_as_string(hide_password=True))

    @contextmanager
    def transaction(self) -> Iterator[LedgerSession]:
        """Transactional scope: commit on clean exit, roll back on any exception.

        Cancellation (KeyboardInterrupt, SystemExit, GeneratorExit) also rolls
        back. Database errors surface as StorageFault; domain errors pass through.
        """
        with self._write_lock:
            session = self._session_factory()
            try:
                yield LedgerSession(session, self._clock)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.exception("store.transaction.rolled_back", error=str(e))
                raise StorageFault(f"transaction failed: {e}") from e
            except BaseException:
                session.rollback()
                logger.debug("store.transaction.rolled_back")
                raise
            finally:
                session.close()

    def run_in_transaction(self, fn: Callable[[LedgerSession], T]) -> T:
        """Call fn inside transaction() and return its result once committed."""
        with self.transaction() as tx:
            return fn(tx)

    @contextmanager
    def snapshot(self) -> Iterator[LedgerSession]:
        """Read-only scope: every query inside sees the same committed state. Never commits."""
        # A shared in-memory connection cannot hold a reader's transaction beside a writer's.
        guard = self._write_lock if self._shared_connection else nullcontext()
        with guard:
            session = self._session_factory()
            try:
                yield LedgerSession(session, self._clock)
            except SQLAlchemyError as e:
                logger.exception("store.snapshot.failed", error=str(e))
                raise StorageFault(f"read failed: {e}") from e
            finally:
                session.rollback()
                session.close()

    def dispose(self) -> None:
        """Close pooled connections."""
        self._engine.dispose()
