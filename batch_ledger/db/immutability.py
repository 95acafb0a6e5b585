"""Append-only enforcement for the ledger tables.

Two layers guard the same rules:

  1. ORM listeners (below) stop edits made through SQLAlchemy objects or
     ORM-enabled UPDATE/DELETE statements before any SQL is sent.
  2. SQLite triggers, created together with the tables, stop raw SQL.

Rules:
  - audit_logs: no UPDATE, no DELETE, ever.
  - batches: no DELETE; identity, dates, quantity and grade never change after insert.
"""

from sqlalchemy import DDL, event, inspect
from sqlalchemy.orm import ORMExecuteState, Session

from batch_ledger.db.models.audit_log import AuditLog
from batch_ledger.db.models.batch import Batch
from batch_ledger.exceptions import ImmutabilityViolationError

IMMUTABLE_BATCH_FIELDS = (
    "id",
    "name",
    "manufacturing_date",
    "expiry_date",
    "quantity",
    "quality_grade",
)


@event.listens_for(AuditLog, "before_update")
def _audit_log_before_update(mapper, connection, target) -> None:
    raise ImmutabilityViolationError("audit_logs", "UPDATE")


@event.listens_for(AuditLog, "before_delete")
def _audit_log_before_delete(mapper, connection, target) -> None:
    raise ImmutabilityViolationError("audit_logs", "DELETE")


@event.listens_for(Batch, "before_delete")
def _batch_before_delete(mapper, connection, target) -> None:
    raise ImmutabilityViolationError("batches", "DELETE")


@event.listens_for(Batch, "before_update")
def _batch_before_update(mapper, connection, target) -> None:
    state = inspect(target)
    for field in IMMUTABLE_BATCH_FIELDS:
        if state.attrs[field].history.has_changes():
            raise ImmutabilityViolationError("batches", f"UPDATE of {field}")


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_audit_rewrites(orm_execute_state: ORMExecuteState) -> None:
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    operation = "UPDATE" if orm_execute_state.is_update else "DELETE"
    for mapper in orm_execute_state.all_mappers:
        if mapper.class_ is AuditLog:
            raise ImmutabilityViolationError("audit_logs", operation)
        if mapper.class_ is Batch and orm_execute_state.is_delete:
            raise ImmutabilityViolationError("batches", operation)


_SQLITE_TRIGGERS = {
    AuditLog.__table__: (
        """
        CREATE TRIGGER IF NOT EXISTS audit_logs_no_update
        BEFORE UPDATE ON audit_logs
        BEGIN
            SELECT RAISE(ABORT, 'audit_logs rows are append-only');
        END
        """,
        """
        CREATE TRIGGER IF NOT EXISTS audit_logs_no_delete
        BEFORE DELETE ON audit_logs
        BEGIN
            SELECT RAISE(ABORT, 'audit_logs rows are append-only');
        END
        """,
    ),
    Batch.__table__: (
        """
        CREATE TRIGGER IF NOT EXISTS batches_no_delete
        BEFORE DELETE ON batches
        BEGIN
            SELECT RAISE(ABORT, 'batches are never deleted');
        END
        """,
    ),
}

for _table, _statements in _SQLITE_TRIGGERS.items():
    for _statement in _statements:
        event.listen(_table, "after_create", DDL(_statement).execute_if(dialect="sqlite"))
