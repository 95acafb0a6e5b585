"""Batch repository: row-level reads and conditional writes on the batches table.

Every function takes the caller's session; commit and rollback belong to
LedgerStore.transaction().
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from batch_ledger.db.models.batch import Batch
from batch_ledger.models.domain import BatchStatus, QualityGrade


@dataclass(frozen=True)
class StatusAggregate:
    count: int
    total_quantity: int


def insert(
    session: Session,
    *,
    name: str,
    manufacturing_date: date,
    expiry_date: date,
    quantity: int,
    location: Optional[str],
    status: BatchStatus,
    quality_grade: QualityGrade,
    production_line: Optional[str] = None,
) -> int:
    """Insert one batch row and return its store-assigned id."""
    row = Batch(
        name=name,
        manufacturing_date=manufacturing_date,
        expiry_date=expiry_date,
        quantity=quantity,
        location=location,
        status=status,
        quality_grade=quality_grade,
        production_line=production_line,
    )
    session.add(row)
    session.flush()
    return row.id


def update_status(
    session: Session,
    batch_id: int,
    new_status: BatchStatus,
    new_location: Optional[str] = None,
    expected_status: Optional[BatchStatus] = None,
) -> int:
    """Set status (and optionally location) on one row; returns rows affected (0 or 1).

    With expected_status the guard is part of the UPDATE's WHERE clause, so
    check and write happen in one statement.
    """
    values: dict = {"status": new_status}
    if new_location is not None:
        values["location"] = new_location
    stmt = update(Batch).where(Batch.id == batch_id)
    if expected_status is not None:
        stmt = stmt.where(Batch.status == expected_status)
    stmt = stmt.values(**values).execution_options(synchronize_session=False)
    return session.execute(stmt).rowcount


def bulk_update_status(
    session: Session,
    name: str,
    from_status: BatchStatus,
    to_status: BatchStatus,
    new_location: Optional[str],
) -> int:
    """Move every row matching name and from_status in a single statement; returns rows changed."""
    values: dict = {"status": to_status}
    if new_location is not None:
        values["location"] = new_location
    stmt = (
        update(Batch)
        .where(Batch.name == name)
        .where(Batch.status == from_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return session.execute(stmt).rowcount


def get(session: Session, batch_id: int) -> Optional[Batch]:
    return session.get(Batch, batch_id)


def list_all(session: Session) -> list[Batch]:
    """All batches, newest id first."""
    return list(session.scalars(select(Batch).order_by(Batch.id.desc())).all())


def list_by_status(session: Session, status: BatchStatus) -> list[Batch]:
    """Batches in one state, oldest id first."""
    q = select(Batch).where(Batch.status == status).order_by(Batch.id.asc())
    return list(session.scalars(q).all())


def aggregate_by_status(session: Session, status: BatchStatus) -> StatusAggregate:
    q = select(func.count(Batch.id), func.coalesce(func.sum(Batch.quantity), 0)).where(
        Batch.status == status
    )
    count, total = session.execute(q).one()
    return StatusAggregate(count=int(count), total_quantity=int(total))


def count(session: Session) -> int:
    return int(session.scalar(select(func.count(Batch.id))) or 0)
