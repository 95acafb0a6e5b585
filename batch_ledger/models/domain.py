"""Batch lifecycle vocabulary: states, grades, audit actions and the transition table."""

from datetime import date
from enum import Enum
from typing import Optional

from batch_ledger.exceptions import UnknownStatusError


class BatchStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISPATCHED = "DISPATCHED"
    RECALLED = "RECALLED"
    # Reserved: nothing moves a batch here yet (no automatic expiry sweep).
    EXPIRED = "EXPIRED"


class BatchEvent(str, Enum):
    CREATE = "create"
    DISPATCH = "dispatch"
    RECALL = "recall"


class QualityGrade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    B = "B"
    C = "C"


class AuditAction(str, Enum):
    INSERT = "INSERT"
    DISPATCH = "DISPATCH"
    RECALL_BULK = "RECALL_BULK"


# (from_status, event) -> to_status. None stands for "no record yet".
TRANSITIONS: dict[tuple[Optional[BatchStatus], BatchEvent], BatchStatus] = {
    (None, BatchEvent.CREATE): BatchStatus.ACTIVE,
    (BatchStatus.ACTIVE, BatchEvent.DISPATCH): BatchStatus.DISPATCHED,
    (BatchStatus.ACTIVE, BatchEvent.RECALL): BatchStatus.RECALLED,
}


def next_status(current: Optional[BatchStatus], event: BatchEvent) -> Optional[BatchStatus]:
    """Return the target state for event from current, or None if the transition is illegal."""
    return TRANSITIONS.get((current, event))


def source_status(event: BatchEvent) -> BatchStatus:
    """The single state an existing batch must be in for event to apply."""
    for (from_status, ev), _ in TRANSITIONS.items():
        if ev is event and from_status is not None:
            return from_status
    raise ValueError(f"{event.value} does not apply to an existing batch")


def parse_status(value: object) -> BatchStatus:
    """Coerce a boundary value to BatchStatus; anything else is rejected."""
    if isinstance(value, BatchStatus):
        return value
    if isinstance(value, str):
        try:
            return BatchStatus(value.strip().upper())
        except ValueError:
            pass
    raise UnknownStatusError(value)


def derive_quality_grade(expiry_date: date, today: date) -> QualityGrade:
    """Grade remaining shelf life at production time.

    More than 365 days -> A+, more than 180 -> A, more than 90 -> B, else C.
    """
    days_to_expiry = (expiry_date - today).days
    if days_to_expiry > 365:
        return QualityGrade.A_PLUS
    if days_to_expiry > 180:
        return QualityGrade.A
    if days_to_expiry > 90:
        return QualityGrade.B
    return QualityGrade.C
