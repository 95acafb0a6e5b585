"""Typed exception hierarchy for the batch ledger.

Every error carries a static ``code`` so callers (the HTTP adapter, the CLI)
branch on type and code rather than on message text:

    BatchLedgerError
    +-- ValidationError            INVALID_BATCH_DATA   -> client error
    |   +-- UnknownStatusError     UNKNOWN_STATUS
    +-- NotFoundError              BATCH_NOT_FOUND      -> client error
    +-- StorageFault               STORAGE_FAULT        -> server error
        +-- ImmutabilityViolationError  IMMUTABILITY_VIOLATION
"""

from typing import Optional


class BatchLedgerError(Exception):
    """Base exception for all batch ledger errors."""

    code: str = "BATCH_LEDGER_ERROR"

    @property
    def reason(self) -> str:
        return str(self)


class ValidationError(BatchLedgerError):
    """Caller-supplied batch data violates a creation invariant.

    Raised before any write; ``violations`` holds one entry per broken rule.
    """

    code: str = "INVALID_BATCH_DATA"

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


class UnknownStatusError(ValidationError):
    """A status value outside the closed set of batch states."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, value: object):
        self.value = value
        super().__init__([f"unknown batch status: {value!r}"])


class NotFoundError(BatchLedgerError):
    """Single-batch operation targets an unknown id or a batch not in ACTIVE."""

    code: str = "BATCH_NOT_FOUND"

    def __init__(self, batch_id: int, current_status: Optional[str] = None):
        self.batch_id = batch_id
        self.current_status = current_status
        if current_status is None:
            message = f"Batch #{batch_id} not found"
        else:
            message = f"Batch #{batch_id} is {current_status}, not eligible for this transition"
        super().__init__(message)


class StorageFault(BatchLedgerError):
    """The underlying store failed; the in-flight transaction was rolled back."""

    code: str = "STORAGE_FAULT"


class ImmutabilityViolationError(StorageFault):
    """Attempt to edit or delete a record the ledger keeps forever."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity: str, operation: str):
        self.entity = entity
        self.operation = operation
        super().__init__(f"{entity} rows are append-only; {operation} is not allowed")
