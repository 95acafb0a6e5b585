"""Domain vocabulary and boundary models."""

from batch_ledger.models.domain import (
    AuditAction,
    BatchEvent,
    BatchStatus,
    QualityGrade,
    derive_quality_grade,
    next_status,
    parse_status,
)
from batch_ledger.models.inputs import BatchCreateInput, RecallInput
from batch_ledger.models.outputs import (
    AddBatchResult,
    AuditEntryRecord,
    BatchRecord,
    DispatchResult,
    RecallResult,
    SystemValidationReport,
)

__all__ = [
    "AuditAction",
    "BatchEvent",
    "BatchStatus",
    "QualityGrade",
    "derive_quality_grade",
    "next_status",
    "parse_status",
    "BatchCreateInput",
    "RecallInput",
    "AddBatchResult",
    "AuditEntryRecord",
    "BatchRecord",
    "DispatchResult",
    "RecallResult",
    "SystemValidationReport",
]
