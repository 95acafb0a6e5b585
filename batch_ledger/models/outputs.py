"""Result models returned by the lifecycle engine."""

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from batch_ledger.models.domain import AuditAction, BatchStatus, QualityGrade


class BatchRecord(BaseModel):
    """One batch row. Serialized with the short wire names (mfg, exp, line)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    manufacturing_date: date = Field(serialization_alias="mfg")
    expiry_date: date = Field(serialization_alias="exp")
    quantity: int
    location: Optional[str] = None
    status: BatchStatus
    quality_grade: QualityGrade
    production_line: Optional[str] = Field(None, serialization_alias="line")


class AuditEntryRecord(BaseModel):
    """One immutable audit trail entry."""

    model_config = ConfigDict(from_attributes=True)

    log_id: int
    action: AuditAction
    batch_id: Optional[int] = None
    timestamp: datetime
    details: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back the stored UTC time without an offset.
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class AddBatchResult(BaseModel):
    id: int
    status: BatchStatus
    quality_grade: QualityGrade


class DispatchResult(BaseModel):
    message: str


class RecallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    affected_count: int = Field(serialization_alias="affectedCount")


class SystemValidationReport(BaseModel):
    """Aggregate over ACTIVE batches.

    integrity_checksum is the SHA-256 of the canonical JSON of the active
    batches (ordered by id) read in the same snapshot as the counts.
    """

    status: Literal["ALL_SYSTEMS_OPTIMAL"] = "ALL_SYSTEMS_OPTIMAL"
    active_batches: int
    total_units: int
    integrity_checksum: str
