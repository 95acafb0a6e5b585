"""ORM model for the append-only audit trail."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from batch_ledger.db.base import Base
from batch_ledger.models.domain import AuditAction


class AuditLog(Base):
    """One row per committed mutation. batch_id is null for bulk actions."""

    __tablename__ = "audit_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    log_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    action: Mapped[AuditAction] = mapped_column(
        Enum(
            AuditAction,
            name="audit_action",
            native_enum=False,
            length=32,
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("batches.id"), nullable=True, index=True
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
