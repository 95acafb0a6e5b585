"""ORM model for production batches."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from batch_ledger.db.base import Base
from batch_ledger.models.domain import BatchStatus, QualityGrade


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Batch(Base):
    """One produced lot. Column names follow the ledger's persisted layout (mfg, exp, line)."""

    __tablename__ = "batches"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    manufacturing_date: Mapped[date] = mapped_column("mfg", Date, nullable=False)
    expiry_date: Mapped[date] = mapped_column("exp", Date, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    location: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    status: Mapped[BatchStatus] = mapped_column(
        Enum(
            BatchStatus,
            name="batch_status",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=BatchStatus.ACTIVE,
        index=True,
    )
    quality_grade: Mapped[QualityGrade] = mapped_column(
        Enum(
            QualityGrade,
            name="quality_grade",
            native_enum=False,
            length=4,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    production_line: Mapped[Optional[str]] = mapped_column("line", String(128), nullable=True)
