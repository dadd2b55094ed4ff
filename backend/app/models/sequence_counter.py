from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, PrimaryKeyConstraint, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"
    __table_args__ = (
        PrimaryKeyConstraint("rule_id", "year", "month", "department_code", name="pk_sequence_counters"),
    )

    rule_id: Mapped[int] = mapped_column(Integer, ForeignKey("numbering_rules.id"), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    department_code: Mapped[str] = mapped_column(String(32), nullable=False)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
