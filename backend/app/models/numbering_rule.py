from __future__ import annotations

from datetime import date

from sqlalchemy import JSON, CheckConstraint, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class NumberingRule(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "numbering_rules"
    __table_args__ = (
        CheckConstraint("sequence_width >= 1", name="ck_numbering_rules_sequence_width"),
        CheckConstraint(
            "effective_until IS NULL OR effective_until >= effective_from",
            name="ck_numbering_rules_effective_period",
        ),
        Index("ix_numbering_rules_window", "effective_from", "effective_until"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    template: Mapped[str] = mapped_column(String(200), nullable=False)
    sequence_width: Mapped[int] = mapped_column(Integer, nullable=False)

    # NULL marks a generic (fallback) rule.
    department_code: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    document_type_codes: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_until: Mapped[date | None] = mapped_column(Date, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def applies_to(self, *, document_type_code: str, on_date: date) -> bool:
        if document_type_code not in self.document_type_codes:
            return False
        if on_date < self.effective_from:
            return False
        return self.effective_until is None or on_date <= self.effective_until
