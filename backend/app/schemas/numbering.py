from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class NumberingRuleCreate(BaseModel):
    # Semantic checks live in `app.services.rule_validation` so each failure keeps its own error type.
    rule_name: str
    template: str
    sequence_digits: int
    department_code: str | None = None
    document_type_codes: list[str] = Field(default_factory=list)
    effective_from: date
    effective_until: date | None = None
    priority: int = 0


class NumberingRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    template: str
    sequence_width: int
    department_code: str | None
    document_type_codes: list[str]
    effective_from: date
    effective_until: date | None
    priority: int
    created_at: datetime
    updated_at: datetime


class NumberingRulePage(BaseModel):
    items: list[NumberingRuleOut]
    total: int


class NumberRequestIn(BaseModel):
    document_type_code: str
    department_code: str
    created_date: date
    created_by: int


class GeneratedNumberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_number: str
    rule_id: int
    sequence_number: int
    template_used: str
