from __future__ import annotations

from app.schemas.numbering import NumberingRuleCreate
from app.services.numbering_errors import (
    EmptyDocumentTypeCodes,
    EmptyRuleName,
    EmptyTemplate,
    InvalidEffectivePeriod,
    InvalidSequenceDigits,
)
from app.services.templates import MAX_SEQUENCE_WIDTH, validate_template


def _normalize_codes(codes: list[str]) -> list[str]:
    out: list[str] = []
    for code in codes:
        code = code.strip()
        if code and code not in out:
            out.append(code)
    return out


def validate_rule_create(data: NumberingRuleCreate) -> NumberingRuleCreate:
    """
    Check a rule creation request and return a normalized copy.

    Checks run in a fixed order so the first failing one determines the error type.
    """
    if not data.rule_name.strip():
        raise EmptyRuleName()
    if not data.template.strip():
        raise EmptyTemplate()
    if not 1 <= data.sequence_digits <= MAX_SEQUENCE_WIDTH:
        raise InvalidSequenceDigits()

    codes = _normalize_codes(data.document_type_codes)
    if not codes:
        raise EmptyDocumentTypeCodes()

    # A single-day window (until == from) is valid.
    if data.effective_until is not None and data.effective_until < data.effective_from:
        raise InvalidEffectivePeriod()

    validate_template(data.template)

    department_code = data.department_code.strip() if data.department_code is not None else None
    return data.model_copy(
        update={
            "rule_name": data.rule_name.strip(),
            "department_code": department_code or None,
            "document_type_codes": codes,
        }
    )
