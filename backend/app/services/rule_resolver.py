from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from app.models.numbering_rule import NumberingRule
from app.services.numbering_errors import NoApplicableRule

if TYPE_CHECKING:
    from app.services.rule_store import RuleStore


def pick_rule(
    rules: Iterable[NumberingRule],
    *,
    document_type_code: str,
    department_code: str,
    on_date: date,
) -> NumberingRule | None:
    """
    Choose the single rule that governs `(document_type_code, department_code, on_date)`.

    - Only rules listing the document type and whose effective window contains `on_date` qualify.
    - Department-specific rules win over generic (department-less) ones.
    - Within the winning group the lowest `priority` wins; equal priorities go to the lowest `id`.
    """
    candidates = [r for r in rules if r.applies_to(document_type_code=document_type_code, on_date=on_date)]

    specific = [r for r in candidates if r.department_code == department_code]
    pool = specific or [r for r in candidates if r.department_code is None]
    if not pool:
        return None
    return min(pool, key=lambda r: (r.priority, r.id))


class RuleResolver:
    def __init__(self, store: RuleStore) -> None:
        self._store = store

    async def resolve(self, *, document_type_code: str, department_code: str, on_date: date) -> NumberingRule:
        rule = await self._store.find_applicable_rule(
            document_type_code=document_type_code,
            department_code=department_code,
            on_date=on_date,
        )
        if rule is None:
            raise NoApplicableRule(
                f"No applicable rule for document type {document_type_code!r}, "
                f"department {department_code!r} on {on_date.isoformat()}"
            )
        return rule
