from __future__ import annotations

from app.models.numbering_rule import NumberingRule
from app.services.rule_store import RuleStore
from app.services.templates import sequence_limit


class SequenceAllocator:
    """Hands out per-scope sequence values; scope = (rule, year, month, department)."""

    def __init__(self, store: RuleStore) -> None:
        self._store = store

    async def allocate(self, rule: NumberingRule, *, year: int, month: int, department_code: str) -> int:
        return await self._store.next_sequence(
            rule_id=rule.id,
            year=year,
            month=month,
            department_code=department_code,
            max_value=sequence_limit(rule.template, default_width=rule.sequence_width),
        )
