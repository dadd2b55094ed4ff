from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import date, datetime, timezone

from app.models.numbering_rule import NumberingRule
from app.schemas.numbering import NumberingRuleCreate
from app.services.numbering_errors import SequenceExhausted
from app.services.rule_resolver import pick_rule
from app.services.rule_store import RuleSearchFilters, RuleStore, rule_from_create
from app.services.rule_validation import validate_rule_create


ScopeKey = tuple[int, int, int, str]


class InMemoryRuleStore(RuleStore):
    """
    Process-local RuleStore for tests and tooling.

    Counter updates happen without an `await` between read and write, so they are
    atomic within one event loop. Not shared across processes.
    """

    def __init__(self, *, existing_numbers: Iterable[str] = ()) -> None:
        self._rules: dict[int, NumberingRule] = {}
        self._counters: dict[ScopeKey, int] = {}
        self._numbers: set[str] = set(existing_numbers)
        self._next_id = 1

    def add_existing_number(self, document_number: str) -> None:
        self._numbers.add(document_number)

    def counter_value(self, *, rule_id: int, year: int, month: int, department_code: str) -> int | None:
        return self._counters.get((rule_id, year, month, department_code))

    async def find_applicable_rule(
        self,
        *,
        document_type_code: str,
        department_code: str,
        on_date: date,
    ) -> NumberingRule | None:
        await asyncio.sleep(0)
        return pick_rule(
            self._rules.values(),
            document_type_code=document_type_code,
            department_code=department_code,
            on_date=on_date,
        )

    async def next_sequence(
        self,
        *,
        rule_id: int,
        year: int,
        month: int,
        department_code: str,
        max_value: int,
    ) -> int:
        # Yield first so concurrent callers interleave the way they would on real I/O.
        await asyncio.sleep(0)
        key = (rule_id, year, month, department_code)
        value = self._counters.get(key, 0) + 1
        if value > max_value:
            raise SequenceExhausted(
                f"Sequence exhausted for rule={rule_id} {year:04d}-{month:02d} dept={department_code} (max {max_value})"
            )
        self._counters[key] = value
        return value

    async def number_exists(self, document_number: str) -> bool:
        await asyncio.sleep(0)
        return document_number in self._numbers

    async def create_rule(self, data: NumberingRuleCreate) -> NumberingRule:
        data = validate_rule_create(data)
        await asyncio.sleep(0)
        now = datetime.now(timezone.utc)
        rule = rule_from_create(data)
        rule.id = self._next_id
        rule.created_at = now
        rule.updated_at = now
        self._next_id += 1
        self._rules[rule.id] = rule
        return rule

    async def get_rule_by_id(self, rule_id: int) -> NumberingRule | None:
        await asyncio.sleep(0)
        return self._rules.get(rule_id)

    async def search_rules(
        self,
        filters: RuleSearchFilters,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[NumberingRule], int]:
        await asyncio.sleep(0)
        rows = sorted(self._rules.values(), key=lambda r: (r.priority, r.id))
        if filters.department_code is not None:
            rows = [r for r in rows if r.department_code == filters.department_code]
        if filters.document_type_code is not None:
            rows = [r for r in rows if filters.document_type_code in r.document_type_codes]
        if filters.active_on is not None:
            day = filters.active_on
            rows = [
                r for r in rows if r.effective_from <= day and (r.effective_until is None or day <= r.effective_until)
            ]
        return rows[offset : offset + limit], len(rows)
