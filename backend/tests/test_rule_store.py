from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.numbering import NumberingRuleCreate
from app.services.memory_store import InMemoryRuleStore
from app.services.rule_store import RuleSearchFilters, SqlRuleStore


def _rule(**overrides) -> NumberingRuleCreate:
    values = {
        "rule_name": "Rule",
        "template": "{department}-{year2}{seq:3}",
        "sequence_digits": 3,
        "department_code": None,
        "document_type_codes": ["A"],
        "effective_from": date(2024, 1, 1),
        "priority": 5,
    }
    values.update(overrides)
    return NumberingRuleCreate(**values)


async def _seed_catalogue(store) -> None:
    await store.create_rule(_rule(rule_name="dev tech", department_code="D", document_type_codes=["T"], priority=1))
    await store.create_rule(_rule(rule_name="dev all", department_code="D", document_type_codes=["T", "B"], priority=2))
    await store.create_rule(_rule(rule_name="generic", document_type_codes=["A", "B"], priority=9))
    await store.create_rule(
        _rule(
            rule_name="retired",
            department_code="D",
            document_type_codes=["B"],
            effective_from=date(2020, 1, 1),
            effective_until=date(2023, 12, 31),
            priority=0,
        )
    )


@pytest.mark.asyncio
async def test_create_and_get_rule_round_trips_fields(sql_store: SqlRuleStore) -> None:
    created = await sql_store.create_rule(
        _rule(
            rule_name=" Tech ",
            department_code="D",
            document_type_codes=["T", "T", "B"],
            effective_until=date(2026, 12, 31),
        )
    )
    loaded = await sql_store.get_rule_by_id(created.id)

    assert loaded is not None
    assert loaded.name == "Tech"
    assert loaded.sequence_width == 3
    assert loaded.department_code == "D"
    assert loaded.document_type_codes == ["T", "B"]
    assert loaded.effective_until == date(2026, 12, 31)
    assert loaded.created_at is not None
    assert await sql_store.get_rule_by_id(created.id + 100) is None


async def _assert_search_behaviour(store) -> None:
    await _seed_catalogue(store)

    rows, total = await store.search_rules(RuleSearchFilters())
    assert total == 4
    assert [r.name for r in rows] == ["retired", "dev tech", "dev all", "generic"]

    rows, total = await store.search_rules(RuleSearchFilters(department_code="D"), limit=2, offset=1)
    assert total == 3
    assert [r.name for r in rows] == ["dev tech", "dev all"]

    rows, total = await store.search_rules(RuleSearchFilters(document_type_code="B", active_on=date(2025, 1, 1)))
    assert total == 2
    assert [r.name for r in rows] == ["dev all", "generic"]

    rows, total = await store.search_rules(RuleSearchFilters(document_type_code="B"), limit=1, offset=2)
    assert total == 3
    assert [r.name for r in rows] == ["generic"]


@pytest.mark.asyncio
async def test_number_exists_uses_supplied_lookup(session_factory) -> None:
    seen: list[str] = []

    async def lookup(session: AsyncSession, document_number: str) -> bool:
        await session.execute(select(1))
        seen.append(document_number)
        return document_number == "T-25001"

    store = SqlRuleStore(session_factory, number_lookup=lookup)

    assert await store.number_exists("T-25001") is True
    assert await store.number_exists("T-25002") is False
    assert seen == ["T-25001", "T-25002"]


@pytest.mark.asyncio
async def test_number_exists_without_lookup_is_false(sql_store: SqlRuleStore) -> None:
    assert await sql_store.number_exists("anything") is False


@pytest.mark.asyncio
async def test_sql_search_rules_filters_and_paginates(sql_store: SqlRuleStore) -> None:
    await _assert_search_behaviour(sql_store)


@pytest.mark.asyncio
async def test_memory_search_rules_filters_and_paginates(memory_store: InMemoryRuleStore) -> None:
    await _assert_search_behaviour(memory_store)
