from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from app.services.memory_store import InMemoryRuleStore
from app.services.numbering_errors import InvalidSequenceDigits
from app.services.rule_store import RuleSearchFilters
from app.services.seeds import load_seed_rules, parse_seed_rules, seed_rules

SEED_FILE = Path(__file__).resolve().parents[1] / "seeds" / "numbering_rules.json"


def test_load_bundled_seed_file() -> None:
    rules = load_seed_rules(SEED_FILE)

    assert [r.rule_name for r in rules] == [
        "Technical documents (development)",
        "Department series",
        "CTA historical format",
    ]
    # JSON-encoded string form is accepted for type codes.
    assert rules[2].document_type_codes == ["C"]
    assert rules[2].effective_until == date(2025, 12, 31)
    assert rules[1].department_code is None


def test_parse_rejects_bad_dates() -> None:
    payload = {"data": [{"rule_name": "broken", "template": "{seq}", "effective_from": "2025-13-01"}]}
    with pytest.raises(ValueError, match="effective_from"):
        parse_seed_rules(payload)


def test_parse_requires_data_list() -> None:
    with pytest.raises(ValueError):
        parse_seed_rules({"rules": []})


@pytest.mark.asyncio
async def test_seed_rules_inserts_through_store(memory_store: InMemoryRuleStore) -> None:
    count = await seed_rules(memory_store, load_seed_rules(SEED_FILE))

    _, total = await memory_store.search_rules(RuleSearchFilters())
    assert count == 3
    assert total == 3


@pytest.mark.asyncio
async def test_seed_rules_dry_run_writes_nothing(memory_store: InMemoryRuleStore) -> None:
    count = await seed_rules(memory_store, load_seed_rules(SEED_FILE), dry_run=True)

    _, total = await memory_store.search_rules(RuleSearchFilters())
    assert count == 3
    assert total == 0


@pytest.mark.asyncio
async def test_seed_rules_validates_each_rule(tmp_path: Path, memory_store: InMemoryRuleStore) -> None:
    path = tmp_path / "seed.json"
    path.write_text(
        json.dumps(
            {
                "data": [
                    {
                        "rule_name": "zero width",
                        "template": "{seq}",
                        "sequence_digits": 0,
                        "document_type_codes": ["A"],
                        "effective_from": "2025-01-01",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    with pytest.raises(InvalidSequenceDigits):
        await seed_rules(memory_store, load_seed_rules(path))
