from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from app.schemas.numbering import NumberingRuleCreate
from app.services.rule_store import RuleStore


logger = logging.getLogger(__name__)


def _parse_date(value: Any, *, field: str, rule_name: str) -> date | None:
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid {field} {value!r} for rule {rule_name!r}") from None


def _parse_type_codes(value: Any, *, rule_name: str) -> list[str]:
    # Older seed files store the list as a JSON-encoded string.
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError(f"Invalid document_type_codes for rule {rule_name!r}") from None
    if not isinstance(value, list):
        raise ValueError(f"document_type_codes must be a list for rule {rule_name!r}")
    return [str(v) for v in value]


def parse_seed_rules(payload: dict[str, Any]) -> list[NumberingRuleCreate]:
    rows = payload.get("data")
    if not isinstance(rows, list):
        raise ValueError("Seed file must contain a 'data' list")

    rules: list[NumberingRuleCreate] = []
    for row in rows:
        name = str(row.get("rule_name", ""))
        effective_from = _parse_date(row.get("effective_from"), field="effective_from", rule_name=name)
        if effective_from is None:
            raise ValueError(f"Missing effective_from for rule {name!r}")
        try:
            rules.append(
                NumberingRuleCreate(
                    rule_name=name,
                    template=row.get("template", ""),
                    sequence_digits=row.get("sequence_digits", 0),
                    department_code=row.get("department_code"),
                    document_type_codes=_parse_type_codes(row.get("document_type_codes", []), rule_name=name),
                    effective_from=effective_from,
                    effective_until=_parse_date(row.get("effective_until"), field="effective_until", rule_name=name),
                    priority=row.get("priority", 0),
                )
            )
        except ValidationError as e:
            raise ValueError(f"Invalid seed row for rule {name!r}: {e}") from e
    return rules


def load_seed_rules(path: Path) -> list[NumberingRuleCreate]:
    return parse_seed_rules(json.loads(path.read_text(encoding="utf-8")))


async def seed_rules(store: RuleStore, rules: list[NumberingRuleCreate], *, dry_run: bool = False) -> int:
    if dry_run:
        logger.info("Would insert %s numbering rules", len(rules))
        return len(rules)

    count = 0
    for data in rules:
        await store.create_rule(data)
        count += 1
    logger.info("Seeded %s numbering rules", count)
    return count
