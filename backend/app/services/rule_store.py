from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.numbering_rule import NumberingRule
from app.schemas.numbering import NumberingRuleCreate
from app.services.numbering_errors import SequenceExhausted
from app.services.rule_resolver import pick_rule
from app.services.rule_validation import validate_rule_create


logger = logging.getLogger(__name__)

NumberLookup = Callable[[AsyncSession, str], Awaitable[bool]]


@dataclass(frozen=True)
class RuleSearchFilters:
    department_code: str | None = None
    document_type_code: str | None = None
    active_on: date | None = None


class RuleStore(ABC):
    """Persisted catalogue of numbering rules and their sequence counters."""

    @abstractmethod
    async def find_applicable_rule(
        self,
        *,
        document_type_code: str,
        department_code: str,
        on_date: date,
    ) -> NumberingRule | None: ...

    @abstractmethod
    async def next_sequence(
        self,
        *,
        rule_id: int,
        year: int,
        month: int,
        department_code: str,
        max_value: int,
    ) -> int:
        """
        Atomically advance the counter of one scope and return the new value.

        Raises SequenceExhausted instead of going past `max_value`.
        """

    @abstractmethod
    async def number_exists(self, document_number: str) -> bool: ...

    @abstractmethod
    async def create_rule(self, data: NumberingRuleCreate) -> NumberingRule: ...

    @abstractmethod
    async def get_rule_by_id(self, rule_id: int) -> NumberingRule | None: ...

    @abstractmethod
    async def search_rules(
        self,
        filters: RuleSearchFilters,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[NumberingRule], int]: ...


def rule_from_create(data: NumberingRuleCreate) -> NumberingRule:
    return NumberingRule(
        name=data.rule_name,
        template=data.template,
        sequence_width=data.sequence_digits,
        department_code=data.department_code,
        document_type_codes=list(data.document_type_codes),
        effective_from=data.effective_from,
        effective_until=data.effective_until,
        priority=data.priority,
    )


def _scope_label(*, rule_id: int, year: int, month: int, department_code: str) -> str:
    return f"rule={rule_id} {year:04d}-{month:02d} dept={department_code}"


# Single statement: the counter row is created or incremented under the row lock the
# database takes for ON CONFLICT, so concurrent callers never observe the same value.
_NEXT_SEQUENCE_SQL = text(
    "INSERT INTO sequence_counters (rule_id, year, month, department_code, last_value, updated_at) "
    "VALUES (:rule_id, :year, :month, :department_code, 1, CURRENT_TIMESTAMP) "
    "ON CONFLICT (rule_id, year, month, department_code) DO UPDATE SET "
    "last_value = sequence_counters.last_value + 1, "
    "updated_at = CURRENT_TIMESTAMP "
    "WHERE sequence_counters.last_value < :max_value "
    "RETURNING last_value"
)


class SqlRuleStore(RuleStore):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        number_lookup: NumberLookup | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._number_lookup = number_lookup

    async def find_applicable_rule(
        self,
        *,
        document_type_code: str,
        department_code: str,
        on_date: date,
    ) -> NumberingRule | None:
        stmt = select(NumberingRule).where(
            NumberingRule.effective_from <= on_date,
            or_(NumberingRule.effective_until.is_(None), NumberingRule.effective_until >= on_date),
            or_(NumberingRule.department_code == department_code, NumberingRule.department_code.is_(None)),
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()

        # Type-code membership lives in a JSON array; it is checked in Python by `pick_rule`.
        return pick_rule(
            rows,
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
        async with self._session_factory() as session:
            async with session.begin():
                res = await session.execute(
                    _NEXT_SEQUENCE_SQL,
                    {
                        "rule_id": rule_id,
                        "year": year,
                        "month": month,
                        "department_code": department_code,
                        "max_value": max_value,
                    },
                )
                value = res.scalar_one_or_none()

        if value is None:
            scope = _scope_label(rule_id=rule_id, year=year, month=month, department_code=department_code)
            logger.warning("Sequence exhausted for %s (max %s)", scope, max_value)
            raise SequenceExhausted(f"Sequence exhausted for {scope} (max {max_value})")
        return int(value)

    async def number_exists(self, document_number: str) -> bool:
        if self._number_lookup is None:
            return False
        async with self._session_factory() as session:
            return bool(await self._number_lookup(session, document_number))

    async def create_rule(self, data: NumberingRuleCreate) -> NumberingRule:
        data = validate_rule_create(data)
        rule = rule_from_create(data)
        async with self._session_factory() as session:
            async with session.begin():
                session.add(rule)
                await session.flush()
            await session.refresh(rule)

        logger.info("Created numbering rule %s (%s) for types %s", rule.id, rule.name, rule.document_type_codes)
        return rule

    async def get_rule_by_id(self, rule_id: int) -> NumberingRule | None:
        async with self._session_factory() as session:
            return await session.get(NumberingRule, rule_id)

    async def search_rules(
        self,
        filters: RuleSearchFilters,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[NumberingRule], int]:
        conditions = []
        if filters.department_code is not None:
            conditions.append(NumberingRule.department_code == filters.department_code)
        if filters.active_on is not None:
            conditions.append(NumberingRule.effective_from <= filters.active_on)
            conditions.append(
                or_(NumberingRule.effective_until.is_(None), NumberingRule.effective_until >= filters.active_on)
            )

        stmt = select(NumberingRule).where(*conditions).order_by(NumberingRule.priority, NumberingRule.id)
        async with self._session_factory() as session:
            if filters.document_type_code is not None:
                rows = [
                    r
                    for r in (await session.execute(stmt)).scalars().all()
                    if filters.document_type_code in r.document_type_codes
                ]
                return rows[offset : offset + limit], len(rows)

            total = int(
                (await session.execute(select(func.count()).select_from(NumberingRule).where(*conditions))).scalar_one()
            )
            rows = (await session.execute(stmt.limit(limit).offset(offset))).scalars().all()
        return list(rows), total
