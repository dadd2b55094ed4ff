from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date

from app.core.config import Settings, get_settings
from app.models.numbering_rule import NumberingRule
from app.services.numbering_errors import DuplicateNumber, RequestValidationError
from app.services.rule_resolver import RuleResolver
from app.services.rule_store import RuleStore
from app.services.sequences import SequenceAllocator
from app.services.templates import RenderContext, render


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NumberRequest:
    document_type_code: str
    department_code: str
    created_date: date
    created_by: int

    def validate(self) -> None:
        if not self.document_type_code.strip():
            raise RequestValidationError("document_type_code", "Document type code must not be empty")
        if not self.department_code.strip():
            raise RequestValidationError("department_code", "Department code must not be empty")
        if self.created_by < 1:
            raise RequestValidationError("created_by", "created_by must be a positive id")

    def normalized(self) -> NumberRequest:
        return replace(
            self,
            document_type_code=self.document_type_code.strip(),
            department_code=self.department_code.strip(),
        )


@dataclass(frozen=True)
class GeneratedNumber:
    document_number: str
    rule_id: int
    sequence_number: int
    template_used: str


class NumberGenerator:
    """
    Issues document numbers: resolve rule -> allocate sequence -> render.

    Every call consumes a sequence value. A value allocated before a later failure
    (render error, deadline, caller rollback) stays consumed.
    """

    def __init__(self, store: RuleStore, *, settings: Settings | None = None) -> None:
        self._store = store
        self._resolver = RuleResolver(store)
        self._allocator = SequenceAllocator(store)
        self._settings = settings or get_settings()

    async def generate_document_number(
        self,
        request: NumberRequest,
        *,
        timeout: float | None = None,
    ) -> GeneratedNumber:
        if timeout is None:
            timeout = self._settings.numbering_generation_timeout_seconds
        if timeout is None:
            return await self._generate(request)
        async with asyncio.timeout(timeout):
            return await self._generate(request)

    async def _generate(self, request: NumberRequest) -> GeneratedNumber:
        request.validate()
        # Codes match rules and counter scopes without surrounding whitespace.
        request = request.normalized()

        rule = await self._resolver.resolve(
            document_type_code=request.document_type_code,
            department_code=request.department_code,
            on_date=request.created_date,
        )

        attempts = self._settings.numbering_duplicate_max_attempts if self._settings.numbering_duplicate_check else 1
        for attempt in range(1, attempts + 1):
            generated = await self._issue(rule, request)
            if not self._settings.numbering_duplicate_check:
                return generated
            if not await self._store.number_exists(generated.document_number):
                return generated
            logger.warning(
                "Generated number %s already exists (rule %s, attempt %s/%s)",
                generated.document_number,
                rule.id,
                attempt,
                attempts,
            )

        raise DuplicateNumber(f"Every generated number already existed after {attempts} attempts (rule {rule.id})")

    async def _issue(self, rule: NumberingRule, request: NumberRequest) -> GeneratedNumber:
        year = request.created_date.year
        month = request.created_date.month
        sequence = await self._allocator.allocate(
            rule,
            year=year,
            month=month,
            department_code=request.department_code,
        )
        document_number = render(
            rule.template,
            RenderContext(
                year=year,
                month=month,
                sequence=sequence,
                default_width=rule.sequence_width,
                department_code=request.department_code,
                document_type_code=request.document_type_code,
            ),
        )
        logger.info(
            "Issued %s (rule %s, seq %s, dept %s, by %s)",
            document_number,
            rule.id,
            sequence,
            request.department_code,
            request.created_by,
        )
        return GeneratedNumber(
            document_number=document_number,
            rule_id=rule.id,
            sequence_number=sequence,
            template_used=rule.template,
        )
