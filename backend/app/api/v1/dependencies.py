from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.db import get_sessionmaker
from app.services.numbering import NumberGenerator
from app.services.numbering_errors import (
    DuplicateNumber,
    NoApplicableRule,
    NumberingError,
    RequestValidationError,
    RuleValidationError,
    SequenceExhausted,
    TemplateError,
)
from app.services.rule_store import RuleStore, SqlRuleStore


def get_rule_store(request: Request) -> RuleStore:
    # Set by create_app(number_lookup=...); without it number_exists is always False.
    lookup = getattr(request.app.state, "number_lookup", None)
    return SqlRuleStore(get_sessionmaker(), number_lookup=lookup)


def get_number_generator(request: Request) -> NumberGenerator:
    return NumberGenerator(get_rule_store(request), settings=get_settings())


def http_error(exc: NumberingError | SQLAlchemyError) -> HTTPException:
    if isinstance(exc, SQLAlchemyError):
        return HTTPException(status_code=503, detail="Storage unavailable")
    if isinstance(exc, RequestValidationError):
        return HTTPException(status_code=422, detail={"field": exc.field, "message": str(exc)})
    if isinstance(exc, (RuleValidationError, TemplateError)):
        return HTTPException(status_code=422, detail={"error": type(exc).__name__, "message": str(exc)})
    if isinstance(exc, NoApplicableRule):
        return HTTPException(status_code=404, detail={"error": type(exc).__name__, "message": str(exc)})
    if isinstance(exc, (SequenceExhausted, DuplicateNumber)):
        return HTTPException(status_code=409, detail={"error": type(exc).__name__, "message": str(exc)})
    return HTTPException(status_code=400, detail={"error": type(exc).__name__, "message": str(exc)})
