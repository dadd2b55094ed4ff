from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.dependencies import get_rule_store, http_error
from app.schemas.numbering import NumberingRuleCreate, NumberingRuleOut, NumberingRulePage
from app.services.numbering_errors import NumberingError
from app.services.rule_store import RuleSearchFilters, RuleStore


router = APIRouter()


@router.post("", response_model=NumberingRuleOut, status_code=201)
async def create_numbering_rule(
    data: NumberingRuleCreate,
    store: RuleStore = Depends(get_rule_store),
) -> NumberingRuleOut:
    try:
        rule = await store.create_rule(data)
    except (NumberingError, SQLAlchemyError) as e:
        raise http_error(e) from e
    return NumberingRuleOut.model_validate(rule)


@router.get("", response_model=NumberingRulePage)
async def search_numbering_rules(
    department_code: str | None = Query(default=None),
    document_type_code: str | None = Query(default=None),
    active_on: date | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: RuleStore = Depends(get_rule_store),
) -> NumberingRulePage:
    filters = RuleSearchFilters(
        department_code=department_code,
        document_type_code=document_type_code,
        active_on=active_on,
    )
    try:
        rows, total = await store.search_rules(filters, limit=limit, offset=offset)
    except SQLAlchemyError as e:
        raise http_error(e) from e
    return NumberingRulePage(items=[NumberingRuleOut.model_validate(r) for r in rows], total=total)


@router.get("/{rule_id}", response_model=NumberingRuleOut)
async def get_numbering_rule(rule_id: int, store: RuleStore = Depends(get_rule_store)) -> NumberingRuleOut:
    try:
        rule = await store.get_rule_by_id(rule_id)
    except SQLAlchemyError as e:
        raise http_error(e) from e
    if rule is None:
        raise HTTPException(status_code=404, detail="Not found")
    return NumberingRuleOut.model_validate(rule)
