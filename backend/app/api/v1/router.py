from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.endpoints import document_numbers, numbering_rules


api_router = APIRouter()

api_router.include_router(numbering_rules.router, prefix="/numbering-rules", tags=["numbering-rules"])
api_router.include_router(document_numbers.router, prefix="/document-numbers", tags=["document-numbers"])
