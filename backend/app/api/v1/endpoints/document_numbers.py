from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.dependencies import get_number_generator, http_error
from app.schemas.numbering import GeneratedNumberOut, NumberRequestIn
from app.services.numbering import NumberGenerator, NumberRequest
from app.services.numbering_errors import NumberingError


router = APIRouter()


@router.post("", response_model=GeneratedNumberOut, status_code=201)
async def generate_document_number(
    data: NumberRequestIn,
    generator: NumberGenerator = Depends(get_number_generator),
) -> GeneratedNumberOut:
    request = NumberRequest(
        document_type_code=data.document_type_code,
        department_code=data.department_code,
        created_date=data.created_date,
        created_by=data.created_by,
    )
    try:
        generated = await generator.generate_document_number(request)
    except (NumberingError, SQLAlchemyError) as e:
        raise http_error(e) from e
    except TimeoutError as e:
        raise HTTPException(status_code=504, detail="Number generation timed out") from e
    return GeneratedNumberOut.model_validate(generated)
