"""
corrections.py (API)

Exposes the correction and validation logic on its own, for clients
that let users edit the totals before submitting.

Endpoints:
- POST /corrections/correct - Apply the automatic corrections
- POST /corrections/validate - Range check against a document type
"""

from fastapi import APIRouter, status

from bascula.schemas.analysis import CorrectionRequest, ValidationRequest
from bascula.schemas.weighing import CorrectionResult, ValidationReport
from bascula.services.correction import FieldCorrector
from bascula.services.validation import RangeValidator

router = APIRouter()

corrector = FieldCorrector()
validator = RangeValidator()


@router.post(
    "/correct",
    response_model=CorrectionResult,
    status_code=status.HTTP_200_OK,
    summary="Correct weighing totals",
    description="Apply the automatic corrections for swapped, misplaced and truncated values."
)
async def correct_totals(request: CorrectionRequest):
    return corrector.correct(request.totals, request.category)


@router.post(
    "/validate",
    response_model=ValidationReport,
    status_code=status.HTTP_200_OK,
    summary="Check totals against typical ranges",
    description=(
        "Score totals against the typical ranges of a document type. "
        "An unknown type returns confidence 0 with a warning."
    )
)
async def validate_totals(request: ValidationRequest):
    return validator.validate(request.totals, request.category)
