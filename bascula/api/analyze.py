"""
analyze.py (API Route)

This file defines the image analysis endpoints.

What this file does:
- Accepts a photographed weighing form (data URL or file upload)
- Calls VisionExtractorService to classify and read the form
- Parses the three totals from the model output
- Applies automatic corrections and an advisory range check
- Returns everything as JSON

What this file does NOT do:
- Save anything (see records.py)
- Block on validation warnings (they are advisory)

Flow:
Camera page → This API → Vision model → Parse → Correct → Validate → Return JSON
"""

from typing import Optional
import logging

from fastapi import APIRouter, UploadFile, File, HTTPException, status

from bascula.schemas.analysis import AnalyzeImageRequest, AnalyzeImageResponse
from bascula.schemas.weighing import DocumentCategory
from bascula.services.correction import FieldCorrector
from bascula.services.parsing import ExtractionParser
from bascula.services.validation import RangeValidator
from bascula.services.vision import VisionExtractorService
from bascula.config import (
    OPENAI_API_KEY,
    VISION_MODEL,
    VISION_MAX_TOKENS,
    CLASSIFY_MAX_TOKENS,
)

logger = logging.getLogger(__name__)

# Create a router for analysis endpoints
# This router will be registered in main.py
router = APIRouter()


@router.post(
    "",
    response_model=AnalyzeImageResponse,
    status_code=status.HTTP_200_OK,
    summary="Analyze a photographed weighing form",
    description=(
        "Send the form photo as a data URL. The service detects the form type, "
        "reads the totals row, corrects common reading mistakes and returns "
        "the totals with an advisory confidence score."
    )
)
async def analyze_image(request: AnalyzeImageRequest):
    """
    Analysis endpoint used by the camera page.

    Errors:
    - 400 Bad Request: no image
    - 422 Unprocessable Entity: model output is not JSON
    - 500 Internal Server Error: model not configured or failed
    """

    # Step 1: Validate that an image was sent
    if not request.image or not request.image.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image provided"
        )

    return _run_analysis(request.image, request.category)


@router.post(
    "/upload",
    response_model=AnalyzeImageResponse,
    status_code=status.HTTP_200_OK,
    summary="Analyze an uploaded form image",
    description="Same as POST /analyze-image, with the photo sent as multipart/form-data."
)
async def analyze_uploaded_image(file: UploadFile = File(...)):
    """
    Analysis endpoint for file uploads (PNG, JPG, WEBP...).

    Errors:
    - 400 Bad Request: file missing, empty or not an image
    - 422 / 500: as POST /analyze-image
    """

    # Step 1: Validate that a filename exists
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image file is required"
        )

    # Step 2: Read the file into memory
    file_bytes = await file.read()

    # Step 3: Ensure the uploaded file is not empty
    if not file_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded image is empty"
        )

    # Step 4: Make sure it is an image and build the data URL
    try:
        image = VisionExtractorService.bytes_to_data_url(file_bytes)
    except ValueError as error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(error)
        )

    return _run_analysis(image, None)


def _run_analysis(image: str, category: Optional[DocumentCategory]) -> AnalyzeImageResponse:
    """
    Shared pipeline for both analysis endpoints.

    What happens here:
    1. Check the vision model is configured
    2. Classify and read the form
    3. Parse the model output into totals
    4. Correct the totals
    5. Score the corrected totals (advisory)
    """

    # Step 1: Check OpenAI API key is configured
    if not OPENAI_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Vision service not configured"
        )

    # Step 2: Classify and read the form
    try:
        vision = VisionExtractorService(
            api_key=OPENAI_API_KEY,
            model=VISION_MODEL,
            max_tokens=VISION_MAX_TOKENS,
            classify_max_tokens=CLASSIFY_MAX_TOKENS
        )
        category, raw_text = vision.analyze(image, category)

    except RuntimeError as error:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process the image: {str(error)}"
        )

    # Step 3: Parse totals
    parser = ExtractionParser()
    try:
        payload = parser.parse_model_output(raw_text)
    except ValueError as error:
        raise HTTPException(
            status_code=422,
            detail=str(error)
        )

    extracted_totals = parser.totals_from_payload(payload)

    # Step 4: Correct
    result = FieldCorrector().correct(extracted_totals, category)

    # Step 5: Advisory validation
    report = RangeValidator().validate(result.corrected, category)

    logger.info(
        f"Analysis done: {category.value}, {len(result.corrections)} correction(s), "
        f"confidence {report.confidence}"
    )

    return AnalyzeImageResponse(
        success=True,
        category=category,
        extracted_info=raw_text,
        data=payload,
        extracted_totals=extracted_totals,
        totals=result.corrected,
        corrections=result.corrections,
        validation=report
    )
