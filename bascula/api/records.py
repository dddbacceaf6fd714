"""
records.py (API)

Weighing record submission endpoints.

Endpoints:
- POST /send-to-database - Store a weighing record (optionally with its photo)
- GET /send-to-database/bases - Check the Airtable connection

Flow:
Analysis (or user review) → This API → [blob storage] → Airtable → record id
"""

import logging

from fastapi import APIRouter, HTTPException, status

from bascula.schemas.records import SubmitRecordRequest, SubmitRecordResponse
from bascula.schemas.weighing import DocumentCategory
from bascula.services.image_archive import ImageArchiveService, decode_data_url
from bascula.services.parsing import ExtractionParser
from bascula.services.records_client import AirtableRecordsClient
from bascula.config import (
    AIRTABLE_API_KEY,
    AIRTABLE_BASE_ID,
    AIRTABLE_TABLE_ID,
    AIRTABLE_TIPO_PESO_FIELD,
    AIRTABLE_PESO_BASCULA_FIELD,
    AIRTABLE_PESO_CAMPO_FIELD,
    AIRTABLE_TOTAL_RACIMOS_FIELD,
    AIRTABLE_IMAGE_FIELD,
    BLOB_READ_WRITE_TOKEN,
    BLOB_BASE_URL,
    REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_records_client() -> AirtableRecordsClient:
    """Build the Airtable client from configuration."""

    return AirtableRecordsClient(
        api_key=AIRTABLE_API_KEY,
        base_id=AIRTABLE_BASE_ID,
        table_id=AIRTABLE_TABLE_ID,
        tipo_peso_field=AIRTABLE_TIPO_PESO_FIELD,
        peso_bascula_field=AIRTABLE_PESO_BASCULA_FIELD,
        peso_campo_field=AIRTABLE_PESO_CAMPO_FIELD,
        total_racimos_field=AIRTABLE_TOTAL_RACIMOS_FIELD,
        image_field=AIRTABLE_IMAGE_FIELD,
        timeout=REQUEST_TIMEOUT
    )


def get_image_archive() -> ImageArchiveService:
    return ImageArchiveService(
        token=BLOB_READ_WRITE_TOKEN,
        base_url=BLOB_BASE_URL,
        timeout=REQUEST_TIMEOUT
    )


@router.post(
    "",
    response_model=SubmitRecordResponse,
    status_code=status.HTTP_200_OK,
    summary="Store a weighing record",
    description=(
        "Send either the analysis output (analysis_data) or reviewed totals. "
        "The record is written to Airtable with its document type; when blob "
        "storage is configured the photo is archived and attached."
    )
)
async def send_to_database(request: SubmitRecordRequest):
    """
    Store one weighing record.

    What happens here:
    1. Take the reviewed totals, or parse them from analysis_data
    2. Resolve the document type
    3. Archive the photo if one was sent and storage is configured
    4. Create the Airtable record

    Values are stored as received: corrections are applied during
    analysis, and the user may have edited the result since.

    Errors:
    - 400 Bad Request: the photo is not valid base64
    - 500 Internal Server Error: configuration missing or upstream failure
    """

    parser = ExtractionParser()

    # Step 1 + 2: Totals and document type
    if request.totals is not None:
        totals = request.totals
        category = request.category or DocumentCategory.FRUIT
    else:
        totals = parser.totals_from_payload(request.analysis_data)
        category = request.category or parser.category_from_payload(
            request.analysis_data,
            default=DocumentCategory.FRUIT
        )

    logger.info(f"Submitting {category.label}: {totals.model_dump()}")

    try:
        # Step 3: Optional photo archiving
        image_url = None
        if request.image:
            archive = get_image_archive()
            if archive.enabled:
                image_bytes, mime_type = decode_data_url(request.image)
                image_url = archive.archive(image_bytes, mime_type)

        # Step 4: Create the record
        record = get_records_client().create_weighing_record(
            category=category,
            totals=totals,
            image_url=image_url
        )

    except ValueError as error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(error)
        )

    except RuntimeError as error:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to send to the database: {str(error)}"
        )

    return SubmitRecordResponse(
        success=True,
        message="Record stored successfully",
        record_id=record.get("id"),
        image_url=image_url,
        category=category,
        tipo_peso=category.label,
        totals=totals
    )


@router.get(
    "/bases",
    status_code=status.HTTP_200_OK,
    summary="List Airtable bases",
    description="Check the Airtable token and list the bases it can see."
)
def list_bases():
    if not AIRTABLE_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="AIRTABLE_API_KEY is not configured"
        )

    try:
        data = get_records_client().list_bases()
    except RuntimeError as error:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(error)
        )

    return {
        "success": True,
        "bases": data.get("bases", []),
        "help": "Find the 'Control Diario Cargue de Fruto' base and set AIRTABLE_BASE_ID to its id"
    }
