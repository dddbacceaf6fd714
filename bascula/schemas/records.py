"""
records.py (schemas)

Pydantic models for submitting weighing records.

Accepts two formats:
1. Analysis output: {"analysis_data": {...model JSON...}}
2. Reviewed values: {"totals": {...}, "category": "FRUIT"}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from bascula.schemas.weighing import DocumentCategory, WeighingTotals


class SubmitRecordRequest(BaseModel):
    """
    Request schema for POST /send-to-database.

    When both formats are sent, the explicit totals win (they are
    the values the user reviewed).
    """

    analysis_data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Parsed model output containing a 'totales' object"
    )

    totals: Optional[WeighingTotals] = Field(
        default=None,
        description="Reviewed totals"
    )

    category: Optional[DocumentCategory] = Field(
        default=None,
        description="Document type; inferred from analysis_data when missing"
    )

    image: Optional[str] = Field(
        default=None,
        description="Source photo (data URL) to archive with the record"
    )

    @model_validator(mode="after")
    def validate_data_present(self):
        """
        Ensure either analysis_data or totals is provided.
        """

        if self.totals is None and not self.analysis_data:
            raise ValueError("Either 'analysis_data' or 'totals' field is required")

        return self


class SubmitRecordResponse(BaseModel):
    """Response schema for POST /send-to-database."""

    success: bool = Field(..., description="Whether the record was created")

    message: str = Field(default="", description="Human-readable outcome")

    record_id: Optional[str] = Field(
        default=None,
        description="Id of the new record"
    )

    image_url: Optional[str] = Field(
        default=None,
        description="Archived photo URL, null when archiving is off"
    )

    category: DocumentCategory

    tipo_peso: str = Field(..., description="Label written to the record table")

    totals: WeighingTotals
