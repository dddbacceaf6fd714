"""
analysis.py (schemas)

Pydantic models for the image analysis and correction endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from bascula.schemas.weighing import DocumentCategory, ValidationReport, WeighingTotals


class AnalyzeImageRequest(BaseModel):
    """
    Request schema for POST /analyze-image.

    The image is the data URL produced by the camera page.
    """

    image: Optional[str] = Field(
        default=None,
        description="Photographed form as a data URL or bare base64 string",
        examples=["data:image/jpeg;base64,/9j/4AAQSkZJRg..."]
    )

    category: Optional[DocumentCategory] = Field(
        default=None,
        description="Skip classification when the document type is already known"
    )


class AnalyzeImageResponse(BaseModel):
    """
    Response schema for the analysis endpoints.

    Contains what the model read, the corrected totals and an
    advisory validation report.
    """

    success: bool = Field(..., description="Whether analysis succeeded")

    category: DocumentCategory = Field(..., description="Detected document type")

    extracted_info: str = Field(
        ...,
        description="Raw model response, unmodified"
    )

    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Model response parsed as JSON"
    )

    extracted_totals: WeighingTotals = Field(
        ...,
        description="Totals as read by the model"
    )

    totals: WeighingTotals = Field(
        ...,
        description="Totals after automatic correction"
    )

    corrections: List[str] = Field(
        default_factory=list,
        description="Corrections applied, in order"
    )

    validation: ValidationReport = Field(
        ...,
        description="Advisory range check of the corrected totals"
    )


class CorrectionRequest(BaseModel):
    """Request schema for POST /corrections/correct."""

    totals: WeighingTotals

    category: Optional[DocumentCategory] = None


class ValidationRequest(BaseModel):
    """
    Request schema for POST /corrections/validate.

    The category is a plain string so unknown values are reported
    in the response instead of being rejected.
    """

    totals: WeighingTotals

    category: str = Field(..., examples=["FRUIT", "MESH_FRUIT"])
