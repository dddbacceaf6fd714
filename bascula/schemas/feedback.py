"""
feedback.py (schemas)

Pydantic models for the training feedback endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrainingFeedbackRequest(BaseModel):
    """
    Feedback sent by the capture page after the user reviewed
    an extraction. Field names follow the page (camelCase).
    """

    model_config = ConfigDict(populate_by_name=True)

    image_data: Optional[str] = Field(default=None, alias="imageData")

    ai_detected_type: Optional[str] = Field(default=None, alias="aiDetectedType")

    user_corrected_type: Optional[str] = Field(default=None, alias="userCorrectedType")

    extracted_data: Optional[Dict[str, Any]] = Field(default=None, alias="extractedData")

    is_correct: Optional[bool] = Field(default=None, alias="isCorrect")


class TrainingFeedbackResponse(BaseModel):
    success: bool
    message: str
    correction_needed: bool


class MisclassificationCount(BaseModel):
    detected: Optional[str]
    corrected: Optional[str]
    count: int


class TrainingStatsResponse(BaseModel):
    total_analyses: int
    accuracy_rate: float
    common_errors: List[MisclassificationCount]
    improvement_suggestions: List[str]
