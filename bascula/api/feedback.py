"""
feedback.py (API)

Training feedback endpoints.

- POST /training-feedback - Record whether an extraction was right
- GET /training-feedback - Accuracy statistics so far
"""

from fastapi import APIRouter, status

from bascula.schemas.feedback import (
    TrainingFeedbackRequest,
    TrainingFeedbackResponse,
    TrainingStatsResponse,
)
from bascula.services.feedback import feedback_service

router = APIRouter()


@router.post(
    "",
    response_model=TrainingFeedbackResponse,
    status_code=status.HTTP_200_OK,
    summary="Record extraction feedback"
)
async def record_feedback(request: TrainingFeedbackRequest):
    entry = feedback_service.record(
        ai_detected_type=request.ai_detected_type,
        user_corrected_type=request.user_corrected_type,
        extracted_data=request.extracted_data,
        is_correct=request.is_correct,
        image_data=request.image_data
    )

    return TrainingFeedbackResponse(
        success=True,
        message="Feedback recorded",
        correction_needed=entry["correction_needed"]
    )


@router.get(
    "",
    response_model=TrainingStatsResponse,
    status_code=status.HTTP_200_OK,
    summary="Extraction accuracy statistics"
)
def feedback_stats():
    return feedback_service.stats()
