"""
feedback.py

Collects user feedback on extractions (was the detected document
type right, were the values right) so prompt changes can be judged
against real mistakes.

Entries are kept in memory for the life of the process and logged.
"""

from collections import Counter
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class TrainingFeedbackService:
    """
    TrainingFeedbackService stores feedback entries and summarises them.

    Safe to share between request threads.
    """

    def __init__(self):
        self._entries: List[Dict[str, Any]] = []
        self._lock = Lock()

    def record(
        self,
        *,
        ai_detected_type: Optional[str],
        user_corrected_type: Optional[str],
        extracted_data: Optional[Dict[str, Any]] = None,
        is_correct: Optional[bool] = None,
        image_data: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Store one feedback entry.

        Parameters:
        - ai_detected_type: category the model picked
        - user_corrected_type: category the user says is right
        - extracted_data: values shown to the user
        - is_correct: whether the user accepted the values
        - image_data: source image (only its size is kept)

        Returns:
        - the stored entry
        """

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "ai_detected": ai_detected_type,
            "user_corrected": user_corrected_type,
            "correction_needed": (
                user_corrected_type is not None
                and ai_detected_type != user_corrected_type
            ),
            "extracted_data": extracted_data,
            "accuracy": is_correct,
            "image_size": len(image_data) if image_data else 0,
        }

        with self._lock:
            self._entries.append(entry)

        logger.info(f"Training feedback recorded: {entry['ai_detected']} / accuracy={is_correct}")

        if entry["correction_needed"]:
            logger.warning(
                f"Document type corrected: {ai_detected_type} -> {user_corrected_type}, "
                f"data: {extracted_data}"
            )

        return entry

    def stats(self) -> Dict[str, Any]:
        """
        Summarise feedback received so far.

        Returns:
        - total_analyses: number of entries
        - accuracy_rate: share of rated entries marked correct
        - common_errors: misclassifications, most frequent first
        - improvement_suggestions: one hint per recurring misclassification
        """

        with self._lock:
            entries = list(self._entries)

        rated = [entry["accuracy"] for entry in entries if entry["accuracy"] is not None]
        accuracy_rate = round(sum(1 for ok in rated if ok) / len(rated), 3) if rated else 0.0

        errors = Counter(
            (entry["ai_detected"], entry["user_corrected"])
            for entry in entries
            if entry["correction_needed"]
        )

        common_errors = [
            {"detected": detected, "corrected": corrected, "count": count}
            for (detected, corrected), count in errors.most_common()
        ]

        suggestions = [
            f"{count} document(s) detected as {detected} were {corrected}: "
            "review the classification prompt"
            for (detected, corrected), count in errors.most_common()
            if count > 1
        ]

        return {
            "total_analyses": len(entries),
            "accuracy_rate": accuracy_rate,
            "common_errors": common_errors,
            "improvement_suggestions": suggestions,
        }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# Shared instance used by the API routes
feedback_service = TrainingFeedbackService()
