"""
validation.py

Plausibility scoring of weighing totals against the value ranges
typically seen for each document category.

The report is advisory: it is returned to the client next to the
extracted values and never blocks a submission.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union
import logging

from bascula.schemas.weighing import DocumentCategory, ValidationReport, WeighingTotals

logger = logging.getLogger(__name__)


# Inclusive (low, high) range per field, keyed by category
FieldRanges = Mapping[str, Tuple[int, int]]

EXPECTED_RANGES: Mapping[DocumentCategory, FieldRanges] = MappingProxyType({
    DocumentCategory.MESH_FRUIT: MappingProxyType({
        "scale_weight": (10000, 25000),
        "field_net_weight": (8000, 20000),
        "bunch_count": (300, 1000),
    }),
    DocumentCategory.FRUIT: MappingProxyType({
        "scale_weight": (5000, 30000),
        "field_net_weight": (4000, 25000),
        "bunch_count": (200, 1500),
    }),
})

# Human-readable field names used in warnings
FIELD_LABELS = {
    "scale_weight": "Scale weight",
    "field_net_weight": "Field net weight",
    "bunch_count": "Bunch count",
}

OUT_OF_RANGE_PENALTY = 0.2

UNRECOGNIZED_CATEGORY = "unrecognized category"


class RangeValidator:
    """
    RangeValidator scores a totals record against the expected
    range table for its category.

    The table is read once at construction and never modified.
    """

    def __init__(self, ranges: Optional[Mapping[DocumentCategory, FieldRanges]] = None):
        self.ranges = ranges if ranges is not None else EXPECTED_RANGES

    def validate(
        self,
        totals: WeighingTotals,
        category: Union[DocumentCategory, str, None]
    ) -> ValidationReport:
        """
        Score totals against the typical ranges of a category.

        What happens here:
        1. Resolve the category; unknown categories score 0 right away
        2. Start from full confidence
        3. For each field outside its inclusive range, add a warning
           and subtract the fixed penalty
        4. Floor the confidence at 0

        Parameters:
        - totals: (corrected) totals, not modified
        - category: DocumentCategory or its string value

        Returns:
        - ValidationReport with confidence and warnings

        Called by:
        - API route in bascula/api/analyze.py
        - API route in bascula/api/corrections.py
        """

        # Step 1: Unknown categories are reported, not raised
        resolved = self._resolve_category(category)
        field_ranges = self.ranges.get(resolved) if resolved is not None else None

        if field_ranges is None:
            logger.warning(f"No expected ranges for category {category!r}")
            return ValidationReport(confidence=0.0, warnings=[UNRECOGNIZED_CATEGORY])

        # Step 2: Full confidence
        confidence = 1.0
        warnings = []

        # Step 3: One penalty per out-of-range field
        for field_name, (low, high) in field_ranges.items():
            value = getattr(totals, field_name)

            if value < low or value > high:
                warnings.append(
                    f"{FIELD_LABELS[field_name]} outside typical range for {resolved.value}"
                )
                confidence -= OUT_OF_RANGE_PENALTY

        # Step 4: Round off float noise, never below zero
        confidence = max(round(confidence, 2), 0.0)

        if warnings:
            logger.info(f"Validation confidence {confidence} with warnings: {warnings}")

        return ValidationReport(confidence=confidence, warnings=warnings)

    @staticmethod
    def _resolve_category(category: Union[DocumentCategory, str, None]) -> Optional[DocumentCategory]:
        if isinstance(category, DocumentCategory):
            return category

        if not category:
            return None

        try:
            return DocumentCategory(str(category).strip().upper())
        except ValueError:
            return None
