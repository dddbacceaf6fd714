"""
correction.py

Heuristic repair of the three totals read from a weighing form.

The vision model reads the bottom row of the form (scale weight,
field weight, bunch count) and makes a small set of recurring
mistakes:
- Reading the two weight cells in reverse order
- Putting a weight in the bunch count cell
- Dropping the leading "1" of a five digit scale weight

This service detects those patterns and repairs them.

This file:
- Is pure: no I/O, no shared state, same input gives same output
- Never raises for any totals record
- Does NOT look at expected ranges (see validation.py)
"""

from typing import List, Optional
import logging

from bascula.schemas.weighing import CorrectionResult, DocumentCategory, WeighingTotals

# Setup logging
logger = logging.getLogger(__name__)


# A bunch count above this is never a real count
MAX_PLAUSIBLE_BUNCHES = 2000

# A "bunch count" above this is treated as a misplaced weight
MISPLACED_WEIGHT_THRESHOLD = 5000

# Scale weights below this are not plausible readings
MIN_PLAUSIBLE_SCALE_WEIGHT = 1000

# Field weights above this look like a scale weight
SCALE_LIKE_FIELD_WEIGHT = 5000

# Values at or above this are not written out in correction messages
MAX_REPORTED_VALUE = 10 ** 12


def _show(value: int) -> str:
    if value >= MAX_REPORTED_VALUE:
        return f">={MAX_REPORTED_VALUE:.0e}"
    return str(value)


class FieldCorrector:
    """
    FieldCorrector applies an ordered list of correction rules
    to a WeighingTotals record.

    Rules run once each, in a fixed order, on a working copy.
    Later rules see the output of earlier ones. Each rule that
    fires adds one message to the correction list.
    """

    def correct(
        self,
        totals: WeighingTotals,
        category: Optional[DocumentCategory] = None
    ) -> CorrectionResult:
        """
        Detect and repair known extraction mistakes.

        What happens here:
        1. Copy the three values into a working copy
        2. Swap the weights if the field weight is the larger one
        3. Move an impossible bunch count into an empty field weight
        4. Swap the weights again if their magnitudes are reversed
        5. Rebuild a scale weight that lost its leading "1"
        6. Return a new record plus the list of corrections

        Parameters:
        - totals: totals parsed from the model output
        - category: accepted for symmetry with the validator, not used

        Returns:
        - CorrectionResult with the corrected totals and messages

        Called by:
        - API route in bascula/api/analyze.py after extraction
        - API route in bascula/api/corrections.py
        """

        corrections: List[str] = []

        # Step 1: Working copy (the input record is never modified)
        scale = totals.scale_weight
        field = totals.field_net_weight
        bunches = totals.bunch_count

        # Step 2: Scale weight is the larger weight on a valid form
        if scale < field and field > 0:
            corrections.append(
                f"Swapped scale weight and field weight ({_show(scale)} <-> {_show(field)}): "
                "scale weight must be the larger one"
            )
            scale, field = field, scale

        # Step 3: A count in the thousands is a weight read into the wrong cell
        if bunches > MAX_PLAUSIBLE_BUNCHES:
            if field == 0 and bunches > MISPLACED_WEIGHT_THRESHOLD:
                corrections.append(
                    f"Moved bunch count {_show(bunches)} to field weight"
                )
                field = bunches
                bunches = 0

        # Step 4: Magnitude check, evaluated on the output of step 2
        if scale < MIN_PLAUSIBLE_SCALE_WEIGHT and field > SCALE_LIKE_FIELD_WEIGHT:
            corrections.append(
                f"Swapped scale weight and field weight ({_show(scale)} <-> {_show(field)}): "
                "values outside their typical ranges"
            )
            scale, field = field, scale

        # Step 5: "3740" read where the form says "13740"
        rebuilt = self._rebuild_truncated_scale_weight(scale, field, bunches)
        if rebuilt is not None:
            corrections.append(
                f"Rebuilt truncated scale weight {scale} -> {rebuilt}"
            )
            scale = rebuilt

        if corrections:
            logger.warning(f"Applied {len(corrections)} correction(s): {corrections}")

        # Step 6: Return a fresh record
        corrected = WeighingTotals(
            scale_weight=scale,
            field_net_weight=field,
            bunch_count=bunches
        )

        return CorrectionResult(corrected=corrected, corrections=corrections)

    def _rebuild_truncated_scale_weight(
        self,
        scale: int,
        field: int,
        bunches: int
    ) -> Optional[int]:
        """
        Return the scale weight with a leading "1" restored, or None.

        Only applies to four digit scale weights with no field weight,
        when the scale weight starts with the last three digits of the
        bunch count (the model read part of one cell into the next).
        """

        # Numeric checks first, so oversized values are never turned into text
        if not 1000 <= scale < 10000 or field != 0 or bunches < 100:
            return None

        scale_text = str(scale)
        if not scale_text.startswith(f"{bunches % 1000:03d}"):
            return None

        return int(f"1{scale_text}")
