"""
parsing.py

Turns the raw text returned by the vision model into the
strongly-typed records used by the rest of the service.

The model is asked for JSON, but in practice:
- The JSON is often wrapped in Markdown code fences
- Key spellings vary (with and without accents, spaces or underscores)
- Numbers come back as strings with separators ("13.940", "13 940")
- Empty cells come back as "", null or are missing

This service resolves all of that before the corrector runs, so
the corrector only ever sees three integers.
"""

import json
import re
from typing import Any, Dict, Optional, Sequence
import logging

from bascula.schemas.weighing import DocumentCategory, WeighingTotals

logger = logging.getLogger(__name__)


# Candidate keys inside "totales", in priority order
SCALE_WEIGHT_KEYS = ("peso_bascula", "peso_báscula", "peso bascula", "peso báscula")
FIELD_WEIGHT_KEYS = ("peso_neto_campo", "peso_campo", "peso neto campo", "peso en campo")
BUNCH_COUNT_KEYS = ("total_racimos", "racimos", "total racimos")

# Keys that may carry the document title or detected type
DOCUMENT_TYPE_KEYS = ("tipo_documento", "tipo_detectado")


class ExtractionParser:
    """
    ExtractionParser converts model output into WeighingTotals
    and a DocumentCategory.

    Main responsibilities:
    - Strip Markdown and stray text around the JSON object
    - Resolve alternate key spellings for each total
    - Coerce loose values to non-negative integers (default 0)
    - Infer the document category from the payload
    """

    def parse_model_output(self, raw_text: str) -> Dict[str, Any]:
        """
        Parse the JSON object contained in a model response.

        What happens here:
        1. Remove Markdown code fences if present
        2. Keep only the outermost {...} block
        3. Parse it as JSON

        Parameters:
        - raw_text: message content returned by the vision model

        Returns:
        - Parsed JSON object as dict

        Raises:
        - ValueError if no JSON object can be parsed
        """

        if not raw_text or not raw_text.strip():
            raise ValueError("Model returned an empty response")

        result_text = raw_text.strip()

        # Step 1: Remove Markdown code blocks
        if "```json" in result_text:
            result_text = result_text.split("```json")[1].split("```")[0].strip()
        elif "```" in result_text:
            parts = result_text.split("```")
            if len(parts) >= 2:
                result_text = parts[1].strip()

        # Step 2: Extract only the JSON block
        start = result_text.find("{")
        end = result_text.rfind("}")
        if start != -1 and end != -1:
            result_text = result_text[start:end + 1]

        # Step 3: Parse JSON
        try:
            payload = json.loads(result_text)
        except json.JSONDecodeError as error:
            logger.error(f"Failed to parse JSON: {error}")
            logger.error(f"Response was: {raw_text[:500]}")
            raise ValueError("Model output is not valid JSON") from error

        if not isinstance(payload, dict):
            raise ValueError("Model output is not a JSON object")

        return payload

    def totals_from_payload(self, payload: Dict[str, Any]) -> WeighingTotals:
        """
        Build WeighingTotals from the "totales" object of a payload.

        For each field the first candidate key that is present and
        not null wins, even if its value coerces to 0.

        Parameters:
        - payload: parsed model output (or client-supplied analysis data)

        Returns:
        - WeighingTotals (all zeros when "totales" is missing)
        """

        totals = payload.get("totales")
        if not isinstance(totals, dict):
            logger.warning("Payload has no 'totales' object, using zeros")
            totals = {}

        result = WeighingTotals(
            scale_weight=self._first_integer(totals, SCALE_WEIGHT_KEYS),
            field_net_weight=self._first_integer(totals, FIELD_WEIGHT_KEYS),
            bunch_count=self._first_integer(totals, BUNCH_COUNT_KEYS)
        )

        logger.info(f"Parsed totals: {result.model_dump()}")

        return result

    def category_from_payload(
        self,
        payload: Dict[str, Any],
        default: Optional[DocumentCategory] = DocumentCategory.FRUIT
    ) -> Optional[DocumentCategory]:
        """
        Infer the document category from a payload.

        What happens here:
        1. A "mallas" section means a mesh-fruit form
        2. Otherwise look for "malla" / "fruto" in the document type fields
        3. Fall back to the given default

        Parameters:
        - payload: parsed model output
        - default: category to use when nothing in the payload decides it

        Returns:
        - DocumentCategory (or default)
        """

        # Step 1: Only mesh-fruit forms have a per-bag section
        if payload.get("mallas") is not None:
            return DocumentCategory.MESH_FRUIT

        # Step 2: Document title or detected type
        for key in DOCUMENT_TYPE_KEYS:
            value = payload.get(key)
            if not isinstance(value, str):
                continue

            text = value.strip().lower()
            if "malla" in text or text == DocumentCategory.MESH_FRUIT.value.lower():
                return DocumentCategory.MESH_FRUIT
            if "fruto" in text or text == DocumentCategory.FRUIT.value.lower():
                return DocumentCategory.FRUIT

        # Step 3: Nothing decided it
        return default

    def _first_integer(self, totals: Dict[str, Any], keys: Sequence[str]) -> int:
        for key in keys:
            value = totals.get(key)
            if value is not None:
                return self.coerce_integer(value)
        return 0

    @staticmethod
    def coerce_integer(value: Any) -> int:
        """
        Keep only the digits of a value and read them as an integer.

        Examples:
        "13.940" becomes 13940
        "735 racimos" becomes 735
        13940.0 becomes 13940
        "" becomes 0
        """

        if isinstance(value, bool):
            return 0

        if isinstance(value, float) and value.is_integer():
            value = int(value)

        try:
            digits = re.sub(r"\D", "", str(value))
            return int(digits) if digits else 0
        except ValueError:
            # Longer than the interpreter's int/str conversion limit
            logger.warning("Ignoring a value with too many digits")
            return 0
