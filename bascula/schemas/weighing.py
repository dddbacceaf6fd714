"""
weighing.py (schemas)

Pydantic models for the three totals printed at the bottom of a
"Control Diario Cargue de Fruto" form, and for the reports built
on top of them.

These schemas define:
- The strongly-typed totals record handed to the corrector
- The document categories we recognise
- The correction and validation results returned to clients

On the wire the totals use the Spanish keys printed on the form
(peso_bascula, peso_neto_campo, total_racimos). Python code uses
the English field names; both spellings are accepted on input.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field


class DocumentCategory(str, Enum):
    """
    Type of weighing form.

    FRUIT is the standard form, MESH_FRUIT is the variant used when
    the load is packed in mesh bags ("mallas").
    """

    FRUIT = "FRUIT"
    MESH_FRUIT = "MESH_FRUIT"

    @property
    def label(self) -> str:
        # Value written to the "Tipo Peso" column of the record table
        return "Malla Fruto" if self is DocumentCategory.MESH_FRUIT else "Fruto"


class WeighingTotals(BaseModel):
    """
    The three totals read from one photographed form.

    Instances are immutable: corrections always produce a new record.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    scale_weight: int = Field(
        default=0,
        ge=0,
        alias="peso_bascula",
        description="Gross weight measured at the fixed scale (kg)",
        examples=[13940]
    )

    field_net_weight: int = Field(
        default=0,
        ge=0,
        alias="peso_neto_campo",
        description="Net weight recorded in the field, 0 when not measured",
        examples=[0]
    )

    bunch_count: int = Field(
        default=0,
        ge=0,
        alias="total_racimos",
        description="Number of fruit bunches in the load",
        examples=[735]
    )


class CorrectionResult(BaseModel):
    """Corrected totals plus one message per correction rule that fired."""

    corrected: WeighingTotals = Field(
        ...,
        description="Totals after all correction rules were applied"
    )

    corrections: List[str] = Field(
        default_factory=list,
        description="Applied corrections, in the order the rules ran"
    )


class ValidationReport(BaseModel):
    """
    Advisory plausibility report for a totals record.

    Never used to block a submission.
    """

    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="1.0 minus 0.2 per field outside its typical range"
    )

    warnings: List[str] = Field(
        default_factory=list,
        description="One warning per out-of-range field"
    )

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.warnings
