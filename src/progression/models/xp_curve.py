"""XP curve models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class XpCurveType(str, Enum):
    """How XP required per level is computed."""

    LINEAR = "Linear"
    EXPONENTIAL = "Exponential"
    CUSTOM_FORMULA = "CustomFormula"


class XpCurveDefinition(BaseModel):
    """
    XP curve with tuning parameters.

    ``formula`` is only used when ``curve_type`` is CUSTOM_FORMULA; it may
    reference ``Level`` and ``BaseXP``.
    """

    curve_type: XpCurveType = Field(default=XpCurveType.LINEAR)
    base_xp: float = Field(default=100, description="XP required for level 1")
    linear_multiplier: float = Field(default=100, description="Extra XP per level (Linear)")
    exponential_base: float = Field(default=1.15, description="Growth factor (Exponential)")
    formula: str = Field(default="Level * 100", description="Custom formula")

    # Validation state, written by XpCurveCalculator
    is_formula_valid: bool = Field(default=True)
    formula_validation_error: Optional[str] = Field(default=None)


class XpLevelPreview(BaseModel):
    """XP needed for one level and the running total up to it."""

    level: int
    xp_required: int
    total_xp: int
