"""XP curve service for level progression previews."""

import math
from typing import Any

from progression.core.config import settings
from progression.core.exceptions import FormulaEvaluationError
from progression.core.logging import LoggerMixin
from progression.formula.validator import FormulaValidator, get_validator
from progression.models.formula import ValidationResult
from progression.models.xp_curve import XpCurveDefinition, XpCurveType, XpLevelPreview

# Names a custom XP formula may reference
XP_FORMULA_VARIABLES: tuple[str, ...] = ("Level", "BaseXP")

# Built-in curves saturate at the signed 64-bit range
XP_CEILING = 2**63 - 1
XP_FLOOR = -(2**63)


def saturate_xp(value: float) -> int:
    """Truncate toward zero, clamped to the XP range. NaN counts as no XP."""
    if math.isnan(value):
        return 0
    return int(max(XP_FLOOR, min(XP_CEILING, value)))


def _growth(base: float, exponent: int) -> float:
    try:
        return float(base) ** exponent
    except OverflowError:
        return -math.inf if base < 0 and exponent % 2 else math.inf


class XpCurveCalculator(LoggerMixin):
    """Computes XP requirements per level from a curve definition."""

    def __init__(self, validator: FormulaValidator | None = None):
        self._validator = validator or get_validator()

    def calculate_xp_for_level(self, curve: XpCurveDefinition, level: int) -> int:
        """
        XP required to reach ``level``.

        Linear and exponential results are truncated toward zero and clamped
        to the signed 64-bit range. A custom formula that cannot be evaluated
        falls back to a flat amount per level instead of raising, so
        half-typed formulas still give a preview.

        Args:
            curve: Curve definition
            level: Level, starting at 1

        Returns:
            XP required for that level
        """
        if curve.curve_type is XpCurveType.LINEAR:
            return saturate_xp(curve.base_xp + (level - 1) * curve.linear_multiplier)
        if curve.curve_type is XpCurveType.EXPONENTIAL:
            return saturate_xp(curve.base_xp * _growth(curve.exponential_base, level - 1))
        return self._calculate_custom_xp(curve, level)

    def generate_previews(
        self, curve: XpCurveDefinition, max_level: int | None = None
    ) -> list[XpLevelPreview]:
        """
        Per-level XP and cumulative totals for levels 1..max_level.

        Cumulative totals never decrease for linear and exponential curves
        with non-negative parameters. Custom formulas can return negative
        amounts, so no such guarantee holds for them.

        Args:
            curve: Curve definition
            max_level: Highest level to include (defaults to the configured
                preview length)

        Returns:
            One preview per level
        """
        if max_level is None:
            max_level = settings.xp_preview_max_level

        previews = []
        total_xp = 0
        for level in range(1, max_level + 1):
            xp_required = self.calculate_xp_for_level(curve, level)
            total_xp += xp_required
            previews.append(
                XpLevelPreview(level=level, xp_required=xp_required, total_xp=total_xp)
            )
        return previews

    def validate_formula(
        self, curve: XpCurveDefinition, preview_level: int | None = None
    ) -> ValidationResult:
        """
        Validate a custom curve's formula and record the verdict on the curve.

        Non-custom curves are always valid.

        Args:
            curve: Curve definition; its validation fields are updated
            preview_level: Level used for the sample evaluation

        Returns:
            Validation result
        """
        if preview_level is None:
            preview_level = settings.default_preview_level

        if curve.curve_type is not XpCurveType.CUSTOM_FORMULA:
            result = ValidationResult.ok()
        else:
            result = self._validator.validate(
                curve.formula,
                XP_FORMULA_VARIABLES,
                self._bindings(curve, preview_level),
            )

        curve.is_formula_valid = result.is_valid
        curve.formula_validation_error = result.error_message
        return result

    def _calculate_custom_xp(self, curve: XpCurveDefinition, level: int) -> int:
        try:
            return int(self._validator.evaluate(curve.formula, self._bindings(curve, level)))
        except (FormulaEvaluationError, OverflowError, ValueError) as e:
            self.logger.debug(
                "Custom XP formula %r failed at level %d, using fallback: %s",
                curve.formula,
                level,
                e,
            )
            return level * settings.custom_curve_fallback_xp

    @staticmethod
    def _bindings(curve: XpCurveDefinition, level: int) -> dict[str, float]:
        return {"Level": level, "BaseXP": curve.base_xp}


def previews_to_rows(previews: list[XpLevelPreview]) -> list[dict[str, Any]]:
    """Flatten previews into plain dicts for tables and charts."""
    return [preview.model_dump() for preview in previews]
