"""Unit tests for XpCurveCalculator."""

from progression.core.config import settings
from progression.models.xp_curve import XpCurveDefinition, XpCurveType
from progression.services.xp_curve import (
    XP_CEILING,
    XP_FLOOR,
    XpCurveCalculator,
    previews_to_rows,
)


class TestCalculateXpForLevel:
    """Tests for per-level XP requirements."""

    def test_linear(self, xp_calculator: XpCurveCalculator):
        """Test the linear curve."""
        curve = XpCurveDefinition(base_xp=100, linear_multiplier=50)
        assert [xp_calculator.calculate_xp_for_level(curve, level) for level in (1, 2, 5)] == [
            100,
            150,
            300,
        ]

    def test_linear_truncates(self, xp_calculator: XpCurveCalculator):
        """Test that fractional linear results are truncated."""
        curve = XpCurveDefinition(base_xp=10.9, linear_multiplier=0.5)
        assert xp_calculator.calculate_xp_for_level(curve, 2) == 11

    def test_exponential(self, xp_calculator: XpCurveCalculator):
        """Test the exponential curve."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.EXPONENTIAL, base_xp=100, exponential_base=2
        )
        assert [xp_calculator.calculate_xp_for_level(curve, level) for level in (1, 2, 3)] == [
            100,
            200,
            400,
        ]

    def test_exponential_truncates(self, xp_calculator: XpCurveCalculator):
        """Test that fractional exponential results are truncated."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.EXPONENTIAL, base_xp=100, exponential_base=1.5
        )
        assert xp_calculator.calculate_xp_for_level(curve, 3) == 225
        assert xp_calculator.calculate_xp_for_level(curve, 4) == 337

    def test_custom_formula(self, xp_calculator: XpCurveCalculator):
        """Test a custom formula over Level and BaseXP."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, base_xp=100, formula="Level ^ 2 * BaseXP"
        )
        assert xp_calculator.calculate_xp_for_level(curve, 3) == 900

    def test_custom_formula_case_insensitive(self, xp_calculator: XpCurveCalculator):
        """Test that bindings match regardless of case."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, base_xp=50, formula="level * basexp"
        )
        assert xp_calculator.calculate_xp_for_level(curve, 2) == 100

    def test_custom_formula_fallback_on_failure(self, xp_calculator: XpCurveCalculator):
        """Test that an unevaluable formula falls back to level * 100."""
        curve = XpCurveDefinition(curve_type=XpCurveType.CUSTOM_FORMULA, formula="Level * Foo")
        assert xp_calculator.calculate_xp_for_level(curve, 7) == 700

    def test_custom_formula_fallback_on_infinite_result(self, xp_calculator: XpCurveCalculator):
        """Test that a result too large for an integer falls back."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, formula="1e308 * 10 * Level"
        )
        assert xp_calculator.calculate_xp_for_level(curve, 2) == 200

    def test_custom_formula_fallback_per_level(self, xp_calculator: XpCurveCalculator):
        """Test that fallback applies only at the level that fails."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, formula="Level * 100 / (Level - 2)"
        )
        previews = xp_calculator.generate_previews(curve, max_level=3)
        assert [p.xp_required for p in previews] == [-100, 200, 300]

    def test_custom_formula_long_chain(self, xp_calculator: XpCurveCalculator):
        """Test a custom formula summing Level six hundred times."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, formula=" + ".join(["Level"] * 600)
        )
        assert xp_calculator.calculate_xp_for_level(curve, 2) == 1200

    def test_custom_formula_fallback_on_deep_nesting(self, xp_calculator: XpCurveCalculator):
        """Test that a formula nested too deeply falls back."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA,
            formula="abs(" * 5000 + "Level" + ")" * 5000,
        )
        assert xp_calculator.calculate_xp_for_level(curve, 3) == 300

    def test_linear_saturates(self, xp_calculator: XpCurveCalculator):
        """Test that an infinite linear result clamps to the XP ceiling."""
        curve = XpCurveDefinition(base_xp=1e308, linear_multiplier=1e308)
        assert xp_calculator.calculate_xp_for_level(curve, 3) == XP_CEILING

    def test_exponential_saturates(self, xp_calculator: XpCurveCalculator):
        """Test that overflowing growth clamps to the XP range."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.EXPONENTIAL, base_xp=100, exponential_base=10
        )
        assert xp_calculator.calculate_xp_for_level(curve, 400) == XP_CEILING

        curve.exponential_base = -10
        assert xp_calculator.calculate_xp_for_level(curve, 400) == XP_FLOOR
        assert xp_calculator.calculate_xp_for_level(curve, 401) == XP_CEILING



class TestGeneratePreviews:
    """Tests for XP preview generation."""

    def test_linear_previews(self, xp_calculator: XpCurveCalculator):
        """Test per-level and cumulative XP for a linear curve."""
        curve = XpCurveDefinition(base_xp=100, linear_multiplier=50)
        previews = xp_calculator.generate_previews(curve, max_level=3)
        assert [p.level for p in previews] == [1, 2, 3]
        assert [p.xp_required for p in previews] == [100, 150, 200]
        assert [p.total_xp for p in previews] == [100, 250, 450]

    def test_default_length(self, xp_calculator: XpCurveCalculator):
        """Test that the preview length defaults to the configured maximum."""
        previews = xp_calculator.generate_previews(XpCurveDefinition())
        assert len(previews) == settings.xp_preview_max_level

    def test_exponential_totals_non_decreasing(self, xp_calculator: XpCurveCalculator):
        """Test that cumulative XP never decreases for a non-negative curve."""
        curve = XpCurveDefinition(curve_type=XpCurveType.EXPONENTIAL)
        totals = [p.total_xp for p in xp_calculator.generate_previews(curve, max_level=20)]
        assert totals == sorted(totals)

    def test_long_exponential_preview(self, xp_calculator: XpCurveCalculator):
        """Test that a preview far past float range completes and stays ordered."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.EXPONENTIAL, base_xp=100, exponential_base=10
        )
        previews = xp_calculator.generate_previews(curve, max_level=400)
        assert len(previews) == 400
        assert previews[-1].xp_required == XP_CEILING
        totals = [p.total_xp for p in previews]
        assert totals == sorted(totals)


    def test_empty_preview(self, xp_calculator: XpCurveCalculator):
        """Test a zero-length preview."""
        assert xp_calculator.generate_previews(XpCurveDefinition(), max_level=0) == []

    def test_previews_to_rows(self, xp_calculator: XpCurveCalculator):
        """Test flattening previews into dicts."""
        curve = XpCurveDefinition(base_xp=100, linear_multiplier=50)
        rows = previews_to_rows(xp_calculator.generate_previews(curve, max_level=2))
        assert rows == [
            {"level": 1, "xp_required": 100, "total_xp": 100},
            {"level": 2, "xp_required": 150, "total_xp": 250},
        ]


class TestValidateCurveFormula:
    """Tests for custom curve validation."""

    def test_non_custom_curve_is_valid(self, xp_calculator: XpCurveCalculator):
        """Test that built-in curve types skip formula checks."""
        curve = XpCurveDefinition(formula="nonsense +")
        result = xp_calculator.validate_formula(curve)
        assert result.is_valid
        assert curve.is_formula_valid

    def test_valid_custom_formula(self, xp_calculator: XpCurveCalculator):
        """Test a valid custom formula and its sample."""
        curve = XpCurveDefinition(
            curve_type=XpCurveType.CUSTOM_FORMULA, formula="BaseXP * Level", base_xp=120
        )
        result = xp_calculator.validate_formula(curve, preview_level=2)
        assert result.is_valid
        assert result.sample_result == 240
        assert curve.formula_validation_error is None

    def test_invalid_custom_formula_recorded(self, xp_calculator: XpCurveCalculator):
        """Test that a failed check is written back to the curve."""
        curve = XpCurveDefinition(curve_type=XpCurveType.CUSTOM_FORMULA, formula="Level * Foo")
        result = xp_calculator.validate_formula(curve)
        assert not result.is_valid
        assert curve.is_formula_valid is False
        assert curve.formula_validation_error == "Unknown variable(s): Foo"

    def test_revalidation_clears_error(self, xp_calculator: XpCurveCalculator):
        """Test that fixing the formula clears the recorded error."""
        curve = XpCurveDefinition(curve_type=XpCurveType.CUSTOM_FORMULA, formula="Level *")
        xp_calculator.validate_formula(curve)
        assert curve.is_formula_valid is False

        curve.formula = "Level * 2"
        xp_calculator.validate_formula(curve)
        assert curve.is_formula_valid is True
        assert curve.formula_validation_error is None
