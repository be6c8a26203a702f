"""Editor services built on the formula engine."""

from progression.services.skills import SkillService
from progression.services.stats import StatService, build_test_values, derived_sample_values
from progression.services.xp_curve import XpCurveCalculator, previews_to_rows

__all__ = [
    "SkillService",
    "StatService",
    "XpCurveCalculator",
    "build_test_values",
    "derived_sample_values",
    "previews_to_rows",
]
