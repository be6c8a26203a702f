"""Editor data models."""

from progression.models.formula import FormulaErrorKind, ValidationResult
from progression.models.skill import SKILL_FORMULA_FIELDS, FormulaCheck, SkillDefinition, SkillType
from progression.models.stat import StatDefinition
from progression.models.xp_curve import XpCurveDefinition, XpCurveType, XpLevelPreview

__all__ = [
    "FormulaCheck",
    "FormulaErrorKind",
    "SKILL_FORMULA_FIELDS",
    "SkillDefinition",
    "SkillType",
    "StatDefinition",
    "ValidationResult",
    "XpCurveDefinition",
    "XpCurveType",
    "XpLevelPreview",
]
