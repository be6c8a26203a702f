"""Skill service: skill templates and formula validation."""

from collections.abc import Iterable
from uuid import uuid4

from progression.core.config import settings
from progression.core.logging import LoggerMixin
from progression.formula.validator import FormulaValidator, get_validator
from progression.models.skill import FormulaCheck, SkillDefinition, SkillType
from progression.models.stat import StatDefinition
from progression.services.stats import build_test_values, derived_sample_values

# Names legal in every skill formula, on top of the stat names
SKILL_KEYWORDS: tuple[str, ...] = ("Level", "SkillRank", "BaseValue")


class SkillService(LoggerMixin):
    """Service for skill definitions and their formulas."""

    def __init__(self, validator: FormulaValidator | None = None):
        self._validator = validator or get_validator()

    def create_active_skill(self, name: str = "NEW_SKILL") -> SkillDefinition:
        return SkillDefinition(
            name=name,
            description="New active skill",
            skill_type=SkillType.ACTIVE,
            max_rank=10,
            current_rank=1,
            damage_formula="INT * 2 + SkillRank * 5",
            mana_cost_formula="20 + SkillRank * 2",
            cooldown_formula="Max(1, 5 - SkillRank * 0.5)",
            required_level=1,
        )

    def create_passive_skill(self, name: str = "NEW_PASSIVE") -> SkillDefinition:
        return SkillDefinition(
            name=name,
            description="New passive skill",
            skill_type=SkillType.PASSIVE,
            max_rank=5,
            current_rank=1,
            passive_effect_formula="Level * SkillRank * 0.5",
            required_level=1,
        )

    def clone_skill(self, skill: SkillDefinition) -> SkillDefinition:
        """Copy a skill under a new ID and a ``_Copy`` suffixed name."""
        return skill.model_copy(
            update={"id": str(uuid4()), "name": f"{skill.name}_Copy"}, deep=True
        )

    def validate_skill_formulas(
        self,
        skill: SkillDefinition,
        stats: Iterable[StatDefinition],
        preview_level: int | None = None,
        skill_rank: int | None = None,
    ) -> dict[str, FormulaCheck]:
        """
        Validate every formula slot of a skill and record the checks on it.

        Known names are the stat names plus ``Level``, ``SkillRank`` and
        ``BaseValue``. Base stats are bound to their value at
        ``preview_level`` and derived stats to their sample values;
        ``SkillRank`` is bound to ``skill_rank`` and ``BaseValue`` to 0.
        Empty slots are valid with no preview.

        Returns:
            Check per formula field name
        """
        if preview_level is None:
            preview_level = settings.default_preview_level
        if skill_rank is None:
            skill_rank = settings.default_skill_rank

        stats = list(stats)
        known_variables = [stat.name for stat in stats] + list(SKILL_KEYWORDS)
        test_values = build_test_values(stats, preview_level)
        test_values.update(derived_sample_values(stats, test_values, self._validator))
        test_values["SkillRank"] = skill_rank

        checks: dict[str, FormulaCheck] = {}
        for field_name, formula in skill.formulas().items():
            result = self._validator.validate(formula or "", known_variables, test_values)
            checks[field_name] = FormulaCheck(
                is_valid=result.is_valid,
                error=result.error_message,
                preview=result.sample_result,
            )

        invalid = [name for name, check in checks.items() if not check.is_valid]
        if invalid:
            self.logger.debug("Skill %s has invalid formulas: %s", skill.name, invalid)

        skill.formula_checks = checks
        return checks
