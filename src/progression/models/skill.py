"""Skill definition model."""

from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class SkillType(str, Enum):
    """Kind of skill."""

    ACTIVE = "Active"
    PASSIVE = "Passive"


class FormulaCheck(BaseModel):
    """Validation state of one formula slot."""

    is_valid: bool = True
    error: Optional[str] = None
    preview: Optional[float] = None


# Formula slots, in the order editors show them
SKILL_FORMULA_FIELDS: tuple[str, ...] = (
    "damage_formula",
    "mana_cost_formula",
    "cooldown_formula",
    "passive_effect_formula",
)


class SkillDefinition(BaseModel):
    """A learnable skill with rank-scaled formulas."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Skill ID")
    name: str = Field(..., min_length=1, description="Skill name")
    description: str = Field(default="", description="Skill description")
    skill_type: SkillType = Field(default=SkillType.ACTIVE)
    max_rank: int = Field(default=5, ge=1)
    current_rank: int = Field(default=1, ge=0)

    # Active skills
    damage_formula: Optional[str] = None
    mana_cost_formula: Optional[str] = None
    cooldown_formula: Optional[str] = None

    # Passive skills
    passive_effect_formula: Optional[str] = None

    # Prerequisites
    required_level: int = Field(default=1, ge=1)
    required_class: Optional[str] = None
    prerequisite_skill_id: Optional[str] = None

    # Validation state, keyed by formula field name; written by SkillService
    formula_checks: dict[str, FormulaCheck] = Field(
        default_factory=lambda: {name: FormulaCheck() for name in SKILL_FORMULA_FIELDS}
    )

    def formulas(self) -> dict[str, Optional[str]]:
        """Formula text per slot."""
        return {name: getattr(self, name) for name in SKILL_FORMULA_FIELDS}
