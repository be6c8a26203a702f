"""Stat definition model."""

from typing import Optional

from pydantic import BaseModel, Field


class StatDefinition(BaseModel):
    """
    A character stat.

    Base stats (STR, INT, ...) grow linearly with level. Derived stats
    (HP, Mana, ...) are computed by a formula over other stats.
    """

    name: str = Field(..., min_length=1, description="Stat name as used in formulas")
    description: str = Field(default="", description="Stat description")

    # Base stats
    base_value: Optional[int] = Field(None, description="Value at level 0")
    growth_per_level: Optional[int] = Field(None, description="Gain per level")
    min_value: Optional[int] = Field(None, description="Lower clamp")
    max_value: Optional[int] = Field(None, description="Upper clamp")

    # Derived stats
    formula: Optional[str] = Field(None, description="Formula for derived stats")

    # Validation state, written by StatService
    is_formula_valid: bool = Field(default=True)
    formula_validation_error: Optional[str] = Field(default=None)
    sample_value: Optional[float] = Field(default=None)

    @property
    def is_derived(self) -> bool:
        return bool(self.formula and self.formula.strip())

    def value_at_level(self, level: int) -> int:
        """Value of a base stat at ``level``; unset fields default to 10 base, 0 growth."""
        base = self.base_value if self.base_value is not None else 10
        growth = self.growth_per_level or 0
        return base + growth * level
