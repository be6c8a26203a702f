"""
Progression - formula engine for tabletop/RPG progression data.

Validates and evaluates the balance formulas designers write for stats,
skills and XP curves, and computes level-by-level XP previews.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from progression.formula import FormulaValidator, evaluate_formula, extract_variables, validate_formula

__all__ = [
    "FormulaValidator",
    "__version__",
    "evaluate_formula",
    "extract_variables",
    "validate_formula",
]
