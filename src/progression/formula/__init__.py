"""Formula engine for progression data.

Designers write balance formulas such as ``VIT * 12 + Level * 5`` or
``Max(1, 5 - SkillRank * 0.5)``. This package provides:
- Arithmetic: +, -, *, /, ^ (right-associative power), unary minus
- Built-in functions: floor, ceil, round, abs, sqrt, min, max, pow
- Static validation against the names legal in an editing context
- Evaluation against sample variable values
- Dependency tracking between derived values
"""

from progression.formula.dependencies import FormulaDependencyGraph
from progression.formula.evaluator import FormulaEvaluator, evaluate_formula
from progression.formula.functions import FUNCTION_NAMES, BuiltinFunction
from progression.formula.parser import FormulaParser
from progression.formula.scanner import extract_variables, scan_identifiers
from progression.formula.validator import (
    RESERVED_KEYWORDS,
    FormulaValidator,
    get_validator,
    validate_formula,
)

__all__ = [
    "BuiltinFunction",
    "FUNCTION_NAMES",
    "FormulaDependencyGraph",
    "FormulaEvaluator",
    "FormulaParser",
    "FormulaValidator",
    "RESERVED_KEYWORDS",
    "evaluate_formula",
    "extract_variables",
    "get_validator",
    "scan_identifiers",
    "validate_formula",
]
