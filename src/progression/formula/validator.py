"""Formula validation for the progression editors.

Runs cheap static checks on formula text (unknown variables, parenthesis
balance, operator adjacency) and, when sample values are supplied, evaluates
the formula to give a live preview. Checks run in a fixed order and the first
failure is the one reported.
"""

import logging
from collections.abc import Iterable, Mapping

from progression.core.exceptions import FormulaEvaluationError
from progression.formula.evaluator import FormulaEvaluator
from progression.formula.functions import is_function_name
from progression.formula.scanner import extract_variables, scan_identifiers
from progression.models.formula import FormulaErrorKind, ValidationResult

logger = logging.getLogger(__name__)

# Always legal, whatever the editing context
RESERVED_KEYWORDS: tuple[str, ...] = ("Level", "BaseValue")

BINARY_OPERATORS = frozenset("+-*/^")

EXTRA_CLOSING = "Unbalanced parentheses: extra closing parenthesis"
MISSING_CLOSING = "Unbalanced parentheses: missing closing parenthesis"
INVALID_OPERATORS = "Invalid operator sequence detected"


def find_unknown_variables(formula: str, known_variables: Iterable[str]) -> list[str]:
    """
    Return referenced names absent from the known set (plus reserved keywords).

    Comparison ignores case. Each unknown name is listed once, in order of
    first appearance.
    """
    known = {name.lower() for name in known_variables}
    known.update(keyword.lower() for keyword in RESERVED_KEYWORDS)

    unknown: list[str] = []
    for identifier in scan_identifiers(formula):
        if is_function_name(identifier):
            continue
        if identifier.lower() not in known and identifier not in unknown:
            unknown.append(identifier)
    return unknown


def check_parentheses(formula: str) -> str | None:
    """Return an error message if parentheses do not balance, else None."""
    depth = 0
    for char in formula:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if depth < 0:
            return EXTRA_CLOSING
    if depth > 0:
        return MISSING_CLOSING
    return None


def has_invalid_operator_sequence(formula: str) -> bool:
    """
    Return True if two binary operators are adjacent or the formula ends on one.

    A minus at the start, after "(" or after another operator is unary and
    resets the adjacency state, so "2 * -3" passes while "2 +* 3" does not.
    """
    last_was_operator = False
    last_char = ""

    for char in formula:
        if char.isspace():
            continue

        is_operator = char in BINARY_OPERATORS

        if char == "-" and (last_was_operator or last_char in ("(", "")):
            last_was_operator = False
            last_char = char
            continue

        if is_operator and last_was_operator:
            return True

        last_was_operator = is_operator
        last_char = char

    return last_was_operator


class FormulaValidator:
    """
    Validates and evaluates formulas.

    Stateless: a single instance can be shared by every editor.
    """

    def __init__(self, evaluator: FormulaEvaluator | None = None):
        self._evaluator = evaluator or FormulaEvaluator()

    def validate(
        self,
        formula: str,
        known_variables: Iterable[str],
        test_values: Mapping[str, float] | None = None,
    ) -> ValidationResult:
        """
        Validate a formula against the names legal in its context.

        Args:
            formula: Formula text
            known_variables: Names the formula may reference
            test_values: Optional sample bindings; when given, a valid formula
                is also evaluated and the value returned as the sample

        Returns:
            Validation result describing the first failed check, if any
        """
        if not formula or formula.isspace():
            return ValidationResult.ok()

        unknown = find_unknown_variables(formula, known_variables)
        if unknown:
            logger.debug("Unknown variables %s in %r", unknown, formula)
            return ValidationResult.failure(
                FormulaErrorKind.UNKNOWN_VARIABLE,
                f"Unknown variable(s): {', '.join(unknown)}",
                unknown_variables=unknown,
            )

        paren_error = check_parentheses(formula)
        if paren_error:
            logger.debug("%s in %r", paren_error, formula)
            return ValidationResult.failure(FormulaErrorKind.UNBALANCED_PARENTHESES, paren_error)

        if has_invalid_operator_sequence(formula):
            logger.debug("Invalid operator sequence in %r", formula)
            return ValidationResult.failure(
                FormulaErrorKind.INVALID_OPERATOR_SEQUENCE, INVALID_OPERATORS
            )

        if test_values is None:
            return ValidationResult.ok()

        try:
            sample = self._evaluator.evaluate(formula, test_values)
        except FormulaEvaluationError as e:
            logger.debug("Evaluation of %r failed: %s", formula, e.message)
            return ValidationResult.failure(
                FormulaErrorKind.EVALUATION_ERROR, f"Evaluation error: {e.message}"
            )

        return ValidationResult.ok(sample)

    def evaluate(self, formula: str, variables: Mapping[str, float]) -> float:
        """
        Evaluate a formula, raising on failure.

        Raises:
            FormulaEvaluationError: If the formula cannot be evaluated
        """
        return self._evaluator.evaluate(formula, variables)

    def extract_variables(self, formula: str) -> list[str]:
        """Return the variable names a formula references, functions excluded."""
        return extract_variables(formula)


_default_validator: FormulaValidator | None = None


def get_validator() -> FormulaValidator:
    """Return the shared validator, creating it on first use."""
    global _default_validator
    if _default_validator is None:
        _default_validator = FormulaValidator()
    return _default_validator


def validate_formula(
    formula: str,
    known_variables: Iterable[str],
    test_values: Mapping[str, float] | None = None,
) -> ValidationResult:
    """Validate a formula with the shared validator."""
    return get_validator().validate(formula, known_variables, test_values)
