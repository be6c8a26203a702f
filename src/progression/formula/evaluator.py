"""Formula evaluator for the progression engine.

Substitutes bound variables into a formula, parses the result and evaluates
the AST to a float.
"""

import logging
import math
import re
import sys
from collections.abc import Mapping
from typing import Any

from progression.core.exceptions import (
    DivisionByZeroError,
    FormulaEvaluationError,
    FormulaNestingError,
    UnresolvedVariableError,
)
from progression.formula.functions import BuiltinFunction, checked_math
from progression.formula.parser import (
    FormulaParser,
    FunctionCallNode,
    NameNode,
    NumberNode,
    OperatorChainNode,
    UnaryOpNode,
    get_parser,
)

logger = logging.getLogger(__name__)

# Smallest positive subnormal double; only an exact zero divisor is below it
DIVISION_EPSILON = sys.float_info.min * sys.float_info.epsilon


def format_number(value: float) -> str:
    """Render a value as a locale-independent literal the grammar accepts."""
    literal = repr(float(value))
    if value < 0:
        return f"({literal})"
    return literal


def prepare_expression(formula: str, variables: Mapping[str, float]) -> str:
    """
    Replace every bound variable with its numeric literal.

    Matching is whole-word and case-insensitive. Longer names are replaced
    first so that ``HP`` is never substituted inside ``HPMax``.

    Args:
        formula: Formula text
        variables: Variable name to value

    Returns:
        Expression containing only numbers, operators and function calls

    Raises:
        FormulaEvaluationError: If a bound value is infinite or NaN
    """
    result = formula
    for name in sorted(variables, key=len, reverse=True):
        value = float(variables[name])
        if not math.isfinite(value):
            raise FormulaEvaluationError(
                f"Variable {name} has no finite value ({value!r})",
                details={"variable": name},
            )
        literal = format_number(value)
        result = re.sub(
            rf"\b{re.escape(name)}\b",
            lambda _match: literal,
            result,
            flags=re.IGNORECASE,
        )
    return result


class FormulaEvaluator:
    """
    Evaluates formulas against bound numeric variables.

    Holds no per-call state; one instance can serve concurrent callers.
    """

    def __init__(self, parser: FormulaParser | None = None):
        """
        Initialize evaluator.

        Args:
            parser: Parser to use (defaults to the shared parser)
        """
        self._parser = parser or get_parser()

    def evaluate(self, formula: str, variables: Mapping[str, float] | None = None) -> float:
        """
        Evaluate a formula.

        Args:
            formula: Formula text; blank formulas evaluate to 0
            variables: Variable name to value

        Returns:
            Numeric result

        Raises:
            FormulaEvaluationError: If the formula cannot be evaluated
        """
        if not formula or formula.isspace():
            return 0.0

        expression = prepare_expression(formula, variables or {})
        ast = self._parser.parse(expression)
        try:
            result = self._eval(ast)
        except RecursionError:
            raise FormulaNestingError() from None
        logger.debug("Evaluated %r as %r", formula, result)
        return result

    def _eval(self, node: Any) -> float:
        """Recursively evaluate an AST node."""
        if isinstance(node, NumberNode):
            return node.value

        if isinstance(node, NameNode):
            raise UnresolvedVariableError(node.name)

        if isinstance(node, FunctionCallNode):
            return self._eval_function(node)

        if isinstance(node, OperatorChainNode):
            return self._eval_chain(node)

        if isinstance(node, UnaryOpNode):
            return self._eval_unary(node)

        raise FormulaEvaluationError(f"Unsupported expression node: {node!r}")

    def _eval_function(self, node: FunctionCallNode) -> float:
        """Evaluate a built-in function call."""
        func = BuiltinFunction.from_name(node.name)
        args = [self._eval(arg) for arg in node.arguments]
        return func.apply(args)

    def _eval_chain(self, node: OperatorChainNode) -> float:
        """Fold an operator chain in a loop, so chain length never adds depth."""
        values = [self._eval(operand) for operand in node.operands]

        if node.operators[0] == "^":
            # Right-associative: 2^3^2 is 2^(3^2)
            result = values[-1]
            for base in reversed(values[:-1]):
                result = checked_math(math.pow, base, result)
            return result

        result = values[0]
        for op, right in zip(node.operators, values[1:]):
            result = self._apply_binary(op, result, right)
        return result

    @staticmethod
    def _apply_binary(op: str, left: float, right: float) -> float:
        """Apply one left-associative binary operator."""
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if abs(right) < DIVISION_EPSILON:
                raise DivisionByZeroError()
            return left / right

        raise FormulaEvaluationError(f"Unknown operator: {op}")

    def _eval_unary(self, node: UnaryOpNode) -> float:
        """Evaluate a unary operation."""
        operand = self._eval(node.operand)

        if node.operator == "-":
            return -operand

        raise FormulaEvaluationError(f"Unknown unary operator: {node.operator}")


def evaluate_formula(formula: str, variables: Mapping[str, float] | None = None) -> float:
    """
    Convenience function to evaluate a formula.

    Args:
        formula: Formula text
        variables: Variable name to value

    Returns:
        Numeric result
    """
    return FormulaEvaluator().evaluate(formula, variables)
