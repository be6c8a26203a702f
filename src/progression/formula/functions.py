"""Built-in formula functions.

The function table is closed: formulas persisted by designers are written
against exactly these names, so adding or removing one is a breaking change.
"""

import math
from enum import Enum

from progression.core.exceptions import FormulaEvaluationError, UnknownFunctionError


class BuiltinFunction(Enum):
    """Functions callable from a formula. Names are matched case-insensitively."""

    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"
    ABS = "abs"
    SQRT = "sqrt"
    MIN = "min"
    MAX = "max"
    POW = "pow"

    @classmethod
    def from_name(cls, name: str) -> "BuiltinFunction":
        """Look up a function by name, ignoring case."""
        try:
            return cls(name.lower())
        except ValueError:
            raise UnknownFunctionError(name) from None

    @property
    def arity(self) -> int:
        """Number of arguments the function uses."""
        if self in _BINARY:
            return 2
        return 1

    def apply(self, args: list[float]) -> float:
        """
        Apply the function to already-evaluated arguments.

        Unary functions ignore arguments past the first. Binary functions
        called with a single argument return it unchanged.

        Args:
            args: Evaluated arguments, at least one

        Returns:
            Function result

        Raises:
            FormulaEvaluationError: On a math domain or range error
        """
        first = args[0]

        if self is BuiltinFunction.FLOOR:
            return float(checked_math(math.floor, first))
        if self is BuiltinFunction.CEIL:
            return float(checked_math(math.ceil, first))
        if self is BuiltinFunction.ROUND:
            # Python's round() is half-to-even
            return float(checked_math(round, first))
        if self is BuiltinFunction.ABS:
            return abs(first)
        if self is BuiltinFunction.SQRT:
            return checked_math(math.sqrt, first)

        if len(args) < 2:
            return first
        second = args[1]

        if self is BuiltinFunction.MIN:
            return min(first, second)
        if self is BuiltinFunction.MAX:
            return max(first, second)
        if self is BuiltinFunction.POW:
            return checked_math(math.pow, first, second)

        raise UnknownFunctionError(self.value)


_BINARY = frozenset({BuiltinFunction.MIN, BuiltinFunction.MAX, BuiltinFunction.POW})

# Lower-cased names, for the scanner and validator
FUNCTION_NAMES: frozenset[str] = frozenset(f.value for f in BuiltinFunction)


def is_function_name(name: str) -> bool:
    """Return True if ``name`` is a built-in function, ignoring case."""
    return name.lower() in FUNCTION_NAMES


def checked_math(func, *args: float) -> float:
    """Call a ``math`` function, turning domain and range errors into evaluation errors."""
    try:
        return func(*args)
    except (ValueError, OverflowError) as e:
        raise FormulaEvaluationError(f"Math error in {func.__name__}: {e}") from e
