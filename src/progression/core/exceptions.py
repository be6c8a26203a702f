"""
Custom exceptions for the progression engine.

Provides a hierarchy of exceptions with machine-readable codes
and structured error information.
"""

from typing import Any


class ProgressionException(Exception):
    """
    Base exception for all progression engine errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for display or logging."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Formula Errors
# =============================================================================


class FormulaError(ProgressionException):
    """Formula parsing or execution error."""


class FormulaEvaluationError(FormulaError):
    """Numeric evaluation of a formula failed."""

    def __init__(
        self,
        message: str,
        code: str = "EVALUATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class DivisionByZeroError(FormulaEvaluationError):
    """Divisor evaluated to zero."""

    def __init__(self) -> None:
        super().__init__(message="Division by zero", code="DIVISION_BY_ZERO")


class MalformedNumberError(FormulaEvaluationError):
    """Numeric literal could not be read."""

    def __init__(self, literal: str) -> None:
        super().__init__(
            message=f"Invalid number: {literal}",
            code="MALFORMED_NUMBER",
            details={"literal": literal},
        )


class UnknownFunctionError(FormulaEvaluationError):
    """Call to a name outside the built-in function table."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Unknown function: {name}",
            code="UNKNOWN_FUNCTION",
            details={"function": name},
        )


class UnresolvedVariableError(FormulaEvaluationError):
    """Identifier left in the expression after variable substitution."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Unresolved variable: {name}",
            code="UNRESOLVED_VARIABLE",
            details={"variable": name},
        )


class FormulaSyntaxError(FormulaEvaluationError):
    """Expression is structurally invalid."""

    def __init__(self, expression: str, error: str) -> None:
        super().__init__(
            message=f"Invalid formula syntax: {error}",
            code="FORMULA_SYNTAX",
            details={"expression": expression, "error": error},
        )


class FormulaNestingError(FormulaEvaluationError):
    """Expression nests deeper than the evaluator can walk."""

    def __init__(self) -> None:
        super().__init__(message="Formula too deeply nested", code="FORMULA_TOO_DEEP")
