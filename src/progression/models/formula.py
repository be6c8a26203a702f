"""Formula validation result models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FormulaErrorKind(str, Enum):
    """Category of a failed formula check."""

    UNKNOWN_VARIABLE = "unknown_variable"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    INVALID_OPERATOR_SEQUENCE = "invalid_operator_sequence"
    EVALUATION_ERROR = "evaluation_error"


class ValidationResult(BaseModel):
    """Outcome of validating one formula."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool = Field(..., description="Whether the formula passed every check")
    error_message: Optional[str] = Field(None, description="Why the formula failed")
    sample_result: Optional[float] = Field(
        None, description="Value at the supplied sample bindings"
    )
    error_kind: Optional[FormulaErrorKind] = Field(None, description="Failure category")
    unknown_variables: list[str] = Field(
        default_factory=list, description="Names not in the known set"
    )

    @model_validator(mode="after")
    def check_consistency(self) -> "ValidationResult":
        """A result is either valid or carries an error, never both."""
        if self.is_valid == (self.error_message is not None):
            raise ValueError("A valid result has no error message; an invalid one must have one")
        if not self.is_valid and self.sample_result is not None:
            raise ValueError("An invalid result has no sample value")
        return self

    @classmethod
    def ok(cls, sample_result: float | None = None) -> "ValidationResult":
        return cls(is_valid=True, sample_result=sample_result)

    @classmethod
    def failure(
        cls,
        kind: FormulaErrorKind,
        message: str,
        unknown_variables: list[str] | None = None,
    ) -> "ValidationResult":
        return cls(
            is_valid=False,
            error_message=message,
            error_kind=kind,
            unknown_variables=unknown_variables or [],
        )
