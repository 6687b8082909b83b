"""
Exception hierarchy for stepselect.

Input-contract problems are ValueErrors so that callers catching the builtin
still see them; fit failures are kept separate because they come from the
numerical backend rather than from the caller.
"""

from typing import Any, Dict, Optional


class StepselectError(Exception):
    """Base exception for all stepselect errors."""

    def __init__(self,
                 message: str,
                 details: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        """
        Args:
            message: Error message
            details: Additional error details
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            result += f" | Details: {self.details}"
        if self.cause:
            result += f" | Caused by: {self.cause}"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None
        }


class InputContractError(StepselectError, ValueError):
    """
    Raised when selector or fitter inputs are unusable.

    Examples:
    - Empty initial predictor set
    - Outcome column listed among the predictors
    - Columns missing from the dataset
    - Outcome column that is not two-valued
    """
    pass


class EmptyModelError(InputContractError):
    """Raised when backward elimination would remove the last predictor."""
    pass


class FitError(StepselectError):
    """
    Raised when a binomial regression fit fails.

    Examples:
    - Singular design matrix
    - Perfectly separated outcome
    - No complete rows left for the predictor subset
    """
    pass


class ConfigurationError(StepselectError):
    """Raised when a configuration file cannot be read or is malformed."""
    pass
