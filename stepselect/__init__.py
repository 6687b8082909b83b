"""Backward stepwise predictor selection for binary-outcome models."""

from .exceptions import (
    StepselectError, InputContractError, EmptyModelError, FitError, ConfigurationError
)
from .selection import (
    FitResult, IterationRecord, SelectionResult,
    BackwardStepwiseSelector, select, BinomialFitter, coefficient_table
)

__version__ = "1.0.0"

__all__ = [
    'StepselectError',
    'InputContractError',
    'EmptyModelError',
    'FitError',
    'ConfigurationError',
    'FitResult',
    'IterationRecord',
    'SelectionResult',
    'BackwardStepwiseSelector',
    'select',
    'BinomialFitter',
    'coefficient_table'
]
