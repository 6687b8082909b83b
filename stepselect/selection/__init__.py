from .results import FitResult, IterationRecord, SelectionResult
from .stepwise import BackwardStepwiseSelector, select
from .fitting import BinomialFitter, coefficient_table

__all__ = [
    'FitResult',
    'IterationRecord',
    'SelectionResult',
    'BackwardStepwiseSelector',
    'select',
    'BinomialFitter',
    'coefficient_table'
]
