from .data_loader import DataLoader
from .data_validator import DataValidator

__all__ = [
    'DataLoader',
    'DataValidator'
]
