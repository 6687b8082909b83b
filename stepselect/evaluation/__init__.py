from .metrics import ClassificationMetricsCalculator

__all__ = ['ClassificationMetricsCalculator']
