from .model_comparison import ModelComparison

__all__ = ['ModelComparison']
