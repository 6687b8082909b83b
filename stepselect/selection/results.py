from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FitResult:
    """Outcome of a single binomial regression fit on a predictor subset."""

    score: float
    significance: Dict[str, float] = field(default_factory=dict)
    n_obs: Optional[int] = None
    predictors: Tuple[str, ...] = ()


@dataclass
class IterationRecord:
    """
    Scores compared in one round of backward elimination.

    ``candidates`` holds ``(removed_predictor, score)`` pairs; the first entry
    is always ``(None, baseline_score)``, the "remove none" candidate.
    """

    iteration: int
    predictors: List[str]
    baseline_score: float
    candidates: List[Tuple[Optional[str], float]] = field(default_factory=list)
    removed: Optional[str] = None

    @property
    def terminated(self) -> bool:
        return self.removed is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'iteration': self.iteration,
            'predictors': list(self.predictors),
            'baseline_score': self.baseline_score,
            'candidates': [
                {'remove': name if name is not None else '<none>', 'score': score}
                for name, score in self.candidates
            ],
            'removed': self.removed
        }


@dataclass
class SelectionResult:
    """Final state of a selection run, as handed to the report layer."""

    predictors: List[str]
    score: float
    baseline_score: float
    history: List[IterationRecord] = field(default_factory=list)

    @property
    def removed(self) -> List[str]:
        return [record.removed for record in self.history if record.removed is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'final_predictors': list(self.predictors),
            'final_score': self.score,
            'baseline_score': self.baseline_score,
            'removed_predictors': self.removed,
            'n_iterations': len(self.history),
            'history': [record.to_dict() for record in self.history]
        }
