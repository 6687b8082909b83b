"""
Backward stepwise predictor selection
=====================================

Starting from the full predictor set, each round fits the current model and
every model with exactly one predictor left out, then drops the predictor
whose removal gives the lowest information criterion. The run stops as soon
as the current model itself scores lowest.

The fitting step is injected as ``fit_fn(dataset, outcome_column, predictors)``
returning a :class:`~stepselect.selection.results.FitResult`, so the loop does
not depend on any particular regression backend.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from joblib import Parallel, delayed

from stepselect.exceptions import EmptyModelError, InputContractError
from stepselect.selection.results import FitResult, IterationRecord, SelectionResult

FitFunction = Callable[[Any, str, List[str]], FitResult]


class BackwardStepwiseSelector:     # greedy backward elimination on an information criterion

    def __init__(self,
                 fit_fn: FitFunction,
                 n_jobs: int = 1,
                 backend: Optional[str] = None):
        """
        Args:
            fit_fn: Callable fitting a binomial model on a predictor subset
            n_jobs: Workers for the leave-one-out fits of a round (1 = sequential)
            backend: joblib backend used when n_jobs != 1
        """
        self.fit_fn = fit_fn
        self.n_jobs = n_jobs
        self.backend = backend

        self.history_: List[IterationRecord] = []
        self.baseline_score_: Optional[float] = None
        self.selected_predictors_: Optional[List[str]] = None
        self.final_score_: Optional[float] = None

        self.logger = logging.getLogger(__name__)

    def _validate_inputs(self, dataset: Any, outcome_column: str,
                         initial_predictors: Sequence[str]) -> List[str]:     # reject contract violations before any fit

        predictors = list(initial_predictors)

        if not predictors:
            raise InputContractError("initial_predictors must not be empty")

        if outcome_column in predictors:
            raise InputContractError(
                f"Outcome column '{outcome_column}' cannot also be a predictor",
                details={'outcome_column': outcome_column}
            )

        duplicates = sorted({p for p in predictors if predictors.count(p) > 1})
        if duplicates:
            raise InputContractError(
                "initial_predictors contains duplicates",
                details={'duplicates': duplicates}
            )

        columns = getattr(dataset, 'columns', None)
        if columns is not None:
            missing = [c for c in [outcome_column] + predictors if c not in columns]
            if missing:
                raise InputContractError(
                    "Columns not found in dataset",
                    details={'missing_columns': missing}
                )

        return predictors

    def _fit_reduced(self, dataset: Any, outcome_column: str,
                     current: List[str]) -> List[FitResult]:      # one fit per left-out predictor, in `current` order

        subsets = [[p for p in current if p != excluded] for excluded in current]

        if self.n_jobs == 1:
            return [self.fit_fn(dataset, outcome_column, subset) for subset in subsets]

        return Parallel(n_jobs=self.n_jobs, backend=self.backend)(
            delayed(self.fit_fn)(dataset, outcome_column, subset)
            for subset in subsets
        )

    def select(self, dataset: Any, outcome_column: str,
               initial_predictors: Sequence[str]) -> Tuple[List[str], float]:
        """
        Run backward elimination.

        Args:
            dataset: Data passed unchanged to ``fit_fn``
            outcome_column: Name of the binary outcome column
            initial_predictors: Starting predictor set, in column order

        Returns:
            (final predictor list, final information criterion)

        Raises:
            InputContractError: invalid inputs, raised before any fit
            EmptyModelError: the intercept-only model beat every remaining predictor
            Exception: anything raised by ``fit_fn`` propagates unchanged
        """
        current = self._validate_inputs(dataset, outcome_column, initial_predictors)

        self.history_ = []
        self.baseline_score_ = None
        self.selected_predictors_ = None
        self.final_score_ = None

        self.logger.info(f"Starting backward selection on {len(current)} predictors (outcome={outcome_column})")

        iteration = 0
        while True:
            iteration += 1

            baseline = self.fit_fn(dataset, outcome_column, list(current))
            if self.baseline_score_ is None:
                self.baseline_score_ = baseline.score

            self.logger.info(f"Iteration {iteration}: {len(current)} predictors, score={baseline.score:.4f}")

            record = IterationRecord(
                iteration=iteration,
                predictors=list(current),
                baseline_score=baseline.score,
                candidates=[(None, baseline.score)]
            )

            reduced_fits = self._fit_reduced(dataset, outcome_column, current)

            for predictor, reduced in zip(current, reduced_fits):
                if (baseline.n_obs is not None and reduced.n_obs is not None
                        and reduced.n_obs != baseline.n_obs):
                    self.logger.warning(
                        f"Dropping '{predictor}' changes rows in use "
                        f"({baseline.n_obs} -> {reduced.n_obs}); scores are not on the same sample"
                    )
                self.logger.debug(f"  - {predictor}: score={reduced.score:.4f}")
                record.candidates.append((predictor, reduced.score))

            # strict '<' keeps the earliest candidate on ties, and "remove none" is first
            winner, best_score = record.candidates[0]
            for name, score in record.candidates[1:]:
                if score < best_score:
                    winner, best_score = name, score

            self.history_.append(record)

            if winner is None:
                self.logger.info(f"No removal improves the score; stopping with {len(current)} predictors")
                break

            record.removed = winner

            if len(current) == 1:
                self.logger.error(f"Removing '{winner}' would leave an intercept-only model")
                raise EmptyModelError(
                    "Backward elimination removed every predictor",
                    details={'last_predictor': winner, 'score': best_score}
                )

            self.logger.info(f"Removing '{winner}' (score {baseline.score:.4f} -> {best_score:.4f})")
            current.remove(winner)

        self.selected_predictors_ = list(current)
        self.final_score_ = baseline.score

        return list(current), baseline.score

    def result(self) -> SelectionResult:      # bundle the last run for reporting

        if self.selected_predictors_ is None:
            raise RuntimeError("select() has not completed successfully")

        return SelectionResult(
            predictors=list(self.selected_predictors_),
            score=self.final_score_,
            baseline_score=self.baseline_score_,
            history=list(self.history_)
        )


def select(dataset: Any, outcome_column: str, initial_predictors: Sequence[str],
           fit_fn: FitFunction) -> Tuple[List[str], float]:
    """Functional form of :meth:`BackwardStepwiseSelector.select`."""
    return BackwardStepwiseSelector(fit_fn).select(dataset, outcome_column, initial_predictors)
