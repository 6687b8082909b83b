"""
Binomial regression fitting backed by statsmodels.

``BinomialFitter`` is the production ``fit_fn`` for the stepwise selector: it
fits a logistic GLM on a patsy design built from the complete rows of the
requested columns and scores it with an information criterion.
"""

import keyword
import logging
import warnings
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from patsy import PatsyError, dmatrices, dmatrix
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from stepselect.exceptions import FitError, InputContractError
from stepselect.selection.results import FitResult

logger = logging.getLogger(__name__)


def formula_term(column: str) -> str:       # patsy token for a column name
    if column.isidentifier() and not keyword.iskeyword(column):
        return column
    escaped = column.replace('\\', '\\\\').replace('"', '\\"')
    return f'Q("{escaped}")'


def build_rhs(predictors: Sequence[str]) -> str:
    return " + ".join(formula_term(p) for p in predictors) if predictors else "1"


def build_formula(outcome_column: str, predictors: Sequence[str]) -> str:
    return f"{formula_term(outcome_column)} ~ {build_rhs(predictors)}"


def encode_outcome(y: pd.Series) -> pd.Series:
    """
    Code a two-valued outcome as 0/1.

    Categorical outcomes follow their category order and anything else its
    sorted order; the second level is the event (1).
    """
    observed = set(y.dropna().unique())

    if isinstance(y.dtype, pd.CategoricalDtype):
        levels = [level for level in y.cat.categories if level in observed]
    else:
        levels = sorted(observed)

    if len(levels) != 2:
        raise InputContractError(
            f"Outcome '{y.name}' must have exactly two levels, found {len(levels)}",
            details={'levels': [str(level) for level in levels]}
        )

    return (y == levels[1]).astype(int)


class BinomialFitter:       # fit_fn implementation: logistic GLM scored by an information criterion

    def __init__(self, penalty: float = 2.0, maxiter: int = 100):
        """
        Args:
            penalty: Per-parameter penalty (2 gives AIC, log(n) gives BIC)
            maxiter: IRLS iteration limit
        """
        self.penalty = penalty
        self.maxiter = maxiter

    def _prepare_frame(self, dataset: pd.DataFrame, outcome_column: str,
                       predictors: List[str]) -> pd.DataFrame:         # complete-case rows with a 0/1 outcome

        frame = dataset[[outcome_column] + predictors].dropna().copy()

        if frame.empty:
            raise FitError(
                "No complete rows for this predictor subset",
                details={'predictors': predictors}
            )

        # levels absent after row filtering would give all-zero indicator columns
        for column in predictors:
            if isinstance(frame[column].dtype, pd.CategoricalDtype):
                frame[column] = frame[column].cat.remove_unused_categories()

        try:
            frame[outcome_column] = encode_outcome(frame[outcome_column])
        except InputContractError as e:
            raise FitError(
                "Outcome is not two-valued on the complete rows",
                details={'predictors': predictors, 'n_obs': len(frame)},
                cause=e
            ) from e

        return frame

    def fit_model(self, dataset: pd.DataFrame, outcome_column: str,
                  predictors: Sequence[str]) -> Any:
        """
        Fit the logistic GLM and return the statsmodels results object.

        The design matrix is built with patsy and handed to ``sm.GLM``, so the
        term layout does not depend on which formula engine statsmodels ships
        with. The right-hand side and the column slice of each term are kept on
        the model (``rhs_formula``, ``term_slices``) for term grouping and
        prediction; both survive pickling, unlike patsy's ``DesignInfo``.

        Raises:
            FitError: no usable rows, separation, singular design or a
                non-finite log-likelihood
        """
        predictors = list(predictors)
        frame = self._prepare_frame(dataset, outcome_column, predictors)
        formula = build_formula(outcome_column, predictors)

        logger.debug(f"Fitting {formula} on {len(frame)} rows")

        try:
            y, X = dmatrices(formula, frame, NA_action='raise', return_type='dataframe')
            with warnings.catch_warnings():
                warnings.simplefilter("error", PerfectSeparationWarning)
                model = sm.GLM(y, X, family=sm.families.Binomial())
                results = model.fit(maxiter=self.maxiter)
        except (np.linalg.LinAlgError, PerfectSeparationError, PerfectSeparationWarning,
                PatsyError, ValueError) as e:
            raise FitError(
                f"Binomial fit failed for {formula}",
                details={'predictors': predictors, 'n_obs': len(frame)},
                cause=e
            ) from e

        if not np.isfinite(results.llf):
            raise FitError(
                f"Non-finite log-likelihood for {formula}",
                details={'predictors': predictors, 'n_obs': len(frame)}
            )

        model.rhs_formula = build_rhs(predictors)
        model.term_slices = dict(X.design_info.term_name_slices)
        return results

    def predict_proba(self, results: Any, frame: pd.DataFrame) -> np.ndarray:     # event probabilities for new rows
        # categoricals must carry the training levels so the indicator columns line up
        exog = dmatrix(results.model.rhs_formula, frame, NA_action='raise', return_type='dataframe')
        exog = exog.reindex(columns=results.params.index, fill_value=0.0)
        return np.asarray(results.predict(exog, transform=False))

    def information_criterion(self, results: Any) -> float:
        n_params = results.df_model + 1
        return float(-2.0 * results.llf + self.penalty * n_params)

    def predictor_significance(self, results: Any,
                               predictors: Sequence[str]) -> Dict[str, float]:    # min p-value over each predictor's columns

        term_slices = results.model.term_slices
        pvalues = results.pvalues

        significance = {}
        for predictor in predictors:
            term_slice = term_slices.get(formula_term(predictor))
            if term_slice is None:
                continue
            term_pvalues = pvalues.iloc[term_slice]
            significance[predictor] = float(term_pvalues.min()) if len(term_pvalues) else float('nan')

        return significance

    def __call__(self, dataset: pd.DataFrame, outcome_column: str,
                 predictors: Sequence[str]) -> FitResult:

        predictors = list(predictors)
        results = self.fit_model(dataset, outcome_column, predictors)

        return FitResult(
            score=self.information_criterion(results),
            significance=self.predictor_significance(results, predictors),
            n_obs=int(results.nobs),
            predictors=tuple(predictors)
        )


def coefficient_table(results: Any) -> pd.DataFrame:
    """Coefficient summary of a fitted logistic GLM, with odds ratios."""
    conf_int = results.conf_int()

    table = pd.DataFrame({
        'coef': results.params,
        'std_err': results.bse,
        'z': results.tvalues,
        'p_value': results.pvalues,
        'odds_ratio': np.exp(results.params),
        'ci_lower': conf_int[0],
        'ci_upper': conf_int[1]
    })
    table.index.name = 'term'
    return table
