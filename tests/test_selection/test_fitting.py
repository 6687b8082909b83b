import math

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm
from patsy import dmatrices

from stepselect.exceptions import FitError, InputContractError
from stepselect.selection import fitting
from stepselect.selection.fitting import (
    BinomialFitter, build_formula, coefficient_table, encode_outcome, formula_term
)
from stepselect.selection.stepwise import BackwardStepwiseSelector


def reference_fit(formula, data):
    y, X = dmatrices(formula, data, return_type='dataframe')
    return sm.GLM(y, X, family=sm.families.Binomial()).fit()


class TestFormulaHelpers:

    def test_identifier_columns_used_as_is(self):
        assert formula_term('age') == 'age'

    def test_other_columns_quoted(self):
        assert formula_term('monthly spend') == 'Q("monthly spend")'

    def test_keyword_columns_quoted(self):
        assert formula_term('class') == 'Q("class")'
        assert formula_term('if') == 'Q("if")'
        assert build_formula('y', ['lambda', 'age']) == 'y ~ Q("lambda") + age'

    def test_empty_predictor_set_gives_intercept_model(self):
        assert build_formula('y', []) == 'y ~ 1'
        assert build_formula('y', ['a', 'b']) == 'y ~ a + b'

    def test_encode_outcome_uses_sorted_levels(self):
        coded = encode_outcome(pd.Series(['no', 'yes', 'no', 'yes'], name='outcome'))
        assert coded.tolist() == [0, 1, 0, 1]

    def test_encode_outcome_follows_category_order(self):
        y = pd.Series(pd.Categorical(['survived', 'died', 'died'], categories=['survived', 'died']))
        assert encode_outcome(y).tolist() == [0, 1, 1]

    def test_encode_outcome_rejects_three_levels(self):
        with pytest.raises(InputContractError):
            encode_outcome(pd.Series(['a', 'b', 'c'], name='outcome'))


class TestBinomialFitter:           # statsmodels-backed fit_fn

    def setup_method(self):
        self.fitter = BinomialFitter()

    def test_score_matches_statsmodels_aic(self, logistic_data):
        reference = reference_fit('y ~ x1 + grp', logistic_data)

        result = self.fitter(logistic_data, 'y', ['x1', 'grp'])

        assert result.score == pytest.approx(reference.aic)
        assert result.n_obs == len(logistic_data)
        assert result.predictors == ('x1', 'grp')

    def test_penalty_changes_criterion(self, logistic_data):
        n = len(logistic_data)
        bic_fitter = BinomialFitter(penalty=math.log(n))
        reference = reference_fit('y ~ x1 + x2', logistic_data)

        result = bic_fitter(logistic_data, 'y', ['x1', 'x2'])

        expected = -2 * reference.llf + math.log(n) * 3
        assert result.score == pytest.approx(expected)

    def test_categorical_significance_is_min_over_indicators(self, logistic_data):
        reference = reference_fit('y ~ x1 + grp', logistic_data)
        grp_pvalues = reference.pvalues[[name for name in reference.pvalues.index if name.startswith('grp[')]]

        result = self.fitter(logistic_data, 'y', ['x1', 'grp'])

        assert len(grp_pvalues) == 2
        assert set(result.significance) == {'x1', 'grp'}
        assert result.significance['grp'] == pytest.approx(grp_pvalues.min())
        assert result.significance['x1'] == pytest.approx(reference.pvalues['x1'])

    def test_intercept_only_model(self, logistic_data):
        result = self.fitter(logistic_data, 'y', [])

        assert result.significance == {}
        assert np.isfinite(result.score)

    def test_uses_complete_rows_of_requested_columns(self, logistic_data):
        df = logistic_data.copy()
        df.loc[df.index[:10], 'x2'] = np.nan

        with_x2 = self.fitter(df, 'y', ['x1', 'x2'])
        without_x2 = self.fitter(df, 'y', ['x1'])

        assert with_x2.n_obs == len(df) - 10
        assert without_x2.n_obs == len(df)

    def test_string_outcome_and_quoted_names(self, logistic_data):
        df = logistic_data.rename(columns={'x1': 'first score'})
        df['y'] = np.where(df['y'] == 1, 'yes', 'no')

        numeric = self.fitter(logistic_data, 'y', ['x1'])
        labelled = self.fitter(df, 'y', ['first score'])

        assert labelled.score == pytest.approx(numeric.score)
        assert 'first score' in labelled.significance

    def test_keyword_named_predictors(self, logistic_data):
        df = logistic_data.rename(columns={'x1': 'class', 'grp': 'if'})

        plain = self.fitter(logistic_data, 'y', ['x1', 'grp'])
        renamed = self.fitter(df, 'y', ['class', 'if'])

        assert renamed.score == pytest.approx(plain.score)
        assert renamed.significance['class'] == pytest.approx(plain.significance['x1'])
        assert renamed.significance['if'] == pytest.approx(plain.significance['grp'])

    def test_predict_proba_matches_fitted_values(self, logistic_data):
        results = self.fitter.fit_model(logistic_data, 'y', ['x1', 'grp'])

        proba = self.fitter.predict_proba(results, logistic_data)

        assert proba == pytest.approx(np.asarray(results.fittedvalues))

    def test_dataset_not_modified(self, logistic_data):
        df = logistic_data.copy()
        df['y'] = np.where(df['y'] == 1, 'yes', 'no')
        snapshot = df.copy()

        self.fitter(df, 'y', ['x1', 'grp'])

        pd.testing.assert_frame_equal(df, snapshot)

    def test_no_complete_rows_raises(self, logistic_data):
        df = logistic_data.copy()
        df['x2'] = np.nan

        with pytest.raises(FitError) as exc_info:
            self.fitter(df, 'y', ['x1', 'x2'])
        assert exc_info.value.details['predictors'] == ['x1', 'x2']

    def test_single_outcome_level_raises(self, logistic_data):
        df = logistic_data.copy()
        df['y'] = 1

        with pytest.raises(FitError):
            self.fitter(df, 'y', ['x1'])

    def test_backend_errors_wrapped(self, logistic_data, monkeypatch):
        def singular(*args, **kwargs):
            raise np.linalg.LinAlgError("Singular matrix")

        monkeypatch.setattr(fitting.sm, 'GLM', singular)

        with pytest.raises(FitError) as exc_info:
            self.fitter(logistic_data, 'y', ['x1'])
        assert isinstance(exc_info.value.cause, np.linalg.LinAlgError)

    def test_coefficient_table(self, logistic_data):
        results = self.fitter.fit_model(logistic_data, 'y', ['x1', 'grp'])

        table = coefficient_table(results)

        assert list(table.index) == list(results.params.index)
        assert {'coef', 'std_err', 'p_value', 'odds_ratio'} <= set(table.columns)
        assert table.loc['x1', 'odds_ratio'] == pytest.approx(np.exp(results.params['x1']))


class TestSelectionWithBinomialFitter:

    def test_signal_predictors_survive(self, logistic_data):
        selector = BackwardStepwiseSelector(BinomialFitter())

        predictors, score = selector.select(logistic_data, 'y', ['x1', 'x2', 'x3', 'grp'])

        assert 'x1' in predictors
        assert 'grp' in predictors
        assert set(predictors) <= {'x1', 'x2', 'x3', 'grp'}
        assert score <= selector.baseline_score_

    def test_keyword_named_columns_select_without_error(self, logistic_data):
        df = logistic_data.rename(columns={'x2': 'if'})
        selector = BackwardStepwiseSelector(BinomialFitter())

        predictors, _ = selector.select(df, 'y', ['x1', 'if', 'grp'])

        assert predictors[0] == 'x1'
        assert 'grp' in predictors

    def test_default_parallel_backend_matches_sequential(self, logistic_data):
        sequential = BackwardStepwiseSelector(BinomialFitter())
        parallel = BackwardStepwiseSelector(BinomialFitter(), n_jobs=2)

        assert parallel.select(logistic_data, 'y', ['x1', 'x2', 'x3', 'grp']) == \
            sequential.select(logistic_data, 'y', ['x1', 'x2', 'x3', 'grp'])
        assert [r.candidates for r in parallel.history_] == [r.candidates for r in sequential.history_]
