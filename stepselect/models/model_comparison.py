"""
Model comparison for the selection report.

Fits the standard companions of a stepwise logistic analysis on a common
train/test split: a decision tree, a random forest and an L1-penalized
(lasso) logistic regression on every candidate predictor, plus the logistic
model restricted to the stepwise-selected predictors.
"""

import pandas as pd
import numpy as np
from sklearn.linear_model import LogisticRegressionCV
from sklearn.ensemble import RandomForestClassifier
from sklearn.tree import DecisionTreeClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from typing import Dict, List, Tuple, Any, Optional
from pathlib import Path

from stepselect.data.data_loader import DataLoader
from stepselect.evaluation.metrics import ClassificationMetricsCalculator
from stepselect.exceptions import InputContractError
from stepselect.selection.fitting import BinomialFitter
from stepselect.utils.config import config
from stepselect.utils.helpers import save_object
from stepselect.utils.logger import setup_logger

STEPWISE_MODEL = 'stepwise_logistic'


class ModelComparison:      # fits and scores the comparison models on one split

    def __init__(self, model_config: Optional[Dict[str, Any]] = None,
                 fitter: Optional[BinomialFitter] = None):
        """
        Args:
            model_config: Overrides for the model configuration block
            fitter: Fitter used for the stepwise logistic model
        """
        self.model_config = model_config or config.model_config
        self.random_state = self.model_config.get('random_state', 42)
        self.fitter = fitter or BinomialFitter()
        self.data_loader = DataLoader()
        self.metrics_calculator = ClassificationMetricsCalculator()

        self.models = {}
        self.model_results = {}
        self.feature_importances_ = {}
        self.lasso_selected_features_ = []

        self.logger = setup_logger(__name__)

    def initialize_models(self) -> Dict[str, Any]:     # scikit-learn models compared against the stepwise model

        tree_params = self.model_config.get('decision_tree', {})
        forest_params = self.model_config.get('random_forest', {})
        lasso_params = self.model_config.get('lasso', {})

        models = {}

        models['decision_tree'] = DecisionTreeClassifier(
            max_depth=tree_params.get('max_depth'),
            min_samples_leaf=tree_params.get('min_samples_leaf', 1),
            random_state=self.random_state
        )

        models['random_forest'] = RandomForestClassifier(
            n_estimators=forest_params.get('n_estimators', 500),
            max_features=forest_params.get('max_features', 'sqrt'),
            min_samples_leaf=forest_params.get('min_samples_leaf', 1),
            random_state=self.random_state,
            n_jobs=-1
        )

        # features are standardised so the L1 penalty treats them alike
        models['lasso'] = Pipeline([
            ('scaler', StandardScaler()),
            ('model', LogisticRegressionCV(
                Cs=lasso_params.get('Cs', 20),
                cv=lasso_params.get('cv_folds', 5),
                penalty='l1',
                solver='liblinear',
                scoring='roc_auc',
                max_iter=lasso_params.get('max_iter', 5000),
                random_state=self.random_state
            ))
        ])

        self.logger.info(f"Initialized {len(models)} models: {list(models.keys())}")
        return models

    def split_data(self, df: pd.DataFrame, target_col: str,
                   predictors: List[str]) -> Tuple[pd.DataFrame, pd.DataFrame]:     # complete-case rows, 0/1 outcome, stratified split

        return self.data_loader.create_train_test_split(
            df, target_col, predictors,
            test_size=self.model_config.get('test_size', 0.3),
            random_state=self.random_state
        )

    def _fit_sklearn_models(self, train_df: pd.DataFrame, test_df: pd.DataFrame,
                            target_col: str, predictors: List[str]) -> None:

        design = pd.get_dummies(
            pd.concat([train_df[predictors], test_df[predictors]]),
            drop_first=True,
            dtype=float
        )
        X_train = design.loc[train_df.index]
        X_test = design.loc[test_df.index]
        y_train = train_df[target_col]
        y_test = test_df[target_col]

        for name, model in self.initialize_models().items():
            self.logger.info(f"Training {name}...")

            try:
                model.fit(X_train, y_train)
            except Exception as e:
                self.logger.error(f"Error training {name}: {str(e)}")
                raise

            y_pred_proba = model.predict_proba(X_test)[:, 1]
            metrics = self.metrics_calculator.calculate_comprehensive_metrics(y_test, y_pred_proba)

            self.models[name] = model
            self.model_results[name] = metrics
            self.feature_importances_[name] = self._importances(name, model, list(X_train.columns))

            self.logger.info(f"  {name}: AUC = {metrics.get('roc_auc', float('nan')):.4f}, "
                             f"Accuracy = {metrics['accuracy']:.4f}")

        lasso_coef = self.models['lasso'].named_steps['model'].coef_[0]
        self.lasso_selected_features_ = [
            feature for feature, coef in zip(X_train.columns, lasso_coef) if coef != 0
        ]
        self.logger.info(f"Lasso kept {len(self.lasso_selected_features_)} of {len(lasso_coef)} terms")

    def _importances(self, name: str, model: Any, feature_names: List[str]) -> Dict[str, float]:

        if name == 'lasso':
            values = np.abs(model.named_steps['model'].coef_[0])
        else:
            values = model.feature_importances_

        return dict(sorted(
            ((feature, float(value)) for feature, value in zip(feature_names, values)),
            key=lambda item: item[1],
            reverse=True
        ))

    def _align_categories(self, train_df: pd.DataFrame, test_df: pd.DataFrame,
                          columns: List[str]) -> pd.DataFrame:         # test rows restricted to levels seen in training

        test_aligned = test_df.copy()
        for col in columns:
            if isinstance(train_df[col].dtype, pd.CategoricalDtype):
                levels = train_df[col].cat.remove_unused_categories().cat.categories
                test_aligned[col] = test_aligned[col].cat.set_categories(levels)

        n_before = len(test_aligned)
        test_aligned = test_aligned.dropna(subset=columns)
        if len(test_aligned) < n_before:
            self.logger.warning(f"{n_before - len(test_aligned)} test rows have levels unseen in training")
        return test_aligned

    def _fit_stepwise_model(self, train_df: pd.DataFrame, test_df: pd.DataFrame,
                            target_col: str, selected_predictors: List[str]) -> None:

        self.logger.info(f"Training {STEPWISE_MODEL} on {selected_predictors}...")

        results = self.fitter.fit_model(train_df, target_col, selected_predictors)
        test_aligned = self._align_categories(train_df, test_df, selected_predictors)

        y_pred_proba = self.fitter.predict_proba(results, test_aligned)
        metrics = self.metrics_calculator.calculate_comprehensive_metrics(
            test_aligned[target_col], y_pred_proba
        )
        metrics['information_criterion'] = self.fitter.information_criterion(results)

        self.models[STEPWISE_MODEL] = results
        self.model_results[STEPWISE_MODEL] = metrics

        self.logger.info(f"  {STEPWISE_MODEL}: AUC = {metrics.get('roc_auc', float('nan')):.4f}, "
                         f"Accuracy = {metrics['accuracy']:.4f}")

    def compare(self, df: pd.DataFrame, target_col: str, predictors: List[str],
                selected_predictors: List[str]) -> Dict[str, Dict[str, float]]:
        """
        Fit every model on one split and return test-set metrics per model.

        Args:
            df: Prepared dataset
            target_col: Binary outcome column
            predictors: All candidate predictors (used by the scikit-learn models)
            selected_predictors: Predictors kept by backward selection
        """
        unknown = [p for p in selected_predictors if p not in predictors]
        if unknown:
            raise InputContractError(
                "Selected predictors must be a subset of the candidates",
                details={'unknown': unknown}
            )

        train_df, test_df = self.split_data(df, target_col, predictors)

        self._fit_sklearn_models(train_df, test_df, target_col, predictors)
        self._fit_stepwise_model(train_df, test_df, target_col, selected_predictors)

        return self.model_results

    def comparison_table(self) -> pd.DataFrame:       # one row per model, sorted by test AUC

        table = pd.DataFrame(self.model_results).T
        table.index.name = 'model'
        if 'roc_auc' in table.columns:
            table = table.sort_values('roc_auc', ascending=False)
        return table

    def save_models(self, output_dir: str) -> Dict[str, str]:

        paths = {}
        for name, model in self.models.items():
            filepath = str(Path(output_dir) / f"{name}.joblib")
            save_object(model, filepath)
            paths[name] = filepath

        self.logger.info(f"Saved {len(paths)} models to {output_dir}")
        return paths
