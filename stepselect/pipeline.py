"""
Runs the full analysis once: load and type the dataset, backward stepwise
selection on a logistic model, the final model's coefficient table, the
model comparison, and JSON/CSV outputs.
"""

import argparse
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from stepselect.data.data_loader import DataLoader
from stepselect.models.model_comparison import ModelComparison
from stepselect.selection.fitting import BinomialFitter, coefficient_table
from stepselect.selection.stepwise import BackwardStepwiseSelector
from stepselect.utils.config import config
from stepselect.utils.helpers import save_json
from stepselect.utils.logger import setup_logger


class SelectionPipeline:        # end-to-end stepwise selection report

    def __init__(self, output_dir: Optional[str] = None,
                 penalty: Optional[float] = None,
                 n_jobs: Optional[int] = None):

        selection_config = config.selection_config

        self.output_dir = Path(output_dir or config.data_config['data_paths']['output_dir'])
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.penalty = penalty if penalty is not None else selection_config.get('penalty', 2.0)
        self.n_jobs = n_jobs if n_jobs is not None else selection_config.get('n_jobs', 1)

        self.logger = setup_logger(__name__)
        self.data_loader = DataLoader()
        self.fitter = BinomialFitter(penalty=self.penalty)
        self.selector = BackwardStepwiseSelector(self.fitter, n_jobs=self.n_jobs)
        self.comparison = None
        self.results = {}

    def run_complete_pipeline(self, data_path: Optional[str] = None,
                              target_col: Optional[str] = None,
                              predictors: Optional[List[str]] = None,
                              categorical_columns: Optional[List[str]] = None,
                              drop_columns: Optional[List[str]] = None,
                              compare_models: bool = True) -> Dict[str, Any]:

        start_time = time.time()
        target_col = target_col or config.data_config['target_column']

        raw_df = self.data_loader.load_raw_data(data_path)
        df = self.data_loader.prepare_dataset(raw_df, target_col, categorical_columns, drop_columns)

        if not self.data_loader.validator.validate_data_quality(df):
            self.logger.warning("Data quality checks failed; continuing with selection")

        if predictors is None:
            predictors = config.selection_config.get('predictors') or \
                self.data_loader.candidate_predictors(df, target_col)

        self.selector.select(df, target_col, predictors)
        selection = self.selector.result()

        final_model = self.fitter.fit_model(df, target_col, selection.predictors)
        coefficients = coefficient_table(final_model)
        significance = self.fitter.predictor_significance(final_model, selection.predictors)

        self.results = {
            'timestamp': datetime.now().isoformat(),
            'data_path': data_path or config.data_config['data_paths']['raw_data'],
            'target_column': target_col,
            'n_rows': len(df),
            'candidate_predictors': list(predictors),
            'penalty': self.penalty,
            'selection': selection.to_dict(),
            'final_model': {
                'n_obs': int(final_model.nobs),
                'significance': significance,
                'deviance': float(final_model.deviance),
                'null_deviance': float(final_model.null_deviance)
            },
            'data_quality': self.data_loader.validator.get_validation_report()
        }

        coefficients.to_csv(self.output_dir / 'final_model_coefficients.csv')

        if compare_models:
            self.comparison = ModelComparison(fitter=self.fitter)
            self.comparison.compare(df, target_col, list(predictors), selection.predictors)
            comparison_df = self.comparison.comparison_table()
            comparison_df.to_csv(self.output_dir / 'model_comparison.csv')

            self.results['model_comparison'] = self.comparison.model_results
            self.results['lasso_selected_terms'] = self.comparison.lasso_selected_features_
            self.results['saved_models'] = self.comparison.save_models(str(self.output_dir / 'models'))

        self.results['duration_seconds'] = time.time() - start_time
        save_json(self.results, str(self.output_dir / 'selection_results.json'))

        self._print_pipeline_summary(selection, coefficients)
        return self.results

    def _print_pipeline_summary(self, selection, coefficients: pd.DataFrame) -> None:     # console summary

        print(f"\n{'='*50}")
        print("BACKWARD STEPWISE SELECTION")
        print(f"{'='*50}")
        print(f"Start score:  {selection.baseline_score:.4f}")
        for record in selection.history:
            if record.removed is not None:
                removed_score = dict(record.candidates[1:])[record.removed]
                print(f"  - {record.removed}: score = {removed_score:.4f}")
        print(f"Final score:  {selection.score:.4f}")
        print(f"Kept ({len(selection.predictors)}): {', '.join(selection.predictors)}")
        print(f"\n{coefficients.round(4).to_string()}")

        if self.comparison is not None:
            print(f"\n{'='*50}")
            print("MODEL COMPARISON (test set)")
            print(f"{'='*50}")
            table = self.comparison.comparison_table()
            columns = [c for c in ['roc_auc', 'accuracy', 'f1_score', 'brier_score'] if c in table.columns]
            print(table[columns].astype(float).round(4).to_string())

        print(f"\nResults saved to {self.output_dir}")


def _split_list(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [item.strip() for item in value.split(',') if item.strip()]


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Backward stepwise selection for a binary outcome")
    parser.add_argument("--data", help="CSV file to analyse")
    parser.add_argument("--outcome", help="Binary outcome column")
    parser.add_argument("--predictors", help="Comma-separated candidate predictors (default: all other columns)")
    parser.add_argument("--categorical", help="Comma-separated columns to treat as categorical")
    parser.add_argument("--drop", help="Comma-separated columns to ignore")
    parser.add_argument("--penalty", type=float, help="Information criterion penalty per parameter (2 = AIC)")
    parser.add_argument("--n-jobs", type=int, help="Parallel workers for the leave-one-out fits")
    parser.add_argument("--output-dir", help="Directory for results")
    parser.add_argument("--skip-models", action="store_true",
                        help="Only run the selection, skip the model comparison")

    args = parser.parse_args(argv)

    pipeline = SelectionPipeline(
        output_dir=args.output_dir,
        penalty=args.penalty,
        n_jobs=args.n_jobs
    )
    return pipeline.run_complete_pipeline(
        data_path=args.data,
        target_col=args.outcome,
        predictors=_split_list(args.predictors),
        categorical_columns=_split_list(args.categorical),
        drop_columns=_split_list(args.drop),
        compare_models=not args.skip_models
    )


if __name__ == "__main__":
    main()
