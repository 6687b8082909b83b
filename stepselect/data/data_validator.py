import pandas as pd
from typing import Dict, Any
from stepselect.utils.logger import setup_logger

class DataValidator:

    def __init__(self):
        self.logger = setup_logger(__name__)
        self.validation_report = {}

    def validate_outcome(self, df: pd.DataFrame, target_col: str) -> bool:          # outcome present, non-missing and two-valued

        if target_col not in df.columns:
            self.validation_report['outcome'] = {
                'target_column': target_col,
                'present': False,
                'is_valid': False
            }
            self.logger.warning(f"Outcome column '{target_col}' not found")
            return False

        outcome = df[target_col]
        levels = outcome.dropna().unique().tolist()
        n_missing = int(outcome.isnull().sum())
        is_valid = len(levels) == 2 and n_missing == 0

        self.validation_report['outcome'] = {
            'target_column': target_col,
            'present': True,
            'levels': [str(level) for level in levels],
            'n_missing': n_missing,
            'is_valid': is_valid
        }

        if len(levels) != 2:
            self.logger.warning(f"Outcome '{target_col}' has {len(levels)} levels, expected 2")
        if n_missing:
            self.logger.warning(f"Outcome '{target_col}' has {n_missing} missing values")

        return is_valid

    def validate_data_quality(self, df: pd.DataFrame,                       # validate overall data quality
                            max_missing_percentage: float = 0.3,
                            min_rows: int = 10) -> bool:

        has_enough_rows = len(df) >= min_rows

        n_cells = len(df) * len(df.columns)
        missing_percentage = df.isnull().sum().sum() / n_cells if n_cells else 0.0
        acceptable_missing = missing_percentage <= max_missing_percentage

        is_not_empty = not df.empty

        self.validation_report['data_quality'] = {
            'total_rows': len(df),
            'min_rows_required': min_rows,
            'has_enough_rows': has_enough_rows,
            'missing_percentage': float(missing_percentage),
            'max_missing_allowed': max_missing_percentage,
            'acceptable_missing': acceptable_missing,
            'missing_by_column': {k: int(v) for k, v in df.isnull().sum().items() if v > 0},
            'is_not_empty': is_not_empty,
            'overall_valid': has_enough_rows and acceptable_missing and is_not_empty
        }

        return has_enough_rows and acceptable_missing and is_not_empty

    def get_validation_report(self) -> Dict[str, Any]:          # get complete validation report
        return self.validation_report
