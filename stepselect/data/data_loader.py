import pandas as pd
from sklearn.model_selection import train_test_split
from typing import Optional, Tuple, List
from stepselect.data.data_validator import DataValidator
from stepselect.exceptions import InputContractError
from stepselect.selection.fitting import encode_outcome
from stepselect.utils.logger import setup_logger
from stepselect.utils.config import config

class DataLoader:           # Data loading utility

    def __init__(self):
        self.logger = setup_logger(__name__)
        self.data_config = config.data_config
        self.validator = DataValidator()

    def load_raw_data(self, filepath: Optional[str] = None) -> pd.DataFrame:

        if filepath is None:
            filepath = self.data_config['data_paths']['raw_data']

        try:
            self.logger.info(f"Loading data from {filepath}")
            df = pd.read_csv(filepath)
            self.logger.info(f"Data loaded successfully. Shape: {df.shape}")
            return df
        except Exception as e:
            self.logger.error(f"Error loading data: {str(e)}")
            raise

    def prepare_dataset(self, df: pd.DataFrame,
                        target_col: Optional[str] = None,
                        categorical_columns: Optional[List[str]] = None,
                        drop_columns: Optional[List[str]] = None) -> pd.DataFrame:      # typed dataset ready for the selector
        """
        Drop unused columns, exclude rows with a missing outcome and type the
        categorical columns. Predictor missing values are left in place; each
        model fit uses its own complete rows.
        """
        if target_col is None:
            target_col = self.data_config['target_column']
        if categorical_columns is None:
            categorical_columns = self.data_config.get('categorical_columns') or []
        if drop_columns is None:
            drop_columns = self.data_config.get('drop_columns') or []

        if target_col not in df.columns:
            raise InputContractError(
                f"Outcome column '{target_col}' not found",
                details={'columns': list(df.columns)}
            )

        unknown = [c for c in categorical_columns if c not in df.columns]
        if unknown:
            raise InputContractError(
                "Categorical columns not found",
                details={'missing_columns': unknown}
            )

        df_prepared = df.drop(columns=[c for c in drop_columns if c in df.columns])

        n_before = len(df_prepared)
        df_prepared = df_prepared[df_prepared[target_col].notna()].copy()
        n_dropped = n_before - len(df_prepared)
        if n_dropped:
            self.logger.info(f"Excluded {n_dropped} rows with missing '{target_col}'")

        for col in df_prepared.columns:
            dtype = df_prepared[col].dtype
            if isinstance(dtype, pd.CategoricalDtype):
                continue
            if (col in categorical_columns or pd.api.types.is_object_dtype(dtype)
                    or pd.api.types.is_string_dtype(dtype)):
                df_prepared[col] = df_prepared[col].astype('category')

        if not self.validator.validate_outcome(df_prepared, target_col):
            raise InputContractError(
                f"Outcome column '{target_col}' must be binary",
                details=self.validator.get_validation_report()['outcome']
            )

        self.logger.info(f"Dataset prepared. Shape: {df_prepared.shape}")
        return df_prepared

    def candidate_predictors(self, df: pd.DataFrame,
                             target_col: Optional[str] = None) -> List[str]:     # all columns except the outcome, in column order

        if target_col is None:
            target_col = self.data_config['target_column']

        return [col for col in df.columns if col != target_col]

    def create_train_test_split(self, df: pd.DataFrame, target_col: str, predictors: List[str],
                                test_size: float = 0.3,
                                random_state: int = 42) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Stratified split of the complete rows of ``target_col`` and ``predictors``.

        The outcome is coded 0/1 the same way the binomial fitter codes it, so
        every model compared on the split sees the same event level.
        """
        missing = [c for c in [target_col] + predictors if c not in df.columns]
        if missing:
            raise InputContractError("Columns not found in dataset", details={'missing_columns': missing})

        data = df[[target_col] + predictors].dropna().reset_index(drop=True)
        data[target_col] = encode_outcome(data[target_col])

        self.logger.info(f"Split uses {len(data)} complete rows of {len(df)}")

        train_df, test_df = train_test_split(
            data,
            test_size=test_size,
            random_state=random_state,
            stratify=data[target_col]
        )

        self.logger.info(f"Data split created - Train: {train_df.shape}, Test: {test_df.shape}")
        return train_df, test_df
