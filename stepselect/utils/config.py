import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from stepselect.exceptions import ConfigurationError

class Config:               # configuration management class for entire project

    def __init__(self, config_dir: Optional[str] = None):

        load_dotenv()

        if config_dir is None:
            config_dir = os.getenv('STEPSELECT_CONFIG_DIR', 'configs')

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.data_config = self._load_config("data_config.yaml")
        self.selection_config = self._load_config("selection_config.yaml")
        self.model_config = self._load_config("model_config.yaml")

    def _load_config(self, filename: str) -> Dict[str, Any]:            # load configuration from YAML file, writing defaults if absent

        config_path = self.config_dir / filename

        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Could not parse {config_path}",
                    details={'file': str(config_path)},
                    cause=e
                ) from e

            if loaded is None:
                return self._get_default_config(filename)
            if not isinstance(loaded, dict):
                raise ConfigurationError(
                    f"{config_path} must contain a mapping",
                    details={'file': str(config_path), 'type': type(loaded).__name__}
                )

            # missing keys fall back to defaults, one level into nested blocks (data_paths, model parameters)
            merged = self._get_default_config(filename)
            for key, value in loaded.items():
                if isinstance(value, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            return merged

        else:
            default_config = self._get_default_config(filename)
            self._save_config(config_path, default_config)
            return default_config

    def _save_config(self, config_path: Path, config: Dict[str, Any]):     # save configuration to YAML file
        with open(config_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False)

    def _get_default_config(self, filename: str) -> Dict[str, Any]:    # provide default configuration values

        if filename == "data_config.yaml":
            return {
                'data_paths': {
                    'raw_data': 'data/raw/sample_dataset.csv',
                    'output_dir': 'reports/'
                },
                'target_column': 'outcome',
                'categorical_columns': [],
                'drop_columns': ['record_id']
            }

        elif filename == "selection_config.yaml":
            return {
                'predictors': None,
                'penalty': 2.0,
                'n_jobs': 1
            }

        elif filename == "model_config.yaml":
            return {
                'random_state': 42,
                'test_size': 0.3,
                'decision_tree': {
                    'max_depth': 5,
                    'min_samples_leaf': 5
                },
                'random_forest': {
                    'n_estimators': 500,
                    'max_features': 'sqrt',
                    'min_samples_leaf': 1
                },
                'lasso': {
                    'Cs': 20,
                    'cv_folds': 5,
                    'max_iter': 5000
                }
            }

        return {}


config = Config()       # instantiate configuration object for use throughout the project
