import os
import sys
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Keep generated config and log files out of the working tree; must run before stepselect.utils.config is imported
os.environ.setdefault("STEPSELECT_CONFIG_DIR", tempfile.mkdtemp(prefix="stepselect_configs_"))
os.environ.setdefault("STEPSELECT_LOG_DIR", tempfile.mkdtemp(prefix="stepselect_logs_"))

# Add repository root to path for imports
sys.path.append(str(Path(__file__).parent.parent))

from stepselect.selection.results import FitResult      # noqa: E402


class ScoreTableFitter:         # fit_fn stand-in returning scores from a lookup keyed by predictor set

    def __init__(self, table, default=1000.0, n_obs=None):
        self.table = {frozenset(key): value for key, value in table.items()}
        self.default = default
        self.n_obs = n_obs
        self.calls = []

    def __call__(self, dataset, outcome_column, predictors):
        self.calls.append(tuple(predictors))
        score = self.table.get(frozenset(predictors), self.default)
        return FitResult(score=score, n_obs=self.n_obs, predictors=tuple(predictors))


@pytest.fixture
def score_table_fitter():
    return ScoreTableFitter


@pytest.fixture
def logistic_data():
    """Binary outcome driven by x1 and grp; x2 and x3 are noise."""
    rng = np.random.default_rng(0)
    n = 600

    x1 = rng.normal(0, 1, n)
    x2 = rng.normal(0, 1, n)
    x3 = rng.uniform(-1, 1, n)
    grp = rng.choice(['a', 'b', 'c'], n)

    linear = -0.3 + 1.5 * x1 + 1.0 * (grp == 'b') - 1.0 * (grp == 'c')
    y = (rng.random(n) < 1 / (1 + np.exp(-linear))).astype(int)

    return pd.DataFrame({
        'x1': x1,
        'x2': x2,
        'x3': x3,
        'grp': pd.Categorical(grp),
        'y': y
    })
