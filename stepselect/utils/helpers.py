import numpy as np
from typing import Any, Dict
import joblib
import json
from pathlib import Path

def save_object(obj: Any, filepath: str) -> None:   # save object to file using joblib

    dir_path = Path(filepath).parent
    dir_path.mkdir(parents=True, exist_ok=True)
    joblib.dump(obj, filepath)


def load_object(filepath: str) -> Any:              # load object from file using joblib
    return joblib.load(filepath)


def _to_builtin(obj: Any) -> Any:                   # json fallback for numpy scalars and arrays
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (set, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def save_json(data: Dict, filepath: str) -> None:  # save dictionary as JSON file

    dir_path = Path(filepath).parent
    dir_path.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=4, default=_to_builtin)


def load_json(filepath: str) -> Dict:               # load dictionary from JSON file
    with open(filepath, 'r') as f:
        return json.load(f)
