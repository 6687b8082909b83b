import argparse
import numpy as np
import pandas as pd
from pathlib import Path

def create_sample_dataset(output_path: str = "data/raw/sample_dataset.csv",     # synthetic binary-outcome dataset
                          n_samples: int = 800, seed: int = 42) -> Path:

    print(" Creating sample binary-outcome dataset...")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rng = np.random.default_rng(seed)

    data = {
        'record_id': [f'ID_{i:04d}' for i in range(n_samples)],
        'age': np.round(rng.normal(40, 12, n_samples).clip(18, 85), 0),
        'tenure': rng.integers(1, 72, n_samples),
        'monthly_spend': np.round(rng.uniform(15, 120, n_samples), 2),
        'plan': rng.choice(['basic', 'standard', 'premium'], n_samples, p=[0.5, 0.3, 0.2]),
        'region': rng.choice(['north', 'south', 'east', 'west'], n_samples),
        'paperless': rng.choice(['yes', 'no'], n_samples, p=[0.6, 0.4]),
        'noise_score': np.round(rng.normal(0, 1, n_samples), 3)
    }

    # outcome driven by age, tenure and plan only
    linear = (
        -1.0
        + 0.03 * (data['age'] - 40)
        - 0.04 * (data['tenure'] - 36)
        + 0.9 * (data['plan'] == 'basic')
        - 0.6 * (data['plan'] == 'premium')
    )
    probability = 1 / (1 + np.exp(-linear))
    data['outcome'] = np.where(rng.random(n_samples) < probability, 'yes', 'no')

    df = pd.DataFrame(data)                                     # introduce some missing predictor and outcome values
    age_missing = rng.choice(df.index, size=int(0.03 * n_samples), replace=False)
    df.loc[age_missing, 'age'] = np.nan
    outcome_missing = rng.choice(df.index, size=int(0.01 * n_samples), replace=False)
    df.loc[outcome_missing, 'outcome'] = np.nan

    df.to_csv(output_path, index=False)

    print(f" Dataset created: {output_path}")
    print(f" Dataset shape: {df.shape}")
    print(f" Event rate: {(df['outcome'] == 'yes').mean()*100:.1f}%")
    return output_path

def main():
    parser = argparse.ArgumentParser(description="Create a synthetic dataset for stepselect")
    parser.add_argument("--output", default="data/raw/sample_dataset.csv", help="CSV path to write")
    parser.add_argument("--n-samples", type=int, default=800, help="Number of rows")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    create_sample_dataset(args.output, args.n_samples, args.seed)

if __name__ == "__main__":
    main()
