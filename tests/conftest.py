"""
Pytest configuration for pyaucompare tests.
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add the project root to Python path so tests can import pyaucompare without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_experiment_data(seed: int = 42) -> pd.DataFrame:
    """
    Builds a small experiment table: 3 datasets x 4 weeks x 3 models x 3 variants.

    Within a (dataset, time) cell every model/variant is evaluated on the same
    sample, so n_p and n_n are shared across the cell.
    """
    rng = np.random.default_rng(seed)
    base_auc = {"ModelA": 0.72, "ModelB": 0.68, "ModelC": 0.75}
    variant_shift = {"VariantA": 0.0, "VariantB": 0.02, "VariantC": -0.03}

    rows = []
    for dataset in ["dataset_1", "dataset_2", "dataset_3"]:
        for time in [1, 2, 3, 4]:
            n_p = int(rng.integers(50, 300))
            n_n = int(rng.integers(300, 1500))
            for model_id, auc in base_auc.items():
                for variant, shift in variant_shift.items():
                    rows.append(
                        {
                            "dataset": dataset,
                            "time": time,
                            "model_id": model_id,
                            "model_variant": variant,
                            "auc": float(np.clip(auc + shift + rng.normal(0, 0.02), 0.01, 0.99)),
                            "n": n_p + n_n,
                            "n_p": n_p,
                            "n_n": n_n,
                        }
                    )
    return pd.DataFrame(rows)


@pytest.fixture
def sample_experiment_data() -> pd.DataFrame:
    """Provides the synthetic experiment table as a Pandas DataFrame."""
    return make_experiment_data()
