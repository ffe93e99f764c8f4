"""
Tests for pandera schema validation.

Validates the synthetic experiment data against the comparison input schema and
the output of `auc_compare_cells` against the cell result schema, including on
hypothesis-generated datasets.
"""

import numpy as np
import pandas as pd
import pandera.pandas as pa
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pyaucompare.evaluation import auc_compare, auc_compare_cells
from tests.conftest import make_experiment_data
from tests.schemas import cell_results_schema, comparison_data_schema


class TestComparisonDataSchema:
    """Tests for the comparison input schema."""

    def test_schema_validates_sample_data(self, sample_experiment_data):
        validated_df = comparison_data_schema.validate(sample_experiment_data, lazy=True)
        assert len(validated_df) == len(sample_experiment_data)

    def test_schema_rejects_auc_out_of_range(self, sample_experiment_data):
        invalid_df = sample_experiment_data.copy()
        invalid_df.loc[0, "auc"] = 1.5

        with pytest.raises(pa.errors.SchemaError):
            comparison_data_schema.validate(invalid_df)

    def test_schema_rejects_inconsistent_counts(self, sample_experiment_data):
        invalid_df = sample_experiment_data.copy()
        invalid_df.loc[0, "n"] = invalid_df.loc[0, "n"] + 1

        with pytest.raises(pa.errors.SchemaError):
            comparison_data_schema.validate(invalid_df)

    def test_schema_accepts_missing_variant_column(self, sample_experiment_data):
        minimal_df = sample_experiment_data.drop(columns=["model_variant"])
        assert comparison_data_schema.validate(minimal_df) is not None


class TestCellResultsSchema:
    """Tests for the auc_compare_cells output schema."""

    def test_cells_validate(self, sample_experiment_data):
        cells = auc_compare_cells(sample_experiment_data, ["ModelA", "ModelB"], filter_value="VariantA")
        validated_df = cell_results_schema.validate(cells.to_pandas(), lazy=True)

        assert not validated_df["skipped"].any()
        assert validated_df["z"].notna().all()

    def test_cells_with_gaps_validate(self, sample_experiment_data):
        # Drop ModelB at every second time point
        gappy = sample_experiment_data[
            ~((sample_experiment_data["model_id"] == "ModelB") & (sample_experiment_data["time"] % 2 == 0))
        ]
        with pytest.warns(UserWarning, match="Missing performance data"):
            cells = auc_compare_cells(gappy, ["ModelA", "ModelB"], filter_value="VariantA")

        validated_df = cell_results_schema.validate(cells.to_pandas(), lazy=True)
        assert validated_df["skipped"].sum() == 3 * 2


class TestSchemaHypothesis:
    """Property-based tests with hypothesis-generated comparison data."""

    @given(
        n_units=st.integers(min_value=1, max_value=4),
        n_times=st.integers(min_value=1, max_value=5),
        aucs=st.lists(
            st.floats(min_value=0.05, max_value=0.95, allow_nan=False), min_size=40, max_size=40
        ),
        n_p=st.integers(min_value=2, max_value=500),
        n_n=st.integers(min_value=2, max_value=500),
    )
    @settings(max_examples=30, deadline=None)
    def test_generated_data_validates_and_compares(self, n_units, n_times, aucs, n_p, n_n):
        rows = []
        auc_iter = iter(aucs)
        for unit in range(n_units):
            for time in range(n_times):
                for model_id in ["ModelA", "ModelB"]:
                    rows.append(
                        {
                            "dataset": f"dataset_{unit}",
                            "time": time,
                            "model_id": model_id,
                            "auc": next(auc_iter),
                            "n": n_p + n_n,
                            "n_p": n_p,
                            "n_n": n_n,
                        }
                    )
        df = comparison_data_schema.validate(pd.DataFrame(rows))

        cells = auc_compare_cells(df, ["ModelA", "ModelB"])
        cell_results_schema.validate(cells.to_pandas())

        z_ab = auc_compare(df, ["ModelA", "ModelB"])
        z_ba = auc_compare(df, ["ModelB", "ModelA"])
        assert cells.num_rows == n_units * n_times
        assert np.isfinite(z_ab)
        assert z_ba == pytest.approx(-z_ab, abs=1e-9)

    def test_generated_experiment_data_validates(self):
        for seed in range(5):
            comparison_data_schema.validate(make_experiment_data(seed=seed))
