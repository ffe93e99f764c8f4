import logging
import warnings
from typing import Any

import numpy as np
import pandas as pd

from ..exceptions import InvalidArgumentError
from ._aggregation_utils import nanmean_z
from ._comparison_config import ComparisonColumns
from ._fbh_utils import _fbh_z

logger = logging.getLogger(__name__)

# Columns of the per-cell result records
CELL_RESULT_COLUMNS = ["unit", "time", "auc_1", "auc_2", "n_p", "n_n", "z", "skipped"]


def _single_row(cell_df: pd.DataFrame, mask: pd.Series, label: Any, unit: Any, time: Any):
    """Returns the one row for `label` in a cell, None if absent."""
    rows = cell_df[mask]
    if len(rows) == 0:
        return None
    if len(rows) > 1:
        raise InvalidArgumentError(
            f"Found {len(rows)} rows for '{label}' in dataset {unit} at time {time}; "
            "expected at most one row per compared value in each cell."
        )
    return rows.iloc[0]


def _as_float(value: Any) -> float:
    """Converts a cell value to float, mapping nulls to NaN."""
    if pd.isna(value):
        return np.nan
    return float(value)


def _skipped_cell(unit: Any, time: Any) -> dict[str, Any]:
    return {
        "unit": unit,
        "time": time,
        "auc_1": None,
        "auc_2": None,
        "n_p": None,
        "n_n": None,
        "z": None,
        "skipped": True,
    }


def _process_single_cell(
    cell_df: pd.DataFrame,
    unit: Any,
    time: Any,
    compare_values: tuple[Any, Any],
    columns: ComparisonColumns,
    verbosity: int,
) -> dict[str, Any]:
    """
    Runs the FBH test for one (unit, time) cell.

    The counts of the first compared value's row are used for both standard errors.
    """
    value_1, value_2 = compare_values
    compare = cell_df[columns.compare_col]

    row_1 = _single_row(cell_df, compare == value_1, value_1, unit, time)
    row_2 = _single_row(cell_df, compare == value_2, value_2, unit, time)

    if row_1 is None or row_2 is None:
        if verbosity <= 0:
            warnings.warn(
                f"Missing performance data for at least one model in dataset {unit} "
                f"time {time}; skipping",
                UserWarning,
            )
        return _skipped_cell(unit, time)

    auc_1 = _as_float(row_1[columns.outcome_col])
    auc_2 = _as_float(row_2[columns.outcome_col])
    n_p = _as_float(row_1[columns.n_p_col])
    n_n = _as_float(row_1[columns.n_n_col])

    other_counts = (_as_float(row_2[columns.n_p_col]), _as_float(row_2[columns.n_n_col]))
    if verbosity <= 0 and not np.allclose((n_p, n_n), other_counts, equal_nan=True):
        warnings.warn(
            f"Positive/negative counts differ between '{value_1}' {(n_p, n_n)} and "
            f"'{value_2}' {other_counts} in dataset {unit} time {time}; "
            f"using the counts of '{value_1}'.",
            UserWarning,
        )

    if n_p <= 0 or n_n <= 0:
        if verbosity <= 0:
            warnings.warn(
                f"Non-positive counts (n_p={n_p}, n_n={n_n}) in dataset {unit} "
                f"time {time}; z-score is undefined for this cell.",
                RuntimeWarning,
            )
        z = np.nan
    else:
        z = float(_fbh_z(auc_1, auc_2, n_p, n_n))

    return {
        "unit": unit,
        "time": time,
        "auc_1": auc_1,
        "auc_2": auc_2,
        "n_p": n_p,
        "n_n": n_n,
        "z": z,
        "skipped": False,
    }


def _process_single_unit(
    unit: Any,
    unit_df: pd.DataFrame,
    compare_values: tuple[Any, Any],
    columns: ComparisonColumns,
    filter_value: Any,
    verbosity: int,
) -> tuple[float, list[dict[str, Any]]]:
    """
    Computes the cell-level z-scores for one independent unit and their mean.

    Args:
        unit: The independent-unit identifier (value of `over_col`).
        unit_df: The filtered rows belonging to this unit.
        compare_values: The two compared identifiers, in order.
        columns: Column-role configuration.
        filter_value: Filter value in effect (only used in messages).
        verbosity: Controls the verbosity of logging and warnings.

    Returns:
        A tuple of the unit's averaged z-score (NaN if no cell could be
        compared) and the list of per-cell result records.
    """
    if verbosity <= -1:
        logger.info(
            f"fetching comparison results for models {compare_values[0]}, "
            f"{compare_values[1]} in dataset {unit} with filter value {filter_value}"
        )

    cell_records = []
    for time, cell_df in unit_df.groupby(columns.time_col, sort=True, dropna=False):
        cell_records.append(
            _process_single_cell(
                cell_df=cell_df,
                unit=unit,
                time=time,
                compare_values=compare_values,
                columns=columns,
                verbosity=verbosity,
            )
        )

    unit_z = nanmean_z([record["z"] for record in cell_records])

    if verbosity <= -1:
        n_skipped = sum(record["skipped"] for record in cell_records)
        logger.info(
            f"dataset {unit}: {len(cell_records)} cells, {n_skipped} skipped, z = {unit_z}"
        )

    return unit_z, cell_records
