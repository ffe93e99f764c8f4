"""
Model comparison utilities for comparing the AUC of two models using the FBH method.
"""

from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.compute as pc

from ..exceptions import InvalidArgumentError, SchemaError
from ._aggregation_utils import stouffer_z
from ._comparison_config import ComparisonColumns, _is_numeric
from ._comparison_process import CELL_RESULT_COLUMNS
from ._comparison_process_parallel import process_units


def _resolve_columns(
    columns: ComparisonColumns | None,
    time_col: str,
    outcome_col: str,
    compare_col: str,
    over_col: str,
    n_col: str,
    n_p_col: str,
    n_n_col: str,
    filter_col: str | None,
) -> ComparisonColumns:
    if columns is not None:
        if not isinstance(columns, ComparisonColumns):
            raise TypeError("columns must be a ComparisonColumns instance or None.")
        return columns
    return ComparisonColumns(
        time_col=time_col,
        outcome_col=outcome_col,
        compare_col=compare_col,
        over_col=over_col,
        n_col=n_col,
        n_p_col=n_p_col,
        n_n_col=n_n_col,
        filter_col=filter_col,
    )


def _validate_compare_values(compare_values: Any) -> tuple[Any, Any]:
    if isinstance(compare_values, str) or not isinstance(compare_values, list | tuple):
        raise InvalidArgumentError(
            "compare_values must be a list or tuple of the two values to compare."
        )
    if len(compare_values) != 2:
        raise InvalidArgumentError(
            f"compare_values must contain exactly 2 values, got {len(compare_values)}."
        )
    if compare_values[0] == compare_values[1]:
        raise InvalidArgumentError(
            f"compare_values must be two distinct values, got {list(compare_values)}."
        )
    return compare_values[0], compare_values[1]


def _as_table(data: pa.Table | pd.DataFrame) -> pa.Table:
    if isinstance(data, pa.Table):
        return data
    if isinstance(data, pd.DataFrame):
        try:
            return pa.Table.from_pandas(data, preserve_index=False)
        except Exception as e:
            raise ValueError(
                f"Failed to convert Pandas DataFrame to PyArrow Table: {e}"
            ) from e
    raise TypeError(
        f"Input 'data' must be a PyArrow Table or Pandas DataFrame, got {type(data).__name__}."
    )


def _validate_schema(table: pa.Table, required: list[str], columns: ComparisonColumns):
    """Checks that required columns exist and that numeric roles are numeric."""
    missing_cols = [c for c in required if c not in table.column_names]
    if missing_cols:
        raise SchemaError(f"Missing required columns in the data: {missing_cols}")

    for col in columns.numeric_columns():
        col_type = table.schema.field(col).type
        if not _is_numeric(col_type):
            raise SchemaError(
                f"Column '{col}' must be a numeric (integer/float) type, but found {col_type}."
            )


def _decode(column: pa.ChunkedArray) -> pa.ChunkedArray:
    # Dictionary (categorical) columns are compared on their values
    if pa.types.is_dictionary(column.type):
        return column.cast(column.type.value_type)
    return column


def _membership_mask(column: pa.ChunkedArray, values: list[Any], name: str):
    """
    Boolean mask of rows whose value is one of `values` (nulls never match),
    together with `values` cast to the column type.
    """
    if pa.types.is_null(column.type):
        # An all-null column matches nothing
        return pc.is_valid(column), list(values)
    try:
        value_set = pa.array(values).cast(column.type)
    except (pa.ArrowInvalid, pa.ArrowTypeError, pa.ArrowNotImplementedError) as e:
        raise InvalidArgumentError(
            f"Values {values} cannot be compared with column '{name}' of type {column.type}: {e}"
        ) from e
    return pc.is_in(column, value_set=value_set), value_set.to_pylist()


def _filter_comparison_rows(
    table: pa.Table,
    compare_values: tuple[Any, Any],
    filter_value: Any,
    columns: ComparisonColumns,
) -> tuple[pa.Table, tuple[Any, Any]]:
    """
    Keeps rows whose compare_col is one of compare_values and, if a filter value
    is set, whose filter_col equals it (or is one of them, for a list/tuple).

    Returns the filtered table and compare_values cast to the type of compare_col,
    which is what the per-cell rows are matched against.
    """
    required = columns.required_columns(use_filter=filter_value is not None)
    table = table.select(required)
    table = pa.table(
        {name: _decode(table[name]) for name in table.column_names}
    )

    mask, cast_values = _membership_mask(
        table[columns.compare_col], list(compare_values), columns.compare_col
    )
    if filter_value is not None:
        filter_values = (
            list(filter_value) if isinstance(filter_value, list | tuple) else [filter_value]
        )
        filter_mask, _ = _membership_mask(
            table[columns.filter_col], filter_values, columns.filter_col
        )
        mask = pc.and_(mask, filter_mask)
    return table.filter(mask), (cast_values[0], cast_values[1])


def _run_comparison(
    data: pa.Table | pd.DataFrame,
    compare_values: Any,
    filter_value: Any,
    columns: ComparisonColumns,
    verbosity: int,
    n_jobs: int | None,
) -> tuple[pa.Table, list[Any], list[tuple[float, list[dict[str, Any]]]]]:
    """Validates inputs, filters, groups by unit and processes every unit."""
    ######################
    # 1. Validate Inputs #
    ######################
    pair = _validate_compare_values(compare_values)
    if not isinstance(verbosity, int) or isinstance(verbosity, bool):
        raise InvalidArgumentError("verbosity must be an integer.")
    if n_jobs is not None and (
        not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or (n_jobs <= 0 and n_jobs != -1)
    ):
        raise InvalidArgumentError("n_jobs must be a positive integer, -1 or None.")

    table = _as_table(data)
    use_filter = filter_value is not None
    if use_filter and columns.filter_col is None:
        raise InvalidArgumentError("filter_value was given but filter_col is None.")
    _validate_schema(table, columns.required_columns(use_filter), columns)

    #############################
    # 2. Filter & Group by Unit #
    #############################
    filtered, pair = _filter_comparison_rows(table, pair, filter_value, columns)
    df = filtered.to_pandas()

    unit_items = list(df.groupby(columns.over_col, sort=True, dropna=False))

    ######################
    # 3. Process Units   #
    ######################
    unit_results = process_units(
        unit_items=unit_items,
        compare_values=pair,
        columns=columns,
        filter_value=filter_value,
        verbosity=verbosity,
        n_jobs=n_jobs,
    )
    units = [unit for unit, _ in unit_items]
    return filtered, units, unit_results


def auc_compare(
    data: pa.Table | pd.DataFrame,
    compare_values: list[Any] | tuple[Any, Any],
    filter_value: Any = None,
    time_col: str = "time",
    outcome_col: str = "auc",
    compare_col: str = "model_id",
    over_col: str = "dataset",
    n_col: str = "n",
    n_p_col: str = "n_p",
    n_n_col: str = "n_n",
    filter_col: str | None = "model_variant",
    columns: ComparisonColumns | None = None,
    verbosity: int = 0,
    n_jobs: int | None = 1,
) -> float:
    """
    Compare AUC values of two models using the FBH method.

    Applies the FBH z-test to compare `outcome_col` by `compare_col` within every
    (`over_col`, `time_col`) cell, averages the z-scores over `time_col` within
    each `over_col` unit (due to non-independence), and then combines the unit
    z-scores over `over_col` using Stouffer's method.

    Args:
        data: PyArrow Table or Pandas DataFrame with one row per model, unit and
              time point.
        compare_values: The two values of `compare_col` to compare (e.g.
                        ["ModelA", "ModelB"]). Their order sets the sign of the result.
        filter_value: Optional value (or list of values) of `filter_col` to keep.
                      If None, no filtering on `filter_col` is done and the
                      column is not required.
        time_col: Column with the time of the observations. Can also be another
                  dependent grouping, such as cross-validation folds.
        outcome_col: Column with the AUC (A') to compare. The method applies
                     specifically to AUC and not to other metrics.
        compare_col: Column identifying the conditions to compare.
        over_col: Identifier of independent experiments, iterations, etc. over
                  which unit z-scores are combined with Stouffer's method.
        n_col: Column with the total number of observations behind each row.
        n_p_col: Column with the number of positive observations.
        n_n_col: Column with the number of negative observations.
        filter_col: Column matched against `filter_value`.
        columns: Optional ComparisonColumns; overrides the individual *_col arguments.
        verbosity: Controls the verbosity of logging and warnings.
                   - `<= -1`: Log progress at INFO level and show warnings.
                   - `== 0`: Show warnings, e.g. for skipped cells (default).
                   - `>= 1`: Suppress warnings.
        n_jobs: Number of processes used over units. 1 (default) runs in-process,
                None or -1 uses all CPUs.

    Returns:
        Overall z-score of the comparison. NaN if no cell could be compared.
        Convert to a p-value with e.g. `2 * scipy.stats.norm.sf(abs(z))`.

    Raises:
        InvalidArgumentError: If compare_values is not a pair of distinct values,
                              the filter/compare values don't match the column
                              types, verbosity/n_jobs are invalid, or a cell holds
                              more than one row for a compared value.
        SchemaError: If a required column is missing or a numeric column is not numeric.
        TypeError: If `data` or `columns` has the wrong type.

    Example:
        >>> auc_compare(
        ...     experiment_data,
        ...     compare_values=["ModelA", "ModelB"],
        ...     filter_value="VariantA",
        ...     compare_col="model_id",
        ...     filter_col="model_variant",
        ... )
        >>> # Compare variants of one model instead
        >>> auc_compare(
        ...     experiment_data,
        ...     compare_values=["VariantA", "VariantB"],
        ...     filter_value="ModelC",
        ...     compare_col="model_variant",
        ...     filter_col="model_id",
        ... )
    """
    columns = _resolve_columns(
        columns, time_col, outcome_col, compare_col, over_col, n_col, n_p_col, n_n_col, filter_col
    )
    _, _, unit_results = _run_comparison(
        data, compare_values, filter_value, columns, verbosity, n_jobs
    )
    return stouffer_z([unit_z for unit_z, _ in unit_results], ignore_na=True)


def auc_compare_cells(
    data: pa.Table | pd.DataFrame,
    compare_values: list[Any] | tuple[Any, Any],
    filter_value: Any = None,
    time_col: str = "time",
    outcome_col: str = "auc",
    compare_col: str = "model_id",
    over_col: str = "dataset",
    n_col: str = "n",
    n_p_col: str = "n_p",
    n_n_col: str = "n_n",
    filter_col: str | None = "model_variant",
    columns: ComparisonColumns | None = None,
    verbosity: int = 0,
    n_jobs: int | None = 1,
) -> pa.Table:
    """
    Runs the same comparison as `auc_compare` and returns the per-cell results.

    Takes exactly the arguments of `auc_compare`.

    Returns:
        PyArrow Table with one row per (unit, time) cell, sorted by unit then time:
        - unit: Value of `over_col`
        - time: Value of `time_col`
        - auc_1, auc_2: AUC of compare_values[0] and compare_values[1]
        - n_p, n_n: Counts used for both standard errors
        - z: FBH z-score of auc_1 - auc_2
        - skipped: True if one of the compared values had no row in the cell
        auc_1, auc_2, n_p, n_n and z are null for skipped cells.
    """
    columns = _resolve_columns(
        columns, time_col, outcome_col, compare_col, over_col, n_col, n_p_col, n_n_col, filter_col
    )
    filtered, _, unit_results = _run_comparison(
        data, compare_values, filter_value, columns, verbosity, n_jobs
    )

    records = [record for _, cell_records in unit_results for record in cell_records]

    result_schema = pa.schema(
        [
            pa.field("unit", filtered.schema.field(columns.over_col).type),
            pa.field("time", filtered.schema.field(columns.time_col).type),
            pa.field("auc_1", pa.float64()),
            pa.field("auc_2", pa.float64()),
            pa.field("n_p", pa.float64()),
            pa.field("n_n", pa.float64()),
            pa.field("z", pa.float64()),
            pa.field("skipped", pa.bool_()),
        ]
    )

    try:
        result_df = pd.DataFrame.from_records(records, columns=CELL_RESULT_COLUMNS)
        result_table = pa.Table.from_pandas(
            result_df, schema=result_schema, preserve_index=False
        )
    except Exception as e:
        raise RuntimeError(f"Failed to create comparison table: {e}") from e

    return result_table
