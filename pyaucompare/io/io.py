from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.csv as pv
import pyarrow.parquet as pq

from ..evaluation import ComparisonColumns
from ._io_core import _load_data_to_pyarrow
from ._io_utils import _attach_metadata, _validate_columns


def load_comparison_data(
    source: str | pd.DataFrame,
    time_col: str = "time",
    outcome_col: str = "auc",
    compare_col: str = "model_id",
    over_col: str = "dataset",
    n_col: str = "n",
    n_p_col: str = "n_p",
    n_n_col: str = "n_n",
    filter_col: str | None = "model_variant",
    source_type: str | None = None,  # 'csv', 'parquet', 'pandas'; inferred if None
    read_options: dict[str, Any] | None = None,  # e.g., {'csv': {'parse_options': ...}}
) -> pa.Table:
    """
    Loads and validates AUC comparison data into a PyArrow Table.

    The column roles are stored in the schema metadata, so the returned table
    can be passed to `ComparisonColumns.from_metadata` and on to
    `pyaucompare.evaluation.auc_compare(..., columns=...)`.

    Args:
        source: Path to a CSV/Parquet file or a Pandas DataFrame.
        time_col: Column with the repeated-observation identifier.
        outcome_col: Column with the AUC values (must be numeric).
        compare_col: Column identifying the conditions to compare.
        over_col: Column identifying the independent units.
        n_col: Column with the total number of observations.
        n_p_col: Column with the number of positive observations.
        n_n_col: Column with the number of negative observations.
        filter_col: Optional column used to restrict comparisons. If given it must
                    exist in the data; pass None if the data has no such column.
        source_type: Optional hint for the source type ('csv', 'parquet', 'pandas').
                     If None, inferred from the path extension or object type.
        read_options: Optional dictionary of pyarrow reader options keyed by
                      source type ('csv', 'parquet').

    Returns:
        A validated PyArrow Table with column-role metadata attached.

    Raises:
        FileNotFoundError: If the source path does not exist.
        SchemaError: If required columns are missing or have incorrect types.
        ValueError: If the source cannot be read or converted.
        TypeError: If the source type is unsupported or cannot be inferred.
    """
    if read_options is None:
        read_options = {}

    columns = ComparisonColumns(
        time_col=time_col,
        outcome_col=outcome_col,
        compare_col=compare_col,
        over_col=over_col,
        n_col=n_col,
        n_p_col=n_p_col,
        n_n_col=n_n_col,
        filter_col=filter_col,
    )

    ################
    # 1. Load Data #
    ################
    table, _ = _load_data_to_pyarrow(
        source=source,
        source_type=source_type,
        read_options=read_options,
    )

    #######################
    # 2. Validate Columns #
    #######################
    _validate_columns(table, columns, use_filter=filter_col is not None)

    ##########################
    # 3. Add Schema Metadata #
    ##########################
    return _attach_metadata(table, columns)


def export_comparison_results(
    results_table: pa.Table,
    output_path: str | None = None,
    format: str = "dataframe",
    **kwargs: Any,
) -> pd.DataFrame | None:
    """
    Exports comparison results (e.g. from `auc_compare_cells`) to different formats.

    Args:
        results_table: The PyArrow Table containing the comparison results.
        output_path: The file path to write to. Required for 'csv' and 'parquet'.
        format: 'csv', 'parquet' or 'dataframe' (default).
        **kwargs: Passed to the underlying writer. For 'csv', a `write_options`
                  dict is turned into pyarrow.csv.WriteOptions.

    Returns:
        A Pandas DataFrame for format 'dataframe', otherwise None.

    Raises:
        TypeError: If `results_table` is not a PyArrow Table.
        ValueError: If `format` is invalid or `output_path` is missing for a file format.
    """
    if not isinstance(results_table, pa.Table):
        raise TypeError(
            f"Expected results_table to be a pyarrow.Table, got {type(results_table).__name__}"
        )

    valid_formats = ["dataframe", "csv", "parquet"]
    if format not in valid_formats:
        raise ValueError(f"Invalid format '{format}'. Must be one of {valid_formats}")

    if format in ["csv", "parquet"] and output_path is None:
        raise ValueError(f"output_path must be provided for format '{format}'")

    if format == "dataframe":
        return results_table.to_pandas(**kwargs)
    if format == "csv":
        write_options = pv.WriteOptions(**kwargs.pop("write_options", {}))
        pv.write_csv(results_table, output_path, write_options=write_options, **kwargs)
        return None
    pq.write_table(results_table, output_path, **kwargs)
    return None
