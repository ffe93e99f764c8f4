"""
Internal core IO operations: loading comparison data from files or DataFrames.
"""

import os
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.csv as pv
import pyarrow.parquet as pq

_EXTENSION_SOURCE_TYPES = {".csv": "csv", ".parquet": "parquet", ".pq": "parquet"}


def _infer_source_type(source: str | pd.DataFrame) -> str:
    if isinstance(source, pd.DataFrame):
        return "pandas"
    _, ext = os.path.splitext(source)
    source_type = _EXTENSION_SOURCE_TYPES.get(ext.lower())
    if source_type is None:
        raise TypeError(
            f"Cannot infer source type from file extension: {ext}. Please specify source_type."
        )
    return source_type


def _load_data_to_pyarrow(
    source: str | pd.DataFrame,
    source_type: str | None,
    read_options: dict[str, Any],
) -> tuple[pa.Table, str]:
    """
    Loads comparison data into a PyArrow Table.

    Args:
        source: Path to a CSV/Parquet file or a Pandas DataFrame.
        source_type: Explicit source type ('csv', 'parquet', 'pandas') or None to infer.
        read_options: Per-source-type reader options, e.g. {'csv': {...}}.

    Returns:
        A tuple of the loaded PyArrow Table and the resolved source type.

    Raises:
        FileNotFoundError: If the source path does not exist.
        ValueError: If the source type contradicts the source or reading fails.
        TypeError: If the source type is unsupported or cannot be inferred.
    """
    if not isinstance(source, str | pd.DataFrame):
        raise TypeError(
            f"Unsupported source type: {type(source)}. Must be a file path (str) or Pandas DataFrame."
        )
    if isinstance(source, str) and not os.path.exists(source):
        raise FileNotFoundError(f"Source file not found: {source}")

    resolved = source_type if source_type is not None else _infer_source_type(source)

    if isinstance(source, pd.DataFrame):
        if resolved != "pandas":
            raise ValueError(f"Source is a DataFrame, but source_type is '{resolved}'")
        try:
            return pa.Table.from_pandas(source, preserve_index=False), resolved
        except Exception as e:
            raise ValueError(
                f"Failed to convert Pandas DataFrame to PyArrow Table: {e}"
            ) from e

    if resolved == "csv":
        try:
            table = pv.read_csv(source, **read_options.get("csv", {}))
        except Exception as e:
            raise ValueError(f"Failed to read CSV file '{source}' with PyArrow: {e}") from e
    elif resolved == "parquet":
        try:
            table = pq.read_table(source, **read_options.get("parquet", {}))
        except Exception as e:
            raise ValueError(
                f"Failed to read Parquet file '{source}' with PyArrow: {e}"
            ) from e
    else:
        raise TypeError(f"Unsupported source_type for file path: '{resolved}'")

    return table, resolved
