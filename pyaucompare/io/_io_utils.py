"""
Internal utilities for IO operations, like validation and metadata handling.
"""

import pyarrow as pa

from ..evaluation import ComparisonColumns
from ..evaluation._comparison_config import _is_numeric
from ..exceptions import SchemaError


def _validate_columns(table: pa.Table, columns: ComparisonColumns, use_filter: bool) -> None:
    """
    Validates the existence and basic types of the comparison columns.

    Args:
        table: The PyArrow Table to validate.
        columns: Column-role configuration.
        use_filter: Whether `columns.filter_col` must be present.

    Raises:
        SchemaError: If required columns are missing or have unusable types.
    """
    required_cols = columns.required_columns(use_filter=use_filter)
    missing_cols = [c for c in required_cols if c not in table.column_names]
    if missing_cols:
        raise SchemaError(f"Missing required columns in the loaded data: {missing_cols}")

    # --- Type Validations ---
    for col in columns.numeric_columns():
        col_type = table.schema.field(col).type
        if not _is_numeric(col_type):
            raise SchemaError(
                f"Column '{col}' must be a numeric (integer/float) type, "
                f"but found {col_type}."
            )


def _attach_metadata(table: pa.Table, columns: ComparisonColumns) -> pa.Table:
    """
    Attaches the column roles to the table schema as metadata.

    Existing schema metadata is preserved; our keys are added or overwritten.
    """
    existing_metadata = dict(table.schema.metadata or {})
    existing_metadata.update(columns.to_metadata())
    return table.replace_schema_metadata(existing_metadata)
