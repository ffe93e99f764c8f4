"""
Column-role configuration for AUC comparisons.
"""

from dataclasses import asdict, dataclass, fields

import pyarrow as pa

# Define standard metadata keys (written by pyaucompare.io.load_comparison_data)
META_KEY_TIME_COL = "pyaucompare.io.time_col"
META_KEY_OUTCOME_COL = "pyaucompare.io.outcome_col"
META_KEY_COMPARE_COL = "pyaucompare.io.compare_col"
META_KEY_OVER_COL = "pyaucompare.io.over_col"
META_KEY_N_COL = "pyaucompare.io.n_col"
META_KEY_N_P_COL = "pyaucompare.io.n_p_col"
META_KEY_N_N_COL = "pyaucompare.io.n_n_col"
META_KEY_FILTER_COL = "pyaucompare.io.filter_col"

# Role -> metadata key; filter_col is the only optional role
_ROLE_META_KEYS = {
    "time_col": META_KEY_TIME_COL,
    "outcome_col": META_KEY_OUTCOME_COL,
    "compare_col": META_KEY_COMPARE_COL,
    "over_col": META_KEY_OVER_COL,
    "n_col": META_KEY_N_COL,
    "n_p_col": META_KEY_N_P_COL,
    "n_n_col": META_KEY_N_N_COL,
    "filter_col": META_KEY_FILTER_COL,
}


def _is_numeric(data_type: pa.DataType) -> bool:
    return (
        pa.types.is_integer(data_type)
        or pa.types.is_floating(data_type)
        or pa.types.is_null(data_type)
    )


@dataclass(frozen=True)
class ComparisonColumns:
    """
    Names the dataset column that carries each role of an AUC comparison.

    Attributes:
        time_col: Repeated-observation identifier (time point, CV fold, ...).
                  z-scores are averaged over it within each independent unit.
        outcome_col: AUC (A') values.
        compare_col: Identifier of the conditions being compared (e.g. model id).
        over_col: Independent-unit identifier (e.g. dataset); per-unit z-scores
                  are combined over it with Stouffer's method.
        n_col: Total number of observations behind each row.
        n_p_col: Number of positive observations.
        n_n_col: Number of negative observations.
        filter_col: Column matched against `filter_value`. Optional if no
                    filter value is used.
    """

    time_col: str = "time"
    outcome_col: str = "auc"
    compare_col: str = "model_id"
    over_col: str = "dataset"
    n_col: str = "n"
    n_p_col: str = "n_p"
    n_n_col: str = "n_n"
    filter_col: str | None = "model_variant"

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if field.name == "filter_col" and value is None:
                continue
            if not isinstance(value, str) or not value:
                raise TypeError(f"{field.name} must be a non-empty string.")

    def required_columns(self, use_filter: bool) -> list[str]:
        """Column names needed downstream, in a stable order without duplicates."""
        names = [
            self.over_col,
            self.time_col,
            self.compare_col,
            self.outcome_col,
            self.n_col,
            self.n_p_col,
            self.n_n_col,
        ]
        if use_filter and self.filter_col is not None:
            names.append(self.filter_col)
        return list(dict.fromkeys(names))

    def numeric_columns(self) -> list[str]:
        """Columns that must hold an integer or floating-point type."""
        return list(dict.fromkeys([self.outcome_col, self.n_col, self.n_p_col, self.n_n_col]))

    def to_metadata(self) -> dict[bytes, bytes]:
        """Encodes the column roles as schema metadata."""
        return {
            _ROLE_META_KEYS[role].encode("utf-8"): name.encode("utf-8")
            for role, name in asdict(self).items()
            if name is not None
        }

    @classmethod
    def from_metadata(cls, table: pa.Table) -> "ComparisonColumns":
        """
        Builds the configuration from schema metadata attached by
        `pyaucompare.io.load_comparison_data`.

        Raises:
            KeyError: If a required metadata key is missing.
            ValueError: If the table has no schema metadata.
        """
        metadata = table.schema.metadata
        if not metadata:
            raise ValueError("Input table is missing schema metadata.")

        kwargs = {}
        for role, key in _ROLE_META_KEYS.items():
            raw = metadata.get(key.encode("utf-8"))
            if raw is None:
                if role == "filter_col":
                    kwargs[role] = None
                    continue
                raise KeyError(f"Required metadata key missing: '{key}'")
            kwargs[role] = raw.decode("utf-8")
        return cls(**kwargs)
