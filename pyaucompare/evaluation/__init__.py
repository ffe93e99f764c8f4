from ._aggregation_utils import nanmean_z, stouffer_z
from ._comparison_config import (
    META_KEY_COMPARE_COL,
    META_KEY_FILTER_COL,
    META_KEY_N_COL,
    META_KEY_N_N_COL,
    META_KEY_N_P_COL,
    META_KEY_OUTCOME_COL,
    META_KEY_OVER_COL,
    META_KEY_TIME_COL,
    ComparisonColumns,
)
from ._fbh_utils import fbh_test, se_auc
from .model_comparison import auc_compare, auc_compare_cells

__all__ = [
    "se_auc",
    "fbh_test",
    "stouffer_z",
    "nanmean_z",
    "auc_compare",
    "auc_compare_cells",
    "ComparisonColumns",
    "META_KEY_TIME_COL",
    "META_KEY_OUTCOME_COL",
    "META_KEY_COMPARE_COL",
    "META_KEY_OVER_COL",
    "META_KEY_N_COL",
    "META_KEY_N_P_COL",
    "META_KEY_N_N_COL",
    "META_KEY_FILTER_COL",
]
