"""
Internal utilities for reducing collections of z-scores.

Missing entries may be given as None, NaN or pd.NA; all are treated as missing.
"""

import numpy as np
import pandas as pd


def _to_float_array(z_scores) -> np.ndarray:
    """Converts a sequence of optional z-scores to a 1-D float array (missing -> NaN)."""
    if z_scores is None:
        raise TypeError("z_scores must be a sequence of numbers, not None.")
    values = [np.nan if pd.isna(z) else z for z in np.ravel(np.asarray(z_scores, dtype=object))]
    return np.asarray(values, dtype=float)


def stouffer_z(z_scores, ignore_na: bool = True) -> float:
    """
    Computes an aggregate z-score using Stouffer's method: sum(z) / sqrt(k),
    where k is the number of present (non-missing) z-scores.

    References:
        Stouffer, S.A.; Suchman, E.A.; DeVinney, L.C.; Star, S.A.; Williams, R.M. Jr.
        The American Soldier, Vol.1: Adjustment during Army Life (1949).

    Args:
        z_scores: Sequence of z-scores; None, NaN and pd.NA entries are missing.
        ignore_na: If True (default), missing entries are left out of the sum.
                   If False, any missing entry makes the result NaN.

    Returns:
        The aggregated z-score. NaN if there are no present values.
    """
    z = _to_float_array(z_scores)
    present = ~np.isnan(z)
    k = int(np.sum(present))

    s_z = np.sum(z[present]) if ignore_na else np.sum(z)

    with np.errstate(invalid="ignore", divide="ignore"):
        result = np.float64(s_z) / np.sqrt(np.float64(k))
    return float(result)


def nanmean_z(z_scores) -> float:
    """Arithmetic mean of the present z-scores; NaN if none are present."""
    z = _to_float_array(z_scores)
    present = z[~np.isnan(z)]
    if present.size == 0:
        return np.nan
    return float(np.mean(present))
