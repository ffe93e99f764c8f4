"""
Internal utility functions for the FBH (Fogarty, Baker and Hudson) AUC comparison.

References:
    Hanley and McNeil, The meaning and use of the area under a receiver operating
    characteristic (ROC) curve. Radiology (1982) 143 (1) pp. 29-36.
    Fogarty, Baker and Hudson, Case Studies in the use of ROC Curve Analysis for
    Sensor-Based Estimates in Human Computer Interaction, Proceedings of Graphics
    Interface (2005) pp. 129-136.
"""

import numpy as np

from ..exceptions import InvalidArgumentError


def _validate_count_inputs(n_p, n_n):
    """Validates the positive/negative case counts shared by the FBH functions."""
    for name, value in (("n_p", n_p), ("n_n", n_n)):
        arr = np.asarray(value)
        if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.number):
            raise InvalidArgumentError(f"{name} must be numeric, got {arr.dtype}.")
        if arr.size == 0:
            raise InvalidArgumentError(f"{name} cannot be empty.")
        if np.any(arr <= 0):
            raise InvalidArgumentError(f"{name} must be a positive count.")


def _as_output(value):
    """Returns a plain float for 0-d results, the array otherwise."""
    if np.ndim(value) == 0:
        return float(value)
    return value


def _se_auc(auc, n_p, n_n):
    # No validation here: cell-level callers rely on NaN propagation
    auc = np.asarray(auc, dtype=float)
    n_p = np.asarray(n_p, dtype=float)
    n_n = np.asarray(n_n, dtype=float)

    with np.errstate(invalid="ignore", divide="ignore"):
        d_p = (n_p - 1) * ((auc / (2 - auc)) - auc**2)
        d_n = (n_n - 1) * ((2 * auc**2) / (1 + auc) - auc**2)
        se = np.sqrt((auc * (1 - auc) + d_p + d_n) / (n_p * n_n))
    return se


def _fbh_z(auc_1, auc_2, n_p, n_n):
    se_1 = _se_auc(auc_1, n_p, n_n)
    se_2 = _se_auc(auc_2, n_p, n_n)

    with np.errstate(invalid="ignore", divide="ignore"):
        z = (np.asarray(auc_1, dtype=float) - np.asarray(auc_2, dtype=float)) / np.sqrt(
            se_1**2 + se_2**2
        )
    return z


def se_auc(auc, n_p, n_n):
    """
    Computes the standard error of an AUC score, using its equivalence to the
    Wilcoxon statistic (Hanley and McNeil, 1982).

    Standard error decreases as the data become more balanced over the
    positive/negative outcome classes (holding sample size fixed), and increases
    as the sample size shrinks.

    Args:
        auc: Value of the A' statistic (AUC). Not range-checked.
        n_p: Number of positive cases.
        n_n: Number of negative cases.

    All arguments may be scalars or array-likes; they are broadcast with NumPy.

    Returns:
        The standard error as a float for scalar inputs, otherwise a NumPy array.
        NaN where the radicand is negative (possible when n_p or n_n is 1).

    Raises:
        InvalidArgumentError: If n_p or n_n is non-numeric or not strictly positive.

    Example:
        >>> se_auc(0.75, 20, 200)
        >>> se_auc(0.75, 110, 110)  # more balanced, smaller SE
        >>> se_auc(0.75, 20, 20)  # smaller sample, larger SE
    """
    _validate_count_inputs(n_p, n_n)
    return _as_output(_se_auc(auc, n_p, n_n))


def fbh_test(auc_1, auc_2, n_p, n_n):
    """
    Applies the FBH z-test for the difference between auc_1 and auc_2.

    Both standard errors are computed from the same (n_p, n_n), i.e. both
    conditions are assumed to have been evaluated on the same sample.

    Args:
        auc_1: AUC of the first condition.
        auc_2: AUC of the second condition.
        n_p: Number of positive observations.
        n_n: Number of negative observations.

    Returns:
        z-score of the comparison auc_1 - auc_2. Swapping auc_1 and auc_2 flips
        its sign. NaN when either standard error is NaN or both are zero.

    Raises:
        InvalidArgumentError: If n_p or n_n is non-numeric or not strictly positive.

    Example:
        >>> fbh_test(0.56, 0.56, 1000, 2500)  # 0.0
        >>> fbh_test(0.56, 0.59, 1000, 2500)
        >>> fbh_test(0.59, 0.56, 1000, 2500)  # same magnitude, opposite sign
    """
    _validate_count_inputs(n_p, n_n)
    return _as_output(_fbh_z(auc_1, auc_2, n_p, n_n))
