"""
Tests for the _fbh_utils module (standard error of AUC and the FBH z-test).
"""

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pyaucompare.evaluation import _fbh_utils as fbh
from pyaucompare.exceptions import InvalidArgumentError

#############
# Strategies #
#############
valid_auc = st.floats(min_value=0.01, max_value=0.99, allow_nan=False)
valid_count = st.integers(min_value=1, max_value=10_000)


##########
# se_auc #
##########
@pytest.mark.parametrize(
    "auc, n_p, n_n, expected",
    [
        (0.75, 20, 200, 0.06498),
        (0.75, 110, 110, 0.03282),  # same N, balanced classes
        (0.75, 20, 20, 0.07789),  # smaller sample
        (0.5, 1, 1, 0.5),  # sqrt(0.25 / 1)
    ],
    ids=["unbalanced", "balanced", "small", "single-case"],
)
def test_se_auc_known_values(auc, n_p, n_n, expected):
    """Test se_auc against hand-computed Hanley-McNeil values."""
    assert fbh.se_auc(auc, n_p, n_n) == pytest.approx(expected, abs=1e-4)


def test_se_auc_balance_and_size_ordering():
    """Balanced classes shrink the SE at fixed N; smaller samples grow it."""
    unbalanced = fbh.se_auc(0.75, 20, 200)
    balanced = fbh.se_auc(0.75, 110, 110)
    small = fbh.se_auc(0.75, 20, 20)

    assert balanced < unbalanced
    assert small > unbalanced


def test_se_auc_returns_float_for_scalars():
    result = fbh.se_auc(0.8, 100, 100)
    assert isinstance(result, float)


def test_se_auc_vectorised():
    """Array inputs broadcast and return an array."""
    result = fbh.se_auc(np.array([0.6, 0.7, 0.8]), 100, np.array([100, 200, 300]))

    assert isinstance(result, np.ndarray)
    assert result.shape == (3,)
    for i, (auc, n_n) in enumerate([(0.6, 100), (0.7, 200), (0.8, 300)]):
        assert result[i] == pytest.approx(fbh.se_auc(auc, 100, n_n))


def test_se_auc_negative_radicand_is_nan():
    """An out-of-range AUC with single-case counts yields NaN, not an exception."""
    with np.errstate(all="raise"):
        result = fbh.se_auc(1.5, 1, 2)
    assert np.isnan(result)


@pytest.mark.parametrize(
    "n_p, n_n",
    [(0, 10), (10, 0), (-5, 10), (10, np.array([5, 0]))],
    ids=["n_p=0", "n_n=0", "n_p<0", "array-with-zero"],
)
def test_se_auc_rejects_non_positive_counts(n_p, n_n):
    with pytest.raises(InvalidArgumentError, match="positive count"):
        fbh.se_auc(0.7, n_p, n_n)


@pytest.mark.parametrize("n_p", ["100", True, None], ids=["str", "bool", "None"])
def test_se_auc_rejects_non_numeric_counts(n_p):
    with pytest.raises(InvalidArgumentError, match="numeric"):
        fbh.se_auc(0.7, n_p, 100)


def test_invalid_argument_error_is_value_error():
    with pytest.raises(ValueError):
        fbh.se_auc(0.7, 0, 100)


@settings(max_examples=200, deadline=None)
@given(auc=valid_auc, n=st.integers(min_value=1, max_value=5_000))
def test_se_auc_non_negative_and_shrinks_with_sample_size(auc, n):
    se_n = fbh.se_auc(auc, n, n)
    se_2n = fbh.se_auc(auc, 2 * n, 2 * n)

    assert se_n >= 0
    assert se_n >= se_2n - 1e-12


############
# fbh_test #
############
def test_fbh_test_identical_auc_is_zero():
    assert fbh.fbh_test(0.56, 0.56, 1000, 2500) == 0.0


def test_fbh_test_sign_follows_argument_order():
    z_lower_first = fbh.fbh_test(0.56, 0.59, 1000, 2500)
    z_higher_first = fbh.fbh_test(0.59, 0.56, 1000, 2500)

    assert z_lower_first < 0
    assert z_higher_first == pytest.approx(-z_lower_first)


def test_fbh_test_matches_formula():
    se_1 = fbh.se_auc(0.9, 500, 500)
    se_2 = fbh.se_auc(0.7, 500, 500)
    expected = (0.9 - 0.7) / np.sqrt(se_1**2 + se_2**2)

    z = fbh.fbh_test(0.9, 0.7, 500, 500)

    assert z == pytest.approx(expected)
    assert z > 5  # clearly significant


def test_fbh_test_nan_propagates():
    assert np.isnan(fbh.fbh_test(np.nan, 0.7, 100, 100))
    assert np.isnan(fbh.fbh_test(1.5, 0.7, 1, 2))


def test_fbh_test_zero_denominator_is_nan():
    """Two perfect classifiers have zero SE; 0/0 is NaN."""
    assert np.isnan(fbh.fbh_test(1.0, 1.0, 100, 100))


def test_fbh_test_vectorised():
    z = fbh.fbh_test(np.array([0.8, 0.7]), np.array([0.7, 0.8]), 200, 400)
    assert isinstance(z, np.ndarray)
    assert z[0] == pytest.approx(-z[1])


def test_fbh_test_rejects_invalid_counts():
    with pytest.raises(InvalidArgumentError):
        fbh.fbh_test(0.7, 0.6, 0, 100)


@settings(max_examples=200, deadline=None)
@given(auc=valid_auc, n_p=valid_count, n_n=valid_count)
def test_fbh_test_same_auc_property(auc, n_p, n_n):
    assert fbh.fbh_test(auc, auc, n_p, n_n) == 0.0


@settings(max_examples=200, deadline=None)
@given(auc_1=valid_auc, auc_2=valid_auc, n_p=valid_count, n_n=valid_count)
def test_fbh_test_antisymmetric_property(auc_1, auc_2, n_p, n_n):
    z_12 = fbh.fbh_test(auc_1, auc_2, n_p, n_n)
    z_21 = fbh.fbh_test(auc_2, auc_1, n_p, n_n)
    assert z_12 == pytest.approx(-z_21)
