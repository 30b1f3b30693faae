"""
Tests for multi-index series helpers.
"""

import math

import numpy as np
import pytest

from fast_gauss.algorithms.series import (
    term_count,
    compute_monomials,
    compute_constant_series,
    multi_indices,
)


# ------------------------------------------------------------------
# term_count
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "d, p_max, expected",
    [(1, 1, 1), (1, 3, 3), (2, 3, 6), (3, 1, 1), (3, 4, 20), (2, 0, 0)],
)
def test_term_count_values(d, p_max, expected):
    """Term count is C(p_max - 1 + d, d)."""
    assert term_count(d, p_max) == expected


def test_term_count_validation():
    """Test input validation."""
    with pytest.raises(ValueError, match="d must be >= 1"):
        term_count(0, 3)

    with pytest.raises(ValueError, match="p_max must be >= 0"):
        term_count(2, -1)


# ------------------------------------------------------------------
# multi_indices
# ------------------------------------------------------------------


def test_multi_indices_ordering_2d():
    """Graded ordering in two dimensions."""
    expected = np.array([[0, 0], [1, 0], [0, 1], [2, 0], [1, 1], [0, 2]])
    np.testing.assert_array_equal(multi_indices(2, 3), expected)


def test_multi_indices_cover_all_degrees():
    """Every multi-index of degree < p_max appears exactly once, by degree."""
    d, p_max = 3, 5
    table = multi_indices(d, p_max)
    assert table.shape == (term_count(d, p_max), d)

    degrees = table.sum(axis=1)
    assert np.all(np.diff(degrees) >= 0)
    assert degrees.max() == p_max - 1
    assert len({tuple(row) for row in table}) == table.shape[0]


# ------------------------------------------------------------------
# compute_monomials
# ------------------------------------------------------------------


def test_compute_monomials_matches_powers():
    """Monomials equal prod(x ** alpha) for each multi-index."""
    x = np.array([0.3, -1.2, 2.0])
    p_max = 4
    alphas = multi_indices(3, p_max)
    expected = np.prod(x[None, :] ** alphas, axis=1)

    np.testing.assert_allclose(compute_monomials(x, p_max), expected)


def test_compute_monomials_one_dimension():
    """In one dimension the monomials are plain powers."""
    x = np.array([1.5])
    np.testing.assert_allclose(
        compute_monomials(x, 4), [1.0, 1.5, 2.25, 3.375]
    )


def test_compute_monomials_batch():
    """A batch of points gives one row of monomials per point."""
    rng = np.random.default_rng(0)
    X = rng.standard_normal((5, 2))
    batch = compute_monomials(X, 3)

    assert batch.shape == (5, term_count(2, 3))
    for i in range(5):
        np.testing.assert_allclose(batch[i], compute_monomials(X[i], 3))


def test_compute_monomials_order_one():
    """Order 1 keeps only the constant term."""
    np.testing.assert_array_equal(compute_monomials(np.array([4.0, 5.0]), 1), [1.0])


def test_compute_monomials_rejects_3d():
    with pytest.raises(ValueError, match="must be"):
        compute_monomials(np.zeros((2, 2, 2)), 2)


# ------------------------------------------------------------------
# compute_constant_series
# ------------------------------------------------------------------


def test_constant_series_matches_formula():
    """Entries are 2^|alpha| / alpha!."""
    d, p_max = 3, 5
    alphas = multi_indices(d, p_max)
    expected = np.array(
        [
            2.0 ** row.sum() / np.prod([math.factorial(int(a)) for a in row])
            for row in alphas
        ]
    )

    np.testing.assert_allclose(compute_constant_series(d, p_max), expected)


def test_constant_series_independent_of_calls():
    """The series is a pure function of d and p_max."""
    np.testing.assert_array_equal(
        compute_constant_series(2, 6), compute_constant_series(2, 6)
    )
    assert compute_constant_series(2, 0).shape == (0,)
