"""
Multi-index series helpers for the local Hermite expansion.

All functions enumerate multi-indices alpha with total degree |alpha| < p_max
in the same graded ordering: the constant term first, then one block per
degree. Each degree is built dimension by dimension, extending the previous
degree's terms from that dimension's head onward, so column t of every array
returned here refers to the same multi-index.
"""

from __future__ import annotations

import math
import sys
from typing import List

import numpy as np


def term_count(d: int, p_max: int) -> int:
    """
    Number of multi-indices of total degree below p_max in d dimensions.

    Args:
        d: Dimensionality (>= 1)
        p_max: Truncation order (>= 0)

    Returns:
        C(p_max - 1 + d, d), or 0 when p_max is 0

    Raises:
        ValueError: If d < 1 or p_max < 0
    """
    if d < 1:
        raise ValueError(f"d must be >= 1, got {d}")
    if p_max < 0:
        raise ValueError(f"p_max must be >= 0, got {p_max}")
    if p_max == 0:
        return 0
    return math.comb(p_max - 1 + d, d)


def compute_monomials(x: np.ndarray, p_max: int) -> np.ndarray:
    """
    Evaluate every monomial x^alpha with |alpha| < p_max.

    Accepts a single point of shape (d,) or a batch of shape (n, d); the
    monomials are laid out along the last axis, giving (T,) or (n, T).
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim not in (1, 2):
        raise ValueError(f"x must be (d,) or (n, d); got {x.shape}")
    d = x.shape[-1]
    monomials = np.ones(x.shape[:-1] + (term_count(d, p_max),), dtype=np.float64)

    heads = [0] * d
    t = tail = 1
    for _ in range(1, p_max):
        for i in range(d):
            head = heads[i]
            heads[i] = t
            width = tail - head
            monomials[..., t : t + width] = (
                x[..., i : i + 1] * monomials[..., head:tail]
            )
            t += width
        tail = t
    return monomials


def compute_constant_series(d: int, p_max: int) -> np.ndarray:
    """
    Normalization coefficients 2^|alpha| / alpha! for every multi-index.

    Depends only on d and p_max, never on the data.
    """
    series = np.ones(term_count(d, p_max), dtype=np.float64)
    # exponent of the dimension most recently multiplied into each term
    cinds = np.zeros(series.shape[0], dtype=np.int64)
    heads: List[int] = [0] * d + [sys.maxsize]

    t = tail = 1
    for _ in range(1, p_max):
        for i in range(d):
            head = heads[i]
            heads[i] = t
            width = tail - head
            # terms before the next dimension's head already contain x_i
            counts = cinds[head:tail] + 1
            counts[min(heads[i + 1], tail) - head :] = 1
            cinds[t : t + width] = counts
            series[t : t + width] = 2.0 * series[head:tail] / counts
            t += width
        tail = t
    return series


def multi_indices(d: int, p_max: int) -> np.ndarray:
    """Exponent table of shape (T, d), row t being the multi-index of column t."""
    table = np.zeros((term_count(d, p_max), d), dtype=np.int64)
    heads = [0] * d
    t = tail = 1
    for _ in range(1, p_max):
        for i in range(d):
            head = heads[i]
            heads[i] = t
            width = tail - head
            table[t : t + width] = table[head:tail]
            table[t : t + width, i] += 1
            t += width
        tail = t
    return table
