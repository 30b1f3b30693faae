"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest


@pytest.fixture
def points_2d():
    """Forty random points in the plane."""
    rng = np.random.default_rng(42)
    return rng.standard_normal((40, 2))


@pytest.fixture
def blobs_3d():
    """Three well-separated blobs of 30 points each in 3 dimensions."""
    rng = np.random.default_rng(7)
    centers = np.array([[0.0, 0.0, 0.0], [6.0, 0.0, 0.0], [0.0, 6.0, 0.0]])
    return np.vstack([c + rng.standard_normal((30, 3)) * 0.3 for c in centers])


@pytest.fixture
def small_points():
    """Factory for small synthetic point sets used in brute-force checks."""

    def make(n, d, seed=0):
        rng = np.random.default_rng(seed)
        return rng.uniform(-1.0, 1.0, size=(n, d))

    return make
