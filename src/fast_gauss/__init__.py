"""
Fast Gauss - Core Package

Clustering core of the Fast Gauss Transform: sums of Gaussian kernels over
many source points approximated with truncated local expansions.

This package provides:
- Greedy farthest-point (k-center) clustering of source points
- Truncation-order selection from an error bound
- Per-cluster expansion coefficients for arbitrary point weights
"""

__version__ = "0.1.0"

from .algorithms import (
    Clustering,
    ClusteringSummary,
    GreedyFarthestPointClustering,
    choose_truncation_order,
)

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import utils

__all__ = [
    "Clustering",
    "ClusteringSummary",
    "GreedyFarthestPointClustering",
    "choose_truncation_order",
    "algorithms",
    "utils",
]
