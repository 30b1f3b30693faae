"""
Algorithm Core Library - clustering for the Fast Gauss Transform.

This module provides the source-point clustering, truncation-order selection
and expansion-coefficient construction consumed by the transform evaluator.
"""

from .series import (
    term_count,
    compute_monomials,
    compute_constant_series,
    multi_indices,
)
from .truncation import (
    DEFAULT_TRUNCATION_UPPER_LIMIT,
    TruncationSearch,
    search_truncation_order,
    choose_truncation_order,
)
from .clustering import (
    Clustering,
    ClusteringSummary,
    GreedyFarthestPointClustering,
)

__all__ = [
    # Series
    "term_count",
    "compute_monomials",
    "compute_constant_series",
    "multi_indices",
    # Truncation order
    "DEFAULT_TRUNCATION_UPPER_LIMIT",
    "TruncationSearch",
    "search_truncation_order",
    "choose_truncation_order",
    # Clustering
    "Clustering",
    "ClusteringSummary",
    "GreedyFarthestPointClustering",
]
