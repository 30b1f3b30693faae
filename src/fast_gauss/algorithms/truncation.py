"""
Truncation-order selection for the local Hermite expansion.

Chooses the smallest order p whose analytic truncation-error bound, for
clusters of radius at most rx, falls at or below epsilon.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..config import DEFAULT_TRUNCATION_UPPER_LIMIT, config
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

__all__ = [
    "DEFAULT_TRUNCATION_UPPER_LIMIT",
    "TruncationSearch",
    "search_truncation_order",
    "choose_truncation_order",
]


@dataclass(frozen=True)
class TruncationSearch:
    """Outcome of a truncation-order search."""

    order: int
    error: float
    capped: bool = False


def search_truncation_order(
    d: int,
    bandwidth: float,
    epsilon: float,
    rx: float,
    upper_limit: Optional[int] = None,
) -> TruncationSearch:
    """
    Search for the truncation order and report whether the cap was hit.

    Args:
        d: Dimensionality of the source points
        bandwidth: Gaussian bandwidth h (> 0)
        epsilon: Target error in (0, 1)
        rx: Largest cluster radius
        upper_limit: Search cap (default: configured upper limit)

    Returns:
        TruncationSearch with the order, the final error bound and a flag
        telling whether the search stopped at the cap with error > epsilon.
        A capped search returns upper_limit + 1.
    """
    if upper_limit is None:
        upper_limit = config.clustering.truncation_upper_limit

    r = min(math.sqrt(d), bandwidth * math.sqrt(math.log(1.0 / epsilon)))
    rx2 = rx * rx
    h2 = bandwidth * bandwidth
    error = 1.0
    term = 1.0
    p = 0

    # "not <=" keeps searching when inf * 0 produced nan
    while not error <= epsilon and p <= upper_limit:
        p += 1
        b = min((rx + math.sqrt(rx2 + 2 * p * h2)) / 2, rx + r)
        c = rx - b
        term *= 2 * rx * b / h2 / p
        error = term * math.exp(-c * c / h2)

    capped = not error <= epsilon
    if capped:
        logger.warning(
            "Truncation order search hit upper limit %d (d=%d, h=%g, rx=%g): "
            "error bound %g exceeds epsilon %g",
            upper_limit, d, bandwidth, rx, error, epsilon,
        )
    else:
        logger.debug(
            "Truncation order %d (d=%d, h=%g, rx=%g, error bound %g)",
            p, d, bandwidth, rx, error,
        )
    return TruncationSearch(order=p, error=error, capped=capped)


def choose_truncation_order(
    d: int,
    bandwidth: float,
    epsilon: float,
    rx: float,
    upper_limit: Optional[int] = None,
) -> int:
    """Smallest order meeting the error bound, or upper_limit + 1 if none did."""
    return search_truncation_order(d, bandwidth, epsilon, rx, upper_limit).order
