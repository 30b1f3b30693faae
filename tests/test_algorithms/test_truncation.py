"""
Tests for truncation-order selection.
"""

import logging

import pytest

from fast_gauss.config import config
from fast_gauss.algorithms.truncation import (
    DEFAULT_TRUNCATION_UPPER_LIMIT,
    TruncationSearch,
    choose_truncation_order,
    search_truncation_order,
)


def test_known_order():
    """Hand-checked value: d=2, h=1, rx=0.5, eps=1e-2 needs order 5."""
    assert choose_truncation_order(2, 1.0, 1e-2, 0.5) == 5


def test_zero_radius_needs_single_term():
    """With rx = 0 the first step already has zero error."""
    search = search_truncation_order(3, 0.7, 1e-6, 0.0)
    assert search.order == 1
    assert search.error == 0.0
    assert search.capped is False


def test_search_and_choose_agree():
    search = search_truncation_order(2, 0.8, 1e-4, 0.6)
    assert isinstance(search, TruncationSearch)
    assert choose_truncation_order(2, 0.8, 1e-4, 0.6) == search.order
    assert search.error <= 1e-4


def test_tighter_epsilon_never_needs_fewer_terms():
    """Order is non-decreasing as epsilon decreases."""
    orders = [
        choose_truncation_order(2, 1.0, eps, 0.5)
        for eps in (1e-1, 1e-2, 1e-4, 1e-6, 1e-8, 1e-10)
    ]
    assert orders == sorted(orders)
    assert orders[-1] > orders[0]


def test_bandwidth_spot_values():
    """Wider kernels relative to rx need no more terms than narrower ones."""
    wide = choose_truncation_order(2, 2.0, 1e-2, 0.5)
    medium = choose_truncation_order(2, 1.0, 1e-2, 0.5)
    narrow = choose_truncation_order(2, 0.5, 1e-2, 0.5)

    assert wide == 3
    assert medium == 5
    assert wide <= medium <= narrow


def test_deterministic():
    a = search_truncation_order(4, 0.3, 1e-5, 0.9)
    b = search_truncation_order(4, 0.3, 1e-5, 0.9)
    assert a == b


def test_capped_search(caplog):
    """Hitting the cap returns upper_limit + 1 and logs a warning."""
    with caplog.at_level(logging.WARNING, logger="fast_gauss"):
        search = search_truncation_order(2, 1.0, 1e-12, 0.5, upper_limit=2)

    assert search.order == 3
    assert search.capped is True
    assert search.error > 1e-12
    assert "upper limit" in caplog.text


def test_default_upper_limit():
    assert DEFAULT_TRUNCATION_UPPER_LIMIT == 200


def test_search_uses_configured_upper_limit(monkeypatch):
    """Without an explicit cap the configured limit applies at call time."""
    monkeypatch.setattr(config.clustering, "truncation_upper_limit", 2)

    search = search_truncation_order(2, 1.0, 1e-12, 0.5)
    assert search.order == 3
    assert search.capped is True
