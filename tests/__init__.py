"""
Test suite for Fast Gauss.

This package contains all tests organized by component:
- test_algorithms/: Tests for series, truncation order and clustering
- test_config.py: Tests for configuration and logging setup
"""
