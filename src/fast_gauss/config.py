"""
Configuration management for Fast Gauss.

Loads defaults from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from fast_gauss.config import config

    # Cap on the truncation-order search
    limit = config.clustering.truncation_upper_limit

    # Default log level for setup_logging()
    level = config.logging.level
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_TRUNCATION_UPPER_LIMIT = 200
DEFAULT_EPSILON = 1e-3
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class ClusteringConfig:
    """Numerical defaults for clustering and truncation-order selection."""
    truncation_upper_limit: int = DEFAULT_TRUNCATION_UPPER_LIMIT
    default_epsilon: float = DEFAULT_EPSILON

    def __post_init__(self):
        """Validate ranges."""
        if self.truncation_upper_limit < 0:
            raise ValueError(
                f"truncation_upper_limit must be >= 0, "
                f"got {self.truncation_upper_limit}"
            )
        if not 0.0 < self.default_epsilon < 1.0:
            raise ValueError(
                f"default_epsilon must be in (0, 1), got {self.default_epsilon}"
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        """Normalize and check the level name."""
        self.level = (self.level or DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(self.level), int):
            raise ValueError(f"Unknown log level: {self.level}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


class Config:
    """
    Package configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.clustering = ClusteringConfig(
            truncation_upper_limit=_env_int(
                "FAST_GAUSS_TRUNCATION_UPPER_LIMIT", DEFAULT_TRUNCATION_UPPER_LIMIT
            ),
            default_epsilon=_env_float("FAST_GAUSS_DEFAULT_EPSILON", DEFAULT_EPSILON),
        )
        self.logging = LoggingConfig(
            level=os.getenv("FAST_GAUSS_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        )


# Global config instance
config = Config()
