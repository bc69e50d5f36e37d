"""Utility functions for stroke-width.

This module provides:

- Logging setup and configuration
- Batch lifecycle logging and statistics
"""

from strokewidth.utils.logging import (
    BatchLogger,
    BatchStats,
    configure_logging,
)

__all__ = [
    "BatchLogger",
    "BatchStats",
    "configure_logging",
]
