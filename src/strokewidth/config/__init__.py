"""Configuration management for stroke-width.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- GeometryConfig: UPM-relative tolerances
- EstimatorConfig: Ray count, aggregation and confidence settings
- BatchConfig: Batch run settings
- LoggingConfig: Logging settings
- StrokeWidthSettings: Main application settings
"""

from strokewidth.config.settings import (
    Aggregation,
    BatchConfig,
    EstimationMethod,
    EstimatorConfig,
    GeometryConfig,
    LoggingConfig,
    StrokeWidthSettings,
    get_default_settings,
)

__all__ = [
    "Aggregation",
    "BatchConfig",
    "EstimationMethod",
    "EstimatorConfig",
    "GeometryConfig",
    "LoggingConfig",
    "StrokeWidthSettings",
    "get_default_settings",
]
