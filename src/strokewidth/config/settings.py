"""Configuration settings for stroke-width."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class EstimationMethod(str, Enum):
    """Available stroke width estimation strategies."""

    CENTER_OF_MASS = "center-of-mass"
    ALL_SEGMENTS = "all-segments"


class Aggregation(str, Enum):
    """How per-ray or per-pair observations collapse into one width."""

    MEDIAN = "median"
    TRIMMED_MEAN = "trimmed_mean"


class GeometryConfig(BaseModel):
    """Configuration for geometry operations with scale-relative tolerances.

    All tolerance values are specified at a reference UPM of 1000 and will be
    scaled proportionally for fonts with different UPM values.
    """

    reference_upm: int = Field(
        default=1000,
        description="Reference UPM for tolerance values",
    )
    line_intersection_epsilon: float = Field(
        default=0.001,
        ge=0.0001,
        le=0.1,
        description="Epsilon for ray/segment intersection and hit deduplication (at reference UPM)",
    )
    bezier_flatten_tolerance: float = Field(
        default=1.0,
        ge=0.1,
        le=10.0,
        description="Tolerance for Bezier curve flattening (at reference UPM)",
    )
    area_epsilon: float = Field(
        default=1.0,
        ge=0.0,
        le=100.0,
        description="Filled area below which a glyph is degenerate (square units at reference UPM)",
    )

    def scale_tolerance(self, base_value: float, upm: int) -> float:
        """Scale a tolerance value for the given UPM.

        Args:
            base_value: The tolerance value at reference UPM
            upm: The actual UPM of the font

        Returns:
            Scaled tolerance value
        """
        return base_value * (upm / self.reference_upm)

    def get_line_epsilon(self, upm: int) -> float:
        """Get line intersection epsilon scaled for UPM."""
        return self.scale_tolerance(self.line_intersection_epsilon, upm)

    def get_bezier_tolerance(self, upm: int) -> float:
        """Get Bezier flattening tolerance scaled for UPM."""
        return self.scale_tolerance(self.bezier_flatten_tolerance, upm)

    def get_area_epsilon(self, upm: int) -> float:
        """Get degenerate-area threshold scaled for UPM (area scales quadratically)."""
        scale = upm / self.reference_upm
        return self.area_epsilon * scale * scale


class EstimatorConfig(BaseModel):
    """Configuration shared by the width estimators."""

    ray_count: int = Field(
        default=360,
        ge=4,
        le=3600,
        description="Number of evenly spaced rays cast from the center of mass",
    )
    aggregation: Aggregation = Field(
        default=Aggregation.MEDIAN,
        description="How observations are combined into one width",
    )
    trim_fraction: float = Field(
        default=0.1,
        ge=0.0,
        lt=0.5,
        description="Fraction trimmed from each end when aggregating with a trimmed mean",
    )
    low_confidence_threshold: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Excluded fraction above which an estimate is flagged low-confidence",
    )
    antiparallel_tolerance_degrees: float = Field(
        default=20.0,
        gt=0.0,
        lt=90.0,
        description="Maximum deviation from exact anti-parallel for segment pairing",
    )
    max_pair_distance_ratio: float = Field(
        default=0.5,
        gt=0.0,
        le=2.0,
        description="Outlier cutoff for pair distance, relative to the glyph's larger dimension",
    )


class BatchConfig(BaseModel):
    """Configuration for batch runs."""

    character: str = Field(
        default="o",
        min_length=1,
        max_length=1,
        description="Character measured in every font",
    )
    method: EstimationMethod = Field(
        default=EstimationMethod.CENTER_OF_MASS,
        description="Estimation strategy used for every unit",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Wall-clock budget per unit",
    )
    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto, 1 = in-process)",
    )
    force: bool = Field(
        default=False,
        description="Recompute units that already have a stored result",
    )
    all_weights: bool = Field(
        default=True,
        description="Measure variable fonts at every 100 units of the wght axis",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class StrokeWidthSettings(BaseModel):
    """Main application settings."""

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> StrokeWidthSettings:
    """Get default application settings."""
    return StrokeWidthSettings()
