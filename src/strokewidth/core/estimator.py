"""Width estimator strategy interface.

Every estimator turns an Outline into a WidthEstimate (or raises a typed
error). Concrete strategies only supply observations; aggregation and
confidence scoring are shared here.
"""

import statistics
from abc import ABC, abstractmethod
from typing import ClassVar

from strokewidth.config import Aggregation, EstimationMethod, EstimatorConfig, GeometryConfig
from strokewidth.core.deadline import Deadline
from strokewidth.domain import Outline, WidthEstimate
from strokewidth.exceptions import DegenerateGeometryError


def aggregate(values: list[float], aggregation: Aggregation, trim_fraction: float = 0.1) -> float:
    """Collapse observations into one value.

    Args:
        values: Non-empty list of observations
        aggregation: Median or trimmed mean
        trim_fraction: Fraction dropped from each end for the trimmed mean

    Returns:
        The aggregated value
    """
    if aggregation == Aggregation.MEDIAN:
        return statistics.median(values)

    ordered = sorted(values)
    cut = int(len(ordered) * trim_fraction)
    kept = ordered[cut : len(ordered) - cut] or ordered
    return statistics.fmean(kept)


class WidthEstimator(ABC):
    """Base class for stroke width estimation strategies.

    Subclasses implement observe(), returning accepted observations and the
    number of excluded rays or segments. The estimator is stateless and safe
    for use in worker processes.
    """

    method: ClassVar[EstimationMethod]

    def __init__(
        self,
        config: EstimatorConfig | None = None,
        geometry: GeometryConfig | None = None,
    ) -> None:
        self.config = config or EstimatorConfig()
        self.geometry = geometry or GeometryConfig()

    def estimate(self, outline: Outline, deadline: Deadline | None = None) -> WidthEstimate:
        """Estimate the stroke width of a glyph.

        Args:
            outline: Flattened glyph outline
            deadline: Cooperative execution budget (None = unlimited)

        Returns:
            WidthEstimate, flagged low-confidence when too much was excluded

        Raises:
            DegenerateGeometryError: If the glyph has no contours or no
                observation survived
            ExecutionTimeoutError: If the deadline expires
        """
        if outline.is_empty():
            raise DegenerateGeometryError(f"Glyph '{outline.name}' has no contours")

        observations, excluded = self.observe(outline, deadline or Deadline.unlimited())
        if not observations:
            raise DegenerateGeometryError(
                f"No usable {self.method.value} observations for '{outline.name}' "
                f"({excluded} excluded)"
            )

        total = len(observations) + excluded
        width = aggregate(observations, self.config.aggregation, self.config.trim_fraction)
        return WidthEstimate(
            width=width,
            method=self.method.value,
            low_confidence=excluded / total > self.config.low_confidence_threshold,
            min_width=min(observations),
            max_width=max(observations),
            sample_count=len(observations),
            excluded_count=excluded,
            units_per_em=outline.units_per_em,
        )

    @abstractmethod
    def observe(self, outline: Outline, deadline: Deadline) -> tuple[list[float], int]:
        """Collect width observations.

        Returns:
            Tuple of (accepted widths in font units, excluded count)
        """

    def _epsilon(self, outline: Outline) -> float:
        return self.geometry.get_line_epsilon(outline.units_per_em)


def get_estimator(
    method: EstimationMethod | str,
    config: EstimatorConfig | None = None,
    geometry: GeometryConfig | None = None,
) -> WidthEstimator:
    """Create the estimator for a method name.

    Raises:
        ValueError: If the method is unknown
    """
    from strokewidth.core.all_segments import AllSegmentsEstimator
    from strokewidth.core.center_of_mass import CenterOfMassEstimator

    method = EstimationMethod(method)
    if method == EstimationMethod.CENTER_OF_MASS:
        return CenterOfMassEstimator(config, geometry)
    return AllSegmentsEstimator(config, geometry)
