"""All-segments pairing estimator.

Models a stroke as two roughly parallel walls running in opposite
directions. Every segment is paired with the nearest anti-parallel
segment across the ink; the perpendicular gap of each pair is one width
observation. Quadratic in segment count, but needs no interior centroid.
"""

import math

from strokewidth.config import EstimationMethod
from strokewidth.core.deadline import Deadline
from strokewidth.core.estimator import WidthEstimator
from strokewidth.core.geometry import contains, nearest_antiparallel
from strokewidth.domain import Outline, Point, Segment

SIDE_STEPS = 10.0


class AllSegmentsEstimator(WidthEstimator):
    """Estimate stroke width from anti-parallel segment pairs."""

    method = EstimationMethod.ALL_SEGMENTS

    def observe(self, outline: Outline, deadline: Deadline) -> tuple[list[float], int]:
        epsilon = self._epsilon(outline)
        step = SIDE_STEPS * epsilon
        max_distance = self.config.max_pair_distance_ratio * outline.max_dimension
        min_alignment = math.cos(math.radians(self.config.antiparallel_tolerance_degrees))

        segments = list(outline.segments())
        widths: list[float] = []
        excluded = 0

        for segment in segments:
            deadline.check()
            if segment.is_degenerate():
                excluded += 1
                continue

            side = self._ink_side(outline, segment, step)
            if side is None:
                excluded += 1
                continue

            match = nearest_antiparallel(
                segment,
                segments,
                max_distance=max_distance,
                min_alignment=min_alignment,
                side=side,
                epsilon=epsilon,
            )
            if match is None:
                excluded += 1
            else:
                widths.append(match[1])

        return widths, excluded

    def _ink_side(
        self, outline: Outline, segment: Segment, step: float
    ) -> tuple[float, float] | None:
        """Unit normal pointing into the ink, or None if both or neither side is inked."""
        nx, ny = segment.normal()
        mid = segment.midpoint
        left = contains(outline, Point(mid.x + nx * step, mid.y + ny * step))
        right = contains(outline, Point(mid.x - nx * step, mid.y - ny * step))
        if left == right:
            return None
        return (nx, ny) if left else (-nx, -ny)
