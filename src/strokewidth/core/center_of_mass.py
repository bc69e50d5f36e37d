"""Center-of-mass ray casting estimator.

Rays are sprayed from the glyph's centroid. Where a ray first crosses the
ink boundary, a rib is cast along the boundary's normal into the ink; the
rib ends where the ink ends and its length is one stroke width sample.
For an "o" the centroid sits in the counter and every rib spans the bowl.
"""

import math

from strokewidth.config import EstimationMethod
from strokewidth.core.deadline import Deadline
from strokewidth.core.estimator import WidthEstimator
from strokewidth.core.geometry import (
    Ray,
    RayHit,
    cast_ray,
    centroid,
    contains,
    encloses,
    winding_number,
)
from strokewidth.domain import Outline, Point
from strokewidth.exceptions import CenterOutsideShapeError

# Offset, in epsilons, used to sample ink on either side of a boundary
SIDE_STEPS = 10.0


class CenterOfMassEstimator(WidthEstimator):
    """Estimate stroke width from ribs anchored on rays cast from the centroid."""

    method = EstimationMethod.CENTER_OF_MASS

    def observe(self, outline: Outline, deadline: Deadline) -> tuple[list[float], int]:
        epsilon = self._epsilon(outline)
        center = centroid(outline, self.geometry.get_area_epsilon(outline.units_per_em))
        if not encloses(outline, center):
            raise CenterOutsideShapeError(center.x, center.y)

        parity = abs(winding_number(outline, center)) % 2
        widths: list[float] = []
        excluded = 0

        for i in range(self.config.ray_count):
            deadline.check()
            ray = Ray(center, 2.0 * math.pi * i / self.config.ray_count)
            half_width = self.ray_half_width(outline, ray, parity, epsilon)
            if half_width is None:
                excluded += 1
            else:
                widths.append(2.0 * half_width)

        return widths, excluded

    def ray_half_width(
        self, outline: Outline, ray: Ray, parity: int, epsilon: float
    ) -> float | None:
        """Half the stroke width sampled by one ray, or None if the ray is unusable.

        Args:
            outline: Glyph outline
            ray: Ray from the centroid
            parity: Winding parity at the ray origin (1 if inside an odd number of contours)
            epsilon: Distance tolerance in font units

        Returns:
            Half the rib length, or None for rays with no hits, hit counts
            inconsistent with the origin's parity, or no ink transition
        """
        hits = cast_ray(outline, ray, epsilon)
        if not hits or len(hits) % 2 != parity:
            return None

        step = SIDE_STEPS * epsilon
        anchor = self._first_transition(outline, ray, hits, step)
        if anchor is None:
            return None

        rib = self._rib(outline, anchor, step)
        if rib is None:
            return None

        length = self._ink_run(outline, rib, epsilon, step)
        if length is None or length <= epsilon:
            return None
        return length / 2.0

    def _first_transition(
        self, outline: Outline, ray: Ray, hits: list[RayHit], step: float
    ) -> RayHit | None:
        """Walk hits outward and return the first one where the ink state toggles."""
        for hit in hits:
            before = contains(outline, ray.point_at(max(hit.distance - step, 0.0)))
            after = contains(outline, ray.point_at(hit.distance + step))
            if before != after:
                return hit
        return None

    def _rib(self, outline: Outline, anchor: RayHit, step: float) -> Ray | None:
        """Ray from the anchor along the boundary normal, pointing into the ink."""
        nx, ny = anchor.segment.normal()
        p = anchor.point
        inked_left = contains(outline, Point(p.x + nx * step, p.y + ny * step))
        inked_right = contains(outline, Point(p.x - nx * step, p.y - ny * step))
        if inked_left == inked_right:
            # Interior edge or numerical noise
            return None
        angle = math.atan2(ny, nx) if inked_left else math.atan2(-ny, -nx)
        return Ray(p, angle)

    def _ink_run(self, outline: Outline, rib: Ray, epsilon: float, step: float) -> float | None:
        """Distance along the rib to the first ink to not-ink transition."""
        for hit in cast_ray(outline, rib, epsilon):
            if hit.distance <= step:
                continue
            if not contains(outline, rib.point_at(hit.distance + step)):
                if not contains(outline, rib.point_at(hit.distance / 2.0)):
                    return None
                return hit.distance
        return None
