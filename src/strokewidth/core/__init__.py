"""Core measurement algorithms for stroke-width.

This module contains:

- Geometry kernel (centroid, winding, ray casting, segment pairing)
- Width estimators behind a common strategy interface
- Cooperative execution deadlines

All services are designed to be:
- Stateless (safe for use in worker processes)
- Pure (no side effects)

The batch orchestrator lives in strokewidth.core.batch and is imported
from there, since it depends on the I/O layer.

Key functions:
- centroid: Area-weighted center of mass with holes subtracted
- winding_number / contains / encloses: Point-in-outline tests
- intersect / cast_ray: Ray and segment intersection
- nearest_antiparallel: Segment pairing across a stroke

Key classes:
- WidthEstimator: Strategy interface
- CenterOfMassEstimator, AllSegmentsEstimator: Strategies
- Deadline: Cooperative wall-clock budget
"""

from strokewidth.core.all_segments import AllSegmentsEstimator
from strokewidth.core.center_of_mass import CenterOfMassEstimator
from strokewidth.core.deadline import Deadline
from strokewidth.core.estimator import WidthEstimator, aggregate, get_estimator
from strokewidth.core.geometry import (
    Ray,
    RayHit,
    cast_ray,
    centroid,
    contains,
    contour_centroid,
    encloses,
    intersect,
    nearest_antiparallel,
    signed_area,
    winding_number,
)

__all__ = [
    # Estimators
    "AllSegmentsEstimator",
    "CenterOfMassEstimator",
    "Deadline",
    # Geometry types
    "Ray",
    "RayHit",
    "WidthEstimator",
    "aggregate",
    # Geometry functions
    "cast_ray",
    "centroid",
    "contains",
    "contour_centroid",
    "encloses",
    "get_estimator",
    "intersect",
    "nearest_antiparallel",
    "signed_area",
    "winding_number",
]
