"""Geometric operations for stroke width measurement.

This module provides core mathematical utilities for:
- Signed area and centroid calculation (shoelace formula)
- Winding numbers and point containment (nonzero or even-odd)
- Ray/segment intersection with vertex deduplication
- Anti-parallel segment matching

All functions are pure, stateless, and designed for use in parallel processing.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from strokewidth.domain import Contour, ContourKind, FillRule, Outline, Point, Segment
from strokewidth.exceptions import DegenerateGeometryError

# Default tolerance for glyphs in a 1000 unit em
DEFAULT_EPSILON = 1e-3

# |sin| of the angle between a ray and a segment below which they are parallel
PARALLEL_SIN = 1e-12


@dataclass(frozen=True, slots=True)
class Ray:
    """A half-line from origin in the direction of angle (radians)."""

    origin: Point
    angle: float

    @property
    def direction(self) -> tuple[float, float]:
        return math.cos(self.angle), math.sin(self.angle)

    def point_at(self, distance: float) -> Point:
        dx, dy = self.direction
        return Point(self.origin.x + dx * distance, self.origin.y + dy * distance)


@dataclass(frozen=True, slots=True)
class RayHit:
    """Intersection of a ray with a segment.

    Attributes:
        distance: Distance from the ray origin along its direction
        point: Intersection point
        segment: The segment that was hit
        segment_t: Parameter along the segment (0 at start, 1 at end)
    """

    distance: float
    point: Point
    segment: Segment
    segment_t: float


def signed_area(contour: Contour) -> float:
    """Calculate signed area of a contour using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    Examples:
        >>> square = Contour.from_tuples([(0, 0), (1, 0), (1, 1), (0, 1)])
        >>> signed_area(square)  # CCW square
        1.0
    """
    return contour.signed_area()


def contour_centroid(contour: Contour) -> Point:
    """Centroid of the region bounded by a single contour.

    Raises:
        DegenerateGeometryError: If the contour has zero area
    """
    area = contour.signed_area()
    if abs(area) < 1e-12:
        raise DegenerateGeometryError("Cannot take centroid of a zero-area contour")

    points = contour.points
    n = len(points)
    cx = 0.0
    cy = 0.0
    for i in range(n):
        a = points[i]
        b = points[(i + 1) % n]
        cross = a.x * b.y - b.x * a.y
        cx += (a.x + b.x) * cross
        cy += (a.y + b.y) * cross

    return Point(cx / (6.0 * area), cy / (6.0 * area))


def centroid(outline: Outline, area_epsilon: float = 1e-9) -> Point:
    """Area-weighted center of mass of the filled region.

    Outer contours contribute their absolute area, holes subtract theirs.
    Zero-area contours contribute nothing.

    Args:
        outline: The glyph outline
        area_epsilon: Filled area below which the glyph is degenerate

    Returns:
        Centroid of the ink

    Raises:
        DegenerateGeometryError: If the total filled area is below area_epsilon
            (e.g. a space glyph with no contours)
    """
    total = 0.0
    sum_x = 0.0
    sum_y = 0.0

    for contour in outline.contours:
        area = abs(contour.signed_area())
        if area < 1e-12:
            continue
        center = contour_centroid(contour)
        weight = area if contour.kind != ContourKind.HOLE else -area
        total += weight
        sum_x += weight * center.x
        sum_y += weight * center.y

    if abs(total) < area_epsilon:
        raise DegenerateGeometryError(
            f"Glyph '{outline.name}' has near-zero filled area ({total:.3g})"
        )

    return Point(sum_x / total, sum_y / total)


def _is_left(a: Point, b: Point, p: Point) -> float:
    """Positive if p is left of the line a->b, negative if right, 0 if on it."""
    return (b.x - a.x) * (p.y - a.y) - (p.x - a.x) * (b.y - a.y)


def winding_number(outline: Outline, point: Point) -> int:
    """Winding number of the outline around a point.

    Each upward edge crossing to the right of the point adds one, each
    downward crossing subtracts one.
    """
    wn = 0
    for segment in outline.segments():
        a, b = segment.start, segment.end
        if a.y <= point.y:
            if b.y > point.y and _is_left(a, b, point) > 0:
                wn += 1
        elif b.y <= point.y and _is_left(a, b, point) < 0:
            wn -= 1
    return wn


def contains(outline: Outline, point: Point, fill_rule: FillRule | None = None) -> bool:
    """Test whether a point is inked.

    Args:
        outline: The glyph outline
        point: The point to test
        fill_rule: Containment rule; defaults to the outline's run-wide rule

    Returns:
        True if the point lies in the filled region
    """
    rule = fill_rule or outline.fill_rule
    wn = winding_number(outline, point)
    if rule == FillRule.NONZERO:
        return wn != 0
    return wn % 2 != 0


def encloses(outline: Outline, point: Point) -> bool:
    """True if the point lies within some outer contour, holes ignored."""
    return any(c.contains_point(point.x, point.y) for c in outline.outer_contours())


def intersect(ray: Ray, segment: Segment, epsilon: float = DEFAULT_EPSILON) -> RayHit | None:
    """Intersect a ray with a segment.

    Uses parametric line equations. Parallel (including collinear) and
    zero-length segments never intersect. Hits within epsilon of either
    segment end are accepted and clamped onto the segment.

    Args:
        ray: The ray
        segment: The segment
        epsilon: Distance tolerance in font units

    Returns:
        RayHit with non-negative distance, or None

    Examples:
        >>> ray = Ray(Point(0.0, 0.0), 0.0)
        >>> hit = intersect(ray, Segment(Point(5.0, -1.0), Point(5.0, 1.0)))
        >>> # hit.distance == 5.0, hit.point == Point(5.0, 0.0)
    """
    length = segment.length
    if length < epsilon * 1e-6:
        return None

    dx, dy = ray.direction
    ex, ey = segment.dx, segment.dy

    denom = dx * ey - dy * ex
    if abs(denom) <= PARALLEL_SIN * length:
        return None

    wx = segment.start.x - ray.origin.x
    wy = segment.start.y - ray.origin.y

    t = (wx * ey - wy * ex) / denom
    u = (wx * dy - wy * dx) / denom

    u_tolerance = epsilon / length
    if u < -u_tolerance or u > 1.0 + u_tolerance or t < -epsilon:
        return None

    u = min(max(u, 0.0), 1.0)
    return RayHit(
        distance=max(t, 0.0),
        point=segment.point_at(u),
        segment=segment,
        segment_t=u,
    )


def _side(ray: Ray, point: Point, epsilon: float) -> int:
    """Which side of the ray's line a point is on: 1 left, -1 right, 0 on it."""
    dx, dy = ray.direction
    value = dx * (point.y - ray.origin.y) - dy * (point.x - ray.origin.x)
    if abs(value) <= epsilon:
        return 0
    return 1 if value > 0 else -1


def _crosses_at_vertex(ray: Ray, segments: list[Segment], index: int, epsilon: float) -> bool:
    """Decide whether the boundary crosses the ray at the start of segments[index].

    Walks backwards and forwards past vertices lying on the ray's line, so
    collinear runs and zero-length segments are looked through.
    """
    n = len(segments)
    before = 0
    for k in range(1, n + 1):
        before = _side(ray, segments[(index - k) % n].start, epsilon)
        if before:
            break
    after = 0
    for k in range(n):
        after = _side(ray, segments[(index + k) % n].end, epsilon)
        if after:
            break
    return before * after < 0


def cast_ray(outline: Outline, ray: Ray, epsilon: float = DEFAULT_EPSILON) -> list[RayHit]:
    """Intersect a ray with every segment of an outline.

    A ray passing exactly through a vertex shared by two segments is
    counted once if the boundary crosses the ray there, and not at all if
    it only touches. Hits closer together than epsilon are merged.

    Returns:
        Hits sorted by ascending distance
    """
    hits: list[RayHit] = []

    for contour in outline.contours:
        segments = contour.segments
        for index, segment in enumerate(segments):
            hit = intersect(ray, segment, epsilon)
            if hit is None:
                continue
            length = segment.length
            if (1.0 - hit.segment_t) * length <= epsilon:
                # Owned by the following segment's start vertex
                continue
            if hit.segment_t * length <= epsilon and not _crosses_at_vertex(
                ray, segments, index, epsilon
            ):
                continue
            hits.append(hit)

    hits.sort(key=lambda h: h.distance)

    deduped: list[RayHit] = []
    for hit in hits:
        if deduped and hit.distance - deduped[-1].distance < epsilon:
            continue
        deduped.append(hit)
    return deduped


def nearest_antiparallel(
    segment: Segment,
    candidates: Iterable[Segment],
    max_distance: float,
    min_alignment: float = math.cos(math.radians(20.0)),
    side: tuple[float, float] | None = None,
    epsilon: float = DEFAULT_EPSILON,
) -> tuple[Segment, float] | None:
    """Find the closest segment running opposite to the given one.

    A candidate qualifies when:
    - its direction dot product with the segment is at most -min_alignment
    - its projection onto the segment's axis overlaps the segment's span
    - its midpoint lies on the requested side at a perpendicular distance
      greater than epsilon and at most max_distance

    Args:
        segment: Source segment
        candidates: Segments to search (the source itself is ignored)
        max_distance: Outlier cutoff for the perpendicular distance
        min_alignment: Cosine of the allowed deviation from anti-parallel
        side: Unit vector giving the side to search; defaults to the
            segment's left normal
        epsilon: Distance tolerance in font units

    Returns:
        Tuple of (matched segment, perpendicular distance), or None

    Raises:
        DegenerateGeometryError: If the source segment has zero length
    """
    ux, uy = segment.direction()
    nx, ny = side if side is not None else segment.normal()
    origin = segment.start
    span = segment.length

    best: tuple[Segment, float] | None = None
    best_key: tuple[float, float] | None = None

    for candidate in candidates:
        if candidate is segment or candidate.is_degenerate():
            continue

        cx, cy = candidate.direction()
        dot = ux * cx + uy * cy
        if dot > -min_alignment:
            continue

        a = (candidate.start.x - origin.x) * ux + (candidate.start.y - origin.y) * uy
        b = (candidate.end.x - origin.x) * ux + (candidate.end.y - origin.y) * uy
        overlap = min(max(a, b), span) - max(min(a, b), 0.0)
        if overlap <= epsilon:
            continue

        mid = candidate.midpoint
        distance = (mid.x - origin.x) * nx + (mid.y - origin.y) * ny
        if distance <= epsilon or distance > max_distance:
            continue

        # Closest wins; ties go to the more exactly anti-parallel candidate
        key = (distance, dot)
        if best_key is None or key < best_key:
            best_key = key
            best = (candidate, distance)

    return best
