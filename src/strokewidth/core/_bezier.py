"""Internal Bezier curve flattening algorithms.

This is an internal module used by the outline pen to turn curves into
line segments. Not intended for public use.
"""

import math

from strokewidth.domain import Point

# Recursion cap; 2**16 pieces per curve is far beyond any sane tolerance
MAX_DEPTH = 16


def _chord_deviation(start: Point, end: Point, controls: list[Point]) -> float:
    """Largest distance of the control points from the chord start-end."""
    dx = end.x - start.x
    dy = end.y - start.y
    chord = math.hypot(dx, dy)
    if chord < 1e-12:
        return max(math.hypot(c.x - start.x, c.y - start.y) for c in controls)
    return max(abs((c.x - start.x) * dy - (c.y - start.y) * dx) / chord for c in controls)


def _mid(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def flatten_quadratic(points: list[Point], tolerance: float, depth: int = 0) -> list[Point]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    Args:
        points: List of 3 control points [p0, p1, p2]
        tolerance: Maximum distance from true curve
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, endpoints included
    """
    p0, p1, p2 = points

    # The curve stays within half the control point's deviation from the chord
    if depth >= MAX_DEPTH or _chord_deviation(p0, p2, [p1]) / 2 <= tolerance:
        return [p0, p2]

    q1 = _mid(p0, p1)
    r1 = _mid(p1, p2)
    mid = _mid(q1, r1)

    left = flatten_quadratic([p0, q1, mid], tolerance, depth + 1)
    right = flatten_quadratic([mid, r1, p2], tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right


def flatten_cubic(points: list[Point], tolerance: float, depth: int = 0) -> list[Point]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum distance from true curve
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, endpoints included
    """
    p0, p1, p2, p3 = points

    # The curve stays within 3/4 of the control points' deviation from the chord
    if depth >= MAX_DEPTH or 0.75 * _chord_deviation(p0, p3, [p1, p2]) <= tolerance:
        return [p0, p3]

    # First level
    q1 = _mid(p0, p1)
    q2 = _mid(p1, p2)
    q3 = _mid(p2, p3)

    # Second level
    r1 = _mid(q1, q2)
    r2 = _mid(q2, q3)

    # Third level (point on curve at t=0.5)
    mid = _mid(r1, r2)

    left = flatten_cubic([p0, q1, r1, mid], tolerance, depth + 1)
    right = flatten_cubic([mid, r2, q3, p3], tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right
