"""Geometric types for glyph outline representation.

This module defines the fundamental geometric types used throughout stroke-width:
- Point: An immutable 2D point in design units
- Segment: A directed line segment owned by a contour
- Contour: A closed polygon (curves already flattened into segments)
- Outline: All contours of one glyph, classified into outers and holes
- ContourKind / FillRule: Tags for contour role and containment semantics
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from strokewidth.exceptions import DegenerateGeometryError

# Below this length a segment has no usable direction
ZERO_LENGTH = 1e-9


class ContourKind(Enum):
    """Role of a contour within its outline.

    Taken from winding direction relative to the largest contour, since
    TrueType and CFF fonts disagree on which direction is outer. Nesting
    depth decides instead when winding contradicts it:
    - OUTER: bounds filled area
    - HOLE: removes filled area
    """

    OUTER = auto()
    HOLE = auto()


class FillRule(Enum):
    """Point containment rule used for a whole estimation run."""

    NONZERO = auto()
    EVEN_ODD = auto()


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True, slots=True)
class Segment:
    """A directed line segment from start to end.

    Direction matters: winding numbers and anti-parallel matching both
    depend on it.
    """

    start: Point
    end: Point

    @property
    def dx(self) -> float:
        return self.end.x - self.start.x

    @property
    def dy(self) -> float:
        return self.end.y - self.start.y

    @property
    def length(self) -> float:
        return math.hypot(self.dx, self.dy)

    @property
    def midpoint(self) -> Point:
        return Point((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    def is_degenerate(self) -> bool:
        """True for zero-length segments (coincident endpoints)."""
        return self.length < ZERO_LENGTH

    def direction(self) -> tuple[float, float]:
        """Unit vector from start to end.

        Raises:
            DegenerateGeometryError: If the segment has zero length
        """
        length = self.length
        if length < ZERO_LENGTH:
            raise DegenerateGeometryError(
                f"Zero-length segment at ({self.start.x}, {self.start.y})"
            )
        return self.dx / length, self.dy / length

    def normal(self) -> tuple[float, float]:
        """Unit normal, rotated 90 degrees counter-clockwise from direction.

        Raises:
            DegenerateGeometryError: If the segment has zero length
        """
        ux, uy = self.direction()
        return -uy, ux

    def point_at(self, t: float) -> Point:
        """Point at parameter t, where 0 is start and 1 is end."""
        return Point(self.start.x + t * self.dx, self.start.y + t * self.dy)


@dataclass
class Contour:
    """A closed contour representing a shape boundary.

    Points are stored once; segment i runs from points[i] to
    points[(i + 1) % n], so the contour is closed by construction.

    Attributes:
        points: Vertices of the flattened contour
        kind: Outer or hole (None until classified by an Outline)
    """

    points: list[Point]
    kind: ContourKind | None = field(default=None)
    _cached_area: float | None = field(default=None, repr=False, init=False)
    _cached_segments: list[Segment] | None = field(default=None, repr=False, init=False)

    @classmethod
    def from_tuples(cls, coords: list[tuple[float, float]]) -> "Contour":
        """Build a contour from (x, y) pairs."""
        return cls(points=[Point(float(x), float(y)) for x, y in coords])

    @property
    def segments(self) -> list[Segment]:
        """Segments in contour order, including the closing segment."""
        if self._cached_segments is None:
            n = len(self.points)
            self._cached_segments = [
                Segment(self.points[i], self.points[(i + 1) % n]) for i in range(n)
            ] if n >= 2 else []
        return self._cached_segments

    def signed_area(self) -> float:
        """Calculate signed area using shoelace formula.

        The sign of the area indicates winding direction:
        - Positive area: counter-clockwise winding
        - Negative area: clockwise winding

        Result is cached for efficiency.

        Returns:
            Signed area of the contour
        """
        if self._cached_area is not None:
            return self._cached_area

        n = len(self.points)
        if n < 3:
            self._cached_area = 0.0
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += self.points[i].x * self.points[j].y
            area -= self.points[j].x * self.points[i].y

        self._cached_area = area / 2.0
        return self._cached_area

    def is_degenerate(self, area_epsilon: float = 1e-9) -> bool:
        """True for contours with fewer than 3 segments or near-zero area."""
        return len(self.segments) < 3 or abs(self.signed_area()) < area_epsilon

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the contour.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def contains_point(self, x: float, y: float) -> bool:
        """Check if point is inside contour using ray casting algorithm.

        Casts a ray from the point to the right and counts intersections
        with contour edges. Odd count means inside, even means outside.

        Args:
            x: X coordinate of point to test
            y: Y coordinate of point to test

        Returns:
            True if point is inside contour, False otherwise
        """
        n = len(self.points)
        if n < 3:
            return False

        inside = False
        j = n - 1

        for i in range(n):
            xi, yi = self.points[i].x, self.points[i].y
            xj, yj = self.points[j].x, self.points[j].y

            if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
                inside = not inside

            j = i

        return inside


@dataclass
class Outline:
    """All contours of one glyph.

    On construction every contour is tagged OUTER or HOLE and one fill
    rule is chosen for the whole outline. Contours wound like the largest
    contour are outers and the rest are holes, with NONZERO filling, as
    long as that agrees with nesting (a contour is nested only when a
    larger contour holds all of its vertices). Otherwise tags come from
    nesting depth and filling is EVEN_ODD.

    Attributes:
        contours: Contours of the glyph (unordered)
        units_per_em: Design grid of the source font
        name: Glyph name, for logging
    """

    contours: list[Contour]
    units_per_em: int = 1000
    name: str = ""
    fill_rule: FillRule = field(default=FillRule.NONZERO, init=False)

    def __post_init__(self) -> None:
        self._classify()

    def _classify(self) -> None:
        by_depth = [
            ContourKind.OUTER if self._nesting_depth(idx) % 2 == 0 else ContourKind.HOLE
            for idx in range(len(self.contours))
        ]

        sized = [c for c in self.contours if c.signed_area() != 0.0]
        if not sized:
            for contour, kind in zip(self.contours, by_depth):
                contour.kind = kind
            self.fill_rule = FillRule.NONZERO
            return

        largest = max(sized, key=lambda c: abs(c.signed_area()))
        outer_sign = math.copysign(1.0, largest.signed_area())
        by_winding = []
        for contour, kind in zip(self.contours, by_depth):
            area = contour.signed_area()
            if area != 0.0:
                same = math.copysign(1.0, area) == outer_sign
                kind = ContourKind.OUTER if same else ContourKind.HOLE
            by_winding.append(kind)

        # Overlapping outers never nest, so they agree here as well
        if by_winding == by_depth:
            kinds, self.fill_rule = by_winding, FillRule.NONZERO
        else:
            kinds, self.fill_rule = by_depth, FillRule.EVEN_ODD

        for contour, kind in zip(self.contours, kinds):
            contour.kind = kind

    def _nesting_depth(self, idx: int) -> int:
        """Number of larger contours that hold every vertex of contour idx."""
        contour = self.contours[idx]
        if not contour.points:
            return 0
        area = abs(contour.signed_area())
        return sum(
            1
            for other_idx, other in enumerate(self.contours)
            if other_idx != idx
            and abs(other.signed_area()) > area
            and all(other.contains_point(p.x, p.y) for p in contour.points)
        )

    def is_empty(self) -> bool:
        """Check if glyph has no outlines (spaces and other non-printing glyphs)."""
        return len(self.contours) == 0

    def segments(self) -> Iterator[Segment]:
        """Iterate over every segment of every contour."""
        for contour in self.contours:
            yield from contour.segments

    @property
    def segment_count(self) -> int:
        return sum(len(c.segments) for c in self.contours)

    def outer_contours(self) -> list[Contour]:
        return [c for c in self.contours if c.kind == ContourKind.OUTER]

    def holes(self) -> list[Contour]:
        return [c for c in self.contours if c.kind == ContourKind.HOLE]

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Bounding box over all contours as (min_x, min_y, max_x, max_y)."""
        boxes = [c.bounding_box() for c in self.contours if c.points]
        if not boxes:
            return (0.0, 0.0, 0.0, 0.0)
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    @property
    def max_dimension(self) -> float:
        """Larger of bounding box width and height."""
        min_x, min_y, max_x, max_y = self.bounding_box()
        return max(max_x - min_x, max_y - min_y)

    def summary(self) -> dict[str, Any]:
        """Counts used in log events."""
        return {
            "glyph": self.name,
            "contours": len(self.contours),
            "outers": len(self.outer_contours()),
            "holes": len(self.holes()),
            "segments": self.segment_count,
            "fill_rule": self.fill_rule.name,
        }
