"""Unit tests for the geometry kernel."""

import math

import pytest

from strokewidth.core._bezier import flatten_cubic, flatten_quadratic
from strokewidth.core.geometry import (
    Ray,
    cast_ray,
    centroid,
    contains,
    contour_centroid,
    encloses,
    intersect,
    nearest_antiparallel,
    winding_number,
)
from strokewidth.domain import Contour, ContourKind, FillRule, Outline, Point, Segment
from strokewidth.exceptions import DegenerateGeometryError


def square(x0: float, y0: float, x1: float, y1: float, ccw: bool = True) -> Contour:
    points = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    return Contour.from_tuples(points if ccw else points[::-1])


class TestCentroid:
    """Tests for centroid and contour_centroid."""

    def test_square_centroid(self) -> None:
        outline = Outline(contours=[square(0, 0, 100, 100)])
        assert centroid(outline) == Point(50.0, 50.0)

    def test_convex_centroid_is_inside(self) -> None:
        """The centroid of a convex shape is always inked."""
        outline = Outline(contours=[Contour.from_tuples([(0, 0), (90, 0), (0, 90)])])
        center = centroid(outline)
        assert center.x == pytest.approx(30.0)
        assert center.y == pytest.approx(30.0)
        assert contains(outline, center)

    def test_centroid_independent_of_winding(self) -> None:
        outline = Outline(contours=[square(0, 0, 100, 100, ccw=False)])
        assert centroid(outline) == Point(50.0, 50.0)

    def test_hole_shifts_centroid_away(self) -> None:
        """Holes carry negative weight."""
        outline = Outline(contours=[square(0, 0, 100, 100), square(10, 10, 30, 30, ccw=False)])
        center = centroid(outline)
        expected = (10000 * 50 - 400 * 20) / 9600
        assert center.x == pytest.approx(expected)
        assert center.y == pytest.approx(expected)

    def test_centered_hole_keeps_centroid(self, ring_outline: Outline) -> None:
        center = centroid(ring_outline)
        assert center.x == pytest.approx(0.0)
        assert center.y == pytest.approx(0.0)

    def test_empty_outline_is_degenerate(self) -> None:
        with pytest.raises(DegenerateGeometryError):
            centroid(Outline(contours=[]))

    def test_zero_area_contour_rejected(self) -> None:
        with pytest.raises(DegenerateGeometryError):
            contour_centroid(Contour.from_tuples([(0, 0), (10, 0), (20, 0)]))


class TestContainment:
    """Tests for winding_number, contains and encloses."""

    def test_winding_number_ccw(self) -> None:
        outline = Outline(contours=[square(0, 0, 100, 100)])
        assert winding_number(outline, Point(50, 50)) == 1
        assert winding_number(outline, Point(150, 50)) == 0

    def test_winding_number_cw(self) -> None:
        outline = Outline(contours=[square(0, 0, 100, 100, ccw=False)])
        assert winding_number(outline, Point(50, 50)) == -1

    def test_ring_counter_is_not_inked(self, ring_outline: Outline) -> None:
        assert not contains(ring_outline, Point(0, 0))
        assert contains(ring_outline, Point(40, 0))
        assert not contains(ring_outline, Point(60, 0))

    def test_encloses_ignores_holes(self, ring_outline: Outline) -> None:
        assert encloses(ring_outline, Point(0, 0))
        assert not encloses(ring_outline, Point(60, 0))

    def test_explicit_fill_rule(self) -> None:
        """Overlapping same-direction contours differ between fill rules."""
        outline = Outline(contours=[square(0, 0, 60, 60), square(40, 0, 100, 60)])
        overlap = Point(50, 30)
        assert contains(outline, overlap, FillRule.NONZERO)
        assert not contains(outline, overlap, FillRule.EVEN_ODD)


class TestOverlappingContours:
    """Overlapping outers, as left by decomposed components and variable fonts."""

    @pytest.fixture
    def t_outline(self) -> Outline:
        """Crossbar plus a stem whose top vertices sit inside the crossbar."""
        return Outline(
            contours=[
                square(0, 300, 300, 400),
                Contour.from_tuples([(100, 310), (100, 0), (200, 0), (200, 310)]),
            ],
            name="T",
        )

    def test_both_contours_are_outers(self, t_outline: Outline) -> None:
        assert [c.kind for c in t_outline.contours] == [ContourKind.OUTER, ContourKind.OUTER]
        assert t_outline.fill_rule == FillRule.NONZERO
        assert t_outline.holes() == []

    def test_overlap_is_inked(self, t_outline: Outline) -> None:
        assert contains(t_outline, Point(150, 305))
        assert contains(t_outline, Point(150, 100))
        assert not contains(t_outline, Point(50, 100))

    def test_centroid_stays_on_the_glyph(self, t_outline: Outline) -> None:
        center = centroid(t_outline)
        assert center.x == pytest.approx(150.0)
        assert center.y == pytest.approx((30000 * 350 + 31000 * 155) / 61000)
        assert contains(t_outline, center)
        assert encloses(t_outline, center)

    def test_nested_contour_still_a_hole(self) -> None:
        """Only contours lying wholly inside a larger one count as nested."""
        outline = Outline(contours=[square(0, 0, 100, 100), square(20, 20, 80, 80, ccw=False)])
        assert [c.kind for c in outline.contours] == [ContourKind.OUTER, ContourKind.HOLE]
        assert outline.fill_rule == FillRule.NONZERO


class TestIntersect:
    """Tests for ray/segment intersection."""

    def test_crossing_ray_exact_distance(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        hit = intersect(ray, Segment(Point(5.0, -1.0), Point(5.0, 1.0)))
        assert hit is not None
        assert hit.distance == pytest.approx(5.0)
        assert hit.point.x == pytest.approx(5.0)
        assert hit.point.y == pytest.approx(0.0)
        assert hit.segment_t == pytest.approx(0.5)

    def test_diagonal_ray(self) -> None:
        ray = Ray(Point(0.0, 0.0), math.pi / 4)
        hit = intersect(ray, Segment(Point(10.0, 0.0), Point(10.0, 20.0)))
        assert hit is not None
        assert hit.distance == pytest.approx(10.0 * math.sqrt(2))

    def test_parallel_ray_misses(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        assert intersect(ray, Segment(Point(0.0, 5.0), Point(10.0, 5.0))) is None

    def test_collinear_segment_misses(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        assert intersect(ray, Segment(Point(5.0, 0.0), Point(10.0, 0.0))) is None

    def test_segment_behind_ray_misses(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        assert intersect(ray, Segment(Point(-5.0, -1.0), Point(-5.0, 1.0))) is None

    def test_segment_beside_ray_misses(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        assert intersect(ray, Segment(Point(5.0, 1.0), Point(5.0, 3.0))) is None

    def test_zero_length_segment_misses(self) -> None:
        ray = Ray(Point(0.0, 0.0), 0.0)
        assert intersect(ray, Segment(Point(5.0, 0.0), Point(5.0, 0.0))) is None


class TestCastRay:
    """Tests for outline ray casting."""

    def test_ring_hits(self, ring_outline: Outline) -> None:
        hits = cast_ray(ring_outline, Ray(Point(0, 0), 0.0))
        assert [round(h.distance, 6) for h in hits] == [30.0, 50.0]

    def test_vertex_crossing_counted_once(self) -> None:
        outline = Outline(contours=[square(-50, -50, 50, 50)])
        hits = cast_ray(outline, Ray(Point(0, 0), math.pi / 4))
        assert len(hits) == 1
        assert hits[0].distance == pytest.approx(50 * math.sqrt(2))

    def test_vertex_touch_not_counted(self) -> None:
        """A ray grazing the tip of a diamond does not enter it."""
        diamond = Contour.from_tuples([(0, -10), (10, 0), (0, 10), (-10, 0)])
        outline = Outline(contours=[diamond])
        assert cast_ray(outline, Ray(Point(-20, 10), 0.0)) == []

    def test_hits_sorted(self, ring_outline: Outline) -> None:
        hits = cast_ray(ring_outline, Ray(Point(-60, 0), 0.0))
        distances = [h.distance for h in hits]
        assert distances == sorted(distances)
        assert len(hits) == 4


class TestNearestAntiparallel:
    """Tests for segment pairing."""

    def test_closest_opposite_segment_wins(self) -> None:
        source = Segment(Point(0, 0), Point(100, 0))
        near = Segment(Point(100, 20), Point(0, 20))
        far = Segment(Point(100, 40), Point(0, 40))
        parallel = Segment(Point(0, 10), Point(100, 10))
        below = Segment(Point(100, -10), Point(0, -10))

        match = nearest_antiparallel(
            source, [source, far, parallel, below, near], max_distance=50
        )
        assert match is not None
        assert match[0] == near
        assert match[1] == pytest.approx(20.0)

    def test_outlier_cutoff(self) -> None:
        source = Segment(Point(0, 0), Point(100, 0))
        far = Segment(Point(100, 40), Point(0, 40))
        assert nearest_antiparallel(source, [far], max_distance=30) is None

    def test_requires_overlap(self) -> None:
        source = Segment(Point(0, 0), Point(100, 0))
        offset = Segment(Point(300, 20), Point(200, 20))
        assert nearest_antiparallel(source, [offset], max_distance=50) is None

    def test_angle_tolerance(self) -> None:
        source = Segment(Point(0, 0), Point(100, 0))
        # 30 degrees off anti-parallel
        tilted = Segment(
            Point(100, 20), Point(100 - 100 * math.cos(math.radians(30)), 20 + 50)
        )
        assert nearest_antiparallel(source, [tilted], max_distance=100) is None

    def test_side_selection(self) -> None:
        source = Segment(Point(0, 0), Point(100, 0))
        below = Segment(Point(100, -10), Point(0, -10))
        match = nearest_antiparallel(source, [below], max_distance=50, side=(0.0, -1.0))
        assert match is not None
        assert match[1] == pytest.approx(10.0)


class TestBezierFlattening:
    """Tests for curve flattening."""

    def test_straight_quadratic_not_subdivided(self) -> None:
        points = [Point(0, 0), Point(50, 0), Point(100, 0)]
        assert flatten_quadratic(points, 1.0) == [Point(0, 0), Point(100, 0)]

    def test_quadratic_subdivided_within_tolerance(self) -> None:
        points = [Point(0, 0), Point(50, 100), Point(100, 0)]
        flat = flatten_quadratic(points, 1.0)
        assert flat[0] == points[0]
        assert flat[-1] == points[2]
        assert len(flat) > 3
        # Apex of the curve is at (50, 50)
        assert max(p.y for p in flat) == pytest.approx(50.0, abs=1.0)

    def test_cubic_subdivided_within_tolerance(self) -> None:
        points = [Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0)]
        flat = flatten_cubic(points, 1.0)
        assert flat[0] == points[0]
        assert flat[-1] == points[3]
        assert len(flat) > 4
        # Apex of the curve is at (50, 75)
        assert max(p.y for p in flat) == pytest.approx(75.0, abs=1.0)
