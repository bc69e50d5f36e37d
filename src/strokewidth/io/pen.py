"""fontTools pen that records glyph outlines as flattened contours.

BasePen already splits TrueType multi-point qCurveTo runs and cubic
super-beziers into single curve calls, and decomposes components through
the glyph set; this pen only flattens each curve into line segments.
"""

from typing import Any

from fontTools.pens.basePen import BasePen

from strokewidth.core._bezier import flatten_cubic, flatten_quadratic
from strokewidth.domain import Contour, Point


class FlatteningPen(BasePen):
    """Collects closed, flattened contours from a glyph's draw() call.

    Example:
        pen = FlatteningPen(glyph_set, tolerance=1.0)
        glyph_set["o"].draw(pen)
        contours = pen.contours
    """

    def __init__(self, glyphSet: Any, tolerance: float = 1.0) -> None:  # noqa: N803
        super().__init__(glyphSet)
        self.tolerance = tolerance
        self.contours: list[Contour] = []
        self._points: list[Point] = []

    def _moveTo(self, pt: tuple[float, float]) -> None:
        self._finish()
        self._points = [Point(float(pt[0]), float(pt[1]))]

    def _lineTo(self, pt: tuple[float, float]) -> None:
        self._points.append(Point(float(pt[0]), float(pt[1])))

    def _curveToOne(
        self,
        pt1: tuple[float, float],
        pt2: tuple[float, float],
        pt3: tuple[float, float],
    ) -> None:
        start = self._points[-1]
        flat = flatten_cubic(
            [start, Point(*map(float, pt1)), Point(*map(float, pt2)), Point(*map(float, pt3))],
            self.tolerance,
        )
        self._points.extend(flat[1:])

    def _qCurveToOne(self, pt1: tuple[float, float], pt2: tuple[float, float]) -> None:
        start = self._points[-1]
        flat = flatten_quadratic(
            [start, Point(*map(float, pt1)), Point(*map(float, pt2))],
            self.tolerance,
        )
        self._points.extend(flat[1:])

    def _closePath(self) -> None:
        self._finish()

    def _endPath(self) -> None:
        # Open paths are measured as if closed
        self._finish()

    def _finish(self) -> None:
        points = self._points
        if len(points) > 1 and points[-1] == points[0]:
            points = points[:-1]
        if points:
            self.contours.append(Contour(points=points))
        self._points = []
