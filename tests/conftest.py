"""Shared fixtures: synthetic outlines and tiny fonts built with FontBuilder."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from strokewidth.domain import Contour, Outline

Polygon = list[tuple[float, float]]


def rect(x0: float, y0: float, x1: float, y1: float, ccw: bool = True) -> Polygon:
    """Axis-aligned rectangle as a counter-clockwise (or clockwise) polygon."""
    points = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    return points if ccw else points[::-1]


@pytest.fixture
def ring_outline() -> Outline:
    """Square ring: outer [-50, 50] CCW, hole [-30, 30] CW, wall 20."""
    return Outline(
        contours=[
            Contour.from_tuples(rect(-50, -50, 50, 50)),
            Contour.from_tuples(rect(-30, -30, 30, 30, ccw=False)),
        ],
        name="o",
    )


@pytest.fixture
def l_outline() -> Outline:
    """L shape with 20 unit strokes; its centroid lies outside the ink."""
    return Outline(
        contours=[
            Contour.from_tuples([(0, 0), (100, 0), (100, 20), (20, 20), (20, 100), (0, 100)])
        ],
        name="L",
    )


@pytest.fixture
def font_factory() -> Callable[..., Path]:
    """Build a TrueType font from polygons.

    Usage:
        path = font_factory(tmp_path / "Ring.ttf", {"o": [outer, hole]})

    Every glyph maps to the character of the same name (single-letter
    names) or to U+0020 for "space".
    """

    def build(
        path: Path,
        glyphs: dict[str, list[Polygon]],
        family: str = "Test Sans",
        upm: int = 1000,
    ) -> Path:
        order = [".notdef", *glyphs]
        fb = FontBuilder(upm, isTTF=True)
        fb.setupGlyphOrder(order)

        glyf = {".notdef": TTGlyphPen(None).glyph()}
        hmtx = {".notdef": (upm // 2, 0)}
        for name, polygons in glyphs.items():
            pen = TTGlyphPen(None)
            for polygon in polygons:
                pen.moveTo(polygon[0])
                for point in polygon[1:]:
                    pen.lineTo(point)
                pen.closePath()
            glyf[name] = pen.glyph()
            hmtx[name] = (upm // 2, 0)

        fb.setupGlyf(glyf)
        fb.setupHorizontalMetrics(hmtx)
        fb.setupCharacterMap(
            {(0x20 if name == "space" else ord(name)): name for name in glyphs}
        )
        fb.setupHorizontalHeader(ascent=upm * 4 // 5, descent=-(upm // 5))
        fb.setupOS2()
        fb.setupNameTable({"familyName": family, "styleName": "Regular"})
        fb.setupPost()
        fb.save(str(path))
        return path

    return build


@pytest.fixture
def ring_font(tmp_path: Path, font_factory: Callable[..., Path]) -> Path:
    """Font whose "o" is a ring with 80 unit walls and whose space is empty."""
    # TrueType winding: outer clockwise, hole counter-clockwise
    return font_factory(
        tmp_path / "RingSans-Regular.ttf",
        {
            "o": [rect(100, 0, 600, 500, ccw=False), rect(180, 80, 520, 420)],
            "l": [rect(100, 0, 180, 700, ccw=False)],
            "space": [],
        },
        family="Ring Sans",
    )
