"""Font source for loading glyph outlines from TTF/OTF fonts.

This module provides the FontSource class, which resolves a character to a
glyph, draws it through a flattening pen and returns the domain Outline.
Binary table parsing is left entirely to fontTools.
"""

from pathlib import Path

from fontTools.ttLib import TTFont

from strokewidth.config import GeometryConfig
from strokewidth.domain import Outline
from strokewidth.exceptions import (
    FontLoadError,
    GlyphNotFoundError,
    UnsupportedOutlineFormatError,
)
from strokewidth.io.pen import FlatteningPen

# Tables that carry vector outlines
OUTLINE_TABLES = ("glyf", "CFF ", "CFF2")

# Weight stops sampled on a variable font's wght axis
WEIGHT_STEP = 100


class FontSource:
    """Loads flattened glyph outlines from font files.

    Stateless apart from its configuration, so one instance can be shipped
    to worker processes.

    Example:
        source = FontSource()
        outline = source.load_outline(Path("Roboto-Regular.ttf"), "o")
    """

    def __init__(self, geometry: GeometryConfig | None = None) -> None:
        """Initialize the font source.

        Args:
            geometry: Tolerances used when flattening curves
        """
        self.geometry = geometry or GeometryConfig()

    def load_outline(
        self,
        font_path: Path,
        character: str,
        location: dict[str, float] | None = None,
    ) -> Outline:
        """Extract the outline of the glyph a character maps to.

        Args:
            font_path: Path to the TTF or OTF font file
            character: Single character to look up in the cmap
            location: Design-space location in user coordinates for
                variable fonts (None = default instance)

        Returns:
            Outline with curves flattened to line segments

        Raises:
            FontLoadError: If the file is missing or not a font
            UnsupportedOutlineFormatError: If the font has no vector outlines
            GlyphNotFoundError: If the character is unmapped or maps to .notdef
        """
        font = self._open(font_path)
        try:
            if not any(tag in font for tag in OUTLINE_TABLES):
                raise UnsupportedOutlineFormatError(
                    str(font_path), "no glyf, CFF or CFF2 outlines (bitmap-only font?)"
                )

            cmap = font.getBestCmap() or {}
            glyph_name = cmap.get(ord(character))
            if glyph_name is None or glyph_name == ".notdef":
                raise GlyphNotFoundError(character, str(font_path))

            upm = font["head"].unitsPerEm  # type: ignore[attr-defined]
            glyph_set = font.getGlyphSet(location=location) if location else font.getGlyphSet()

            pen = FlatteningPen(glyph_set, tolerance=self.geometry.get_bezier_tolerance(upm))
            glyph_set[glyph_name].draw(pen)

            return Outline(contours=pen.contours, units_per_em=upm, name=glyph_name)
        finally:
            font.close()

    def locations_of_interest(self, font_path: Path) -> list[dict[str, float]]:
        """Design-space locations worth measuring.

        Static fonts and variable fonts without a weight axis yield only the
        default location ({}). Variable fonts with a wght axis yield one
        location per 100 weight units from the axis minimum to its maximum.

        Raises:
            FontLoadError: If the file is missing or not a font
        """
        font = self._open(font_path)
        try:
            if "fvar" not in font:
                return [{}]
            axes = font["fvar"].axes  # type: ignore[attr-defined]
            wght = next((a for a in axes if a.axisTag == "wght"), None)
            if wght is None:
                return [{}]
            return [
                {"wght": float(weight)}
                for weight in range(int(wght.minValue), int(wght.maxValue) + 1, WEIGHT_STEP)
            ]
        finally:
            font.close()

    def _open(self, font_path: Path) -> TTFont:
        if not font_path.exists():
            raise FontLoadError(str(font_path), "file not found")
        try:
            return TTFont(str(font_path), lazy=True)
        except Exception as e:
            raise FontLoadError(str(font_path), str(e)) from e
