"""Stroke Width - Estimate the stroke width of glyphs in fonts.

Stroke Width measures how thick the strokes of a glyph are, either by
casting rays from the glyph's center of mass or by pairing anti-parallel
outline segments, and can run that measurement over whole font
collections selected by family tags.

Example:
    $ stroke-width measure o Roboto-Regular.ttf

This prints the stroke width of "o" in font units and per 1000 units of em.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
