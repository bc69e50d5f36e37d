"""Font I/O and batch collaborators.

This module handles:
- Loading glyph outlines from TTF/OTF fonts via fontTools
- Resolving tag expressions to family font files
- Persisting batch results
"""

from strokewidth.io.pen import FlatteningPen
from strokewidth.io.reader import FontSource
from strokewidth.io.store import ResultStore
from strokewidth.io.tags import FamilyTag, TagIndex, load_tags, tag_matches

__all__ = [
    "FamilyTag",
    "FlatteningPen",
    "FontSource",
    "ResultStore",
    "TagIndex",
    "load_tags",
    "tag_matches",
]
