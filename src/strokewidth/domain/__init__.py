"""Domain models for stroke-width.

This module contains the core domain models representing glyph outlines,
width estimates and batch task records. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of fonttools implementation details

Key classes:
- Point, Segment: Geometric primitives in design units
- Contour: A closed, flattened contour
- Outline: All contours of a glyph, classified into outers and holes
- WidthEstimate: Result of one estimation run
- FontTask, TaskResult, TaskStatus: Batch unit records
"""

from strokewidth.domain.outline import (
    Contour,
    ContourKind,
    FillRule,
    Outline,
    Point,
    Segment,
)
from strokewidth.domain.result import (
    FontTask,
    Location,
    TaskResult,
    TaskStatus,
    WidthEstimate,
    location_label,
)

__all__: list[str] = [
    # Enums
    "ContourKind",
    "FillRule",
    "TaskStatus",
    # Geometry types
    "Point",
    "Segment",
    "Contour",
    "Outline",
    # Results
    "WidthEstimate",
    "FontTask",
    "TaskResult",
    "Location",
    "location_label",
]
