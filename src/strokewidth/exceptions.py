"""Exception hierarchy for stroke-width."""


class StrokeWidthError(Exception):
    """Base exception for all stroke-width errors."""

    pass


class FontError(StrokeWidthError):
    """Errors related to font loading."""

    pass


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class UnsupportedOutlineFormatError(FontError):
    """Font has no vector outlines we can measure (e.g. bitmap-only)."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Unsupported outline format '{path}': {details}")


class GlyphError(StrokeWidthError):
    """Errors related to glyph lookup."""

    pass


class GlyphNotFoundError(GlyphError):
    """Requested character has no glyph in the font."""

    def __init__(self, character: str, path: str) -> None:
        self.character = character
        self.path = path
        super().__init__(f"No glyph for {character!r} in '{path}'")


class GeometryError(StrokeWidthError):
    """Errors in geometric calculations."""

    pass


class DegenerateGeometryError(GeometryError):
    """Zero-area, zero-length or otherwise unmeasurable geometry."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class EstimationError(StrokeWidthError):
    """A width estimator cannot be applied to a glyph."""

    pass


class CenterOutsideShapeError(EstimationError):
    """The glyph's center of mass is not enclosed by its outline."""

    def __init__(self, x: float, y: float) -> None:
        self.x = x
        self.y = y
        super().__init__(
            f"Center of mass ({x:.1f}, {y:.1f}) is outside the shape; "
            "center-of-mass method not supported for this glyph"
        )


class ExecutionTimeoutError(StrokeWidthError):
    """The execution budget for a unit of work ran out."""

    def __init__(self, budget_seconds: float) -> None:
        self.budget_seconds = budget_seconds
        super().__init__(f"Execution budget of {budget_seconds:.2f}s exceeded")


class TagIndexError(StrokeWidthError):
    """Error reading font tag metadata."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ResultStoreError(StrokeWidthError):
    """Error reading or writing the result store."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Result store '{path}': {reason}")
