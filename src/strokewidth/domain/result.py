"""Estimation results and batch task records.

This module defines the values produced by a measurement run and the
records the batch orchestrator persists for each unit of work.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# Common design grid that widths are normalized to
NORMALIZED_UPM = 1000


@dataclass(frozen=True)
class WidthEstimate:
    """Stroke width estimate for one glyph.

    Attributes:
        width: Aggregated stroke width in font units
        method: Name of the estimation method that produced it
        low_confidence: True when too many rays or segment pairs were excluded
        min_width: Smallest accepted observation
        max_width: Largest accepted observation
        sample_count: Number of observations that were aggregated
        excluded_count: Number of rays or segments excluded from aggregation
        units_per_em: Design grid of the measured font
    """

    width: float
    method: str
    low_confidence: bool
    min_width: float
    max_width: float
    sample_count: int
    excluded_count: int
    units_per_em: int = NORMALIZED_UPM

    @property
    def confidence(self) -> float:
        """Fraction of observations that were accepted."""
        total = self.sample_count + self.excluded_count
        return self.sample_count / total if total else 0.0

    @property
    def scale(self) -> float:
        """Multiplier from font units to a 1000 unit em."""
        return NORMALIZED_UPM / self.units_per_em

    @property
    def normalized_width(self) -> float:
        return self.width * self.scale

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC and storage."""
        return {
            "width": self.width,
            "method": self.method,
            "low_confidence": self.low_confidence,
            "min_width": self.min_width,
            "max_width": self.max_width,
            "sample_count": self.sample_count,
            "excluded_count": self.excluded_count,
            "upm": self.units_per_em,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WidthEstimate":
        """Deserialize from dictionary."""
        return cls(
            width=data["width"],
            method=data["method"],
            low_confidence=data["low_confidence"],
            min_width=data["min_width"],
            max_width=data["max_width"],
            sample_count=data["sample_count"],
            excluded_count=data["excluded_count"],
            units_per_em=data.get("upm", NORMALIZED_UPM),
        )


class TaskStatus(str, Enum):
    """Lifecycle of one batch unit.

    PENDING -> RUNNING -> one of COMPLETED, FAILED, SKIPPED, TIMED_OUT.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self not in (TaskStatus.PENDING, TaskStatus.RUNNING)


# ((axis tag, user coordinate), ...) sorted by tag; () is the default instance
Location = tuple[tuple[str, float], ...]


def location_label(location: dict[str, float]) -> str:
    """Render a location like 'wght@400', or 'default' for the default instance."""
    if not location:
        return "default"
    tags = ",".join(location)
    values = ",".join(
        str(int(v)) if float(v).is_integer() else f"{v:.2f}" for v in location.values()
    )
    return f"{tags}@{values}"


@dataclass(frozen=True)
class FontTask:
    """One unit of batch work: a character measured in a font with one method.

    Attributes:
        font_path: Path of the font file
        character: Character to measure
        method: Estimation method name
        family: Family the font belongs to (for tag export)
        location: Variable font location (empty for the default instance)
    """

    font_path: str
    character: str
    method: str
    family: str = ""
    location: Location = ()

    @property
    def key(self) -> tuple[str, str, str, Location]:
        """Result store key."""
        return (self.font_path, self.character, self.method, self.location)

    @property
    def location_dict(self) -> dict[str, float]:
        return dict(self.location)

    @property
    def label(self) -> str:
        """Font file name, plus the location for variable font instances."""
        name = Path(self.font_path).name
        return f"{name} {location_label(self.location_dict)}" if self.location else name

    def to_dict(self) -> dict[str, Any]:
        return {
            "font": self.font_path,
            "char": self.character,
            "method": self.method,
            "family": self.family,
            "location": self.location_dict,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontTask":
        return cls(
            font_path=data["font"],
            character=data["char"],
            method=data["method"],
            family=data.get("family", ""),
            location=tuple(sorted((tag, float(v)) for tag, v in data.get("location", {}).items())),
        )


@dataclass
class TaskResult:
    """Outcome of one batch unit.

    Attributes:
        task: The unit this result belongs to
        status: Terminal (or in-flight) state of the unit
        estimate: Width estimate when status is COMPLETED
        error: Error message for FAILED and TIMED_OUT units
        error_type: Exception class name for FAILED and TIMED_OUT units
        duration_ms: Wall-clock time spent on the unit
        traceback: Traceback for unexpected errors
    """

    task: FontTask
    status: TaskStatus
    estimate: WidthEstimate | None = None
    error: str | None = None
    error_type: str | None = None
    duration_ms: float = 0.0
    traceback: str | None = field(default=None, repr=False)

    @property
    def is_failure(self) -> bool:
        """True for units that ended FAILED or TIMED_OUT."""
        return self.status in (TaskStatus.FAILED, TaskStatus.TIMED_OUT)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC and storage."""
        return {
            "task": self.task.to_dict(),
            "status": self.status.value,
            "estimate": self.estimate.to_dict() if self.estimate else None,
            "error": self.error,
            "error_type": self.error_type,
            "duration_ms": self.duration_ms,
            "traceback": self.traceback,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskResult":
        """Deserialize from dictionary."""
        estimate = data.get("estimate")
        return cls(
            task=FontTask.from_dict(data["task"]),
            status=TaskStatus(data["status"]),
            estimate=WidthEstimate.from_dict(estimate) if estimate else None,
            error=data.get("error"),
            error_type=data.get("error_type"),
            duration_ms=data.get("duration_ms", 0.0),
            traceback=data.get("traceback"),
        )
