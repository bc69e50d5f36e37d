"""Append-only result store.

Each terminal batch result is one JSON line. The file is only ever
appended to, and each record is flushed and fsynced before put() returns,
so an interrupted run loses at most the record being written. When a key
appears more than once the last record wins.
"""

import json
import os
import threading
from collections.abc import Iterator
from pathlib import Path

import structlog

from strokewidth.domain import Location, TaskResult, TaskStatus, WidthEstimate, location_label
from strokewidth.exceptions import ResultStoreError

logger = structlog.get_logger("strokewidth.store")

STROKE_WIDTH_TAG = "/quant/stroke_width"
STROKE_WIDTH_MIN_TAG = "/quant/stroke_width_min"
STROKE_WIDTH_MAX_TAG = "/quant/stroke_width_max"

StoreKey = tuple[str, str, str, Location]


def _key(
    font: str, character: str, method: str, location: dict[str, float] | Location | None
) -> StoreKey:
    pairs = location.items() if isinstance(location, dict) else (location or ())
    return (font, character, method, tuple(sorted((tag, float(value)) for tag, value in pairs)))


class ResultStore:
    """Results keyed by (font path, character, method, location).

    Only the orchestrator's parent process writes to a store.

    Example:
        store = ResultStore(Path("widths.jsonl"))
        estimate = store.get("Roboto[wght].ttf", "o", "center-of-mass", {"wght": 700.0})
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._latest: dict[StoreKey, TaskResult] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise ResultStoreError(str(self.path), str(e)) from e

        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                result = TaskResult.from_dict(json.loads(line))
            except (ValueError, KeyError, TypeError) as e:
                if lineno == len(lines):
                    # Torn write from an interrupted run
                    logger.warning(
                        "Ignoring truncated store record", path=str(self.path), line=lineno
                    )
                    continue
                raise ResultStoreError(str(self.path), f"bad record on line {lineno}: {e}") from e
            self._latest[result.task.key] = result

        logger.debug("Loaded result store", path=str(self.path), records=len(self._latest))

    def lookup(
        self,
        font: str,
        character: str,
        method: str,
        location: dict[str, float] | Location | None = None,
    ) -> TaskResult | None:
        """Latest record for a key, whatever its status (default instance if no location)."""
        return self._latest.get(_key(font, character, method, location))

    def get(
        self,
        font: str,
        character: str,
        method: str,
        location: dict[str, float] | Location | None = None,
    ) -> WidthEstimate | None:
        """Estimate from the latest record, if that record completed."""
        result = self.lookup(font, character, method, location)
        if result is None or result.status != TaskStatus.COMPLETED:
            return None
        return result.estimate

    def put(
        self,
        font: str,
        character: str,
        method: str,
        result: TaskResult,
        location: dict[str, float] | Location | None = None,
    ) -> None:
        """Append a terminal result.

        Raises:
            ResultStoreError: If the result does not belong to the key, is
                not terminal, or cannot be written
        """
        key = _key(font, character, method, location)
        if result.task.key != key:
            raise ResultStoreError(
                str(self.path), f"result for {result.task.key} stored under {key}"
            )
        if not result.status.is_terminal or result.status == TaskStatus.SKIPPED:
            raise ResultStoreError(
                str(self.path), f"refusing to store {result.status.value} result for {key}"
            )

        line = json.dumps(result.to_dict(), sort_keys=True)
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise ResultStoreError(str(self.path), str(e)) from e
            self._latest[key] = result

    def results(self) -> Iterator[TaskResult]:
        """Latest result per key, in key order."""
        for key in sorted(self._latest):
            yield self._latest[key]

    def __len__(self) -> int:
        return len(self._latest)

    def __contains__(self, key: object) -> bool:
        return key in self._latest

    def export_tags(self) -> list[tuple[str, str, str, str]]:
        """Completed results as tag rows in 1000 UPM units.

        Returns:
            (family, location, tag, value) rows; the family falls back to
            the font file stem when the task has none and the location is
            empty for default instances
        """
        rows = []
        for result in self.results():
            estimate = result.estimate
            if result.status != TaskStatus.COMPLETED or estimate is None:
                continue
            family = result.task.family or Path(result.task.font_path).stem
            location = location_label(result.task.location_dict) if result.task.location else ""
            for tag, value in (
                (STROKE_WIDTH_TAG, estimate.width),
                (STROKE_WIDTH_MIN_TAG, estimate.min_width),
                (STROKE_WIDTH_MAX_TAG, estimate.max_width),
            ):
                rows.append((family, location, tag, f"{value * estimate.scale:.2f}"))
        return rows
