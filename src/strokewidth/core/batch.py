"""Batch orchestration for stroke width measurement.

This module runs one estimation per font across many fonts, isolating
each unit so that a broken font, a degenerate glyph or a runaway
computation only ever costs that unit.

Key components:
- run_task: Top-level picklable function for parallel execution
- BatchOrchestrator: Plans, skips, runs and persists batch units
"""

import time
import traceback
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

import structlog

from strokewidth.config import StrokeWidthSettings
from strokewidth.core.deadline import Deadline
from strokewidth.core.estimator import get_estimator
from strokewidth.domain import FontTask, TaskResult, TaskStatus
from strokewidth.exceptions import ExecutionTimeoutError, FontError, StrokeWidthError
from strokewidth.io.reader import FontSource
from strokewidth.io.store import ResultStore
from strokewidth.io.tags import TagIndex
from strokewidth.utils import BatchLogger, BatchStats

ProgressCallback = Callable[[int, int, FontTask, TaskStatus], None]


def run_task(
    task_dict: dict[str, Any],
    settings_dict: dict[str, Any],
    font_source: FontSource | None = None,
) -> dict[str, Any]:
    """Measure one font.

    Top-level function designed to be picklable for use with
    ProcessPoolExecutor. Never raises: every outcome is reported in the
    returned TaskResult dictionary.

    Args:
        task_dict: Serialized unit (from FontTask.to_dict())
        settings_dict: Serialized settings (from StrokeWidthSettings.model_dump())
        font_source: Outline loader (a FontSource built from the settings if None)

    Returns:
        Serialized TaskResult with status COMPLETED, FAILED or TIMED_OUT
    """
    start_time = time.time()
    task = FontTask.from_dict(task_dict)

    def finish(status: TaskStatus, **kwargs: Any) -> dict[str, Any]:
        duration_ms = (time.time() - start_time) * 1000
        return TaskResult(task=task, status=status, duration_ms=duration_ms, **kwargs).to_dict()

    try:
        settings = StrokeWidthSettings.model_validate(settings_dict)
        deadline = Deadline(settings.batch.timeout_seconds)
        source = font_source or FontSource(settings.geometry)

        outline = source.load_outline(
            Path(task.font_path), task.character, task.location_dict or None
        )
        deadline.check()

        estimator = get_estimator(task.method, settings.estimator, settings.geometry)
        estimate = estimator.estimate(outline, deadline)
        return finish(TaskStatus.COMPLETED, estimate=estimate)

    except ExecutionTimeoutError as e:
        return finish(TaskStatus.TIMED_OUT, error=str(e), error_type=type(e).__name__)

    except StrokeWidthError as e:
        return finish(TaskStatus.FAILED, error=str(e), error_type=type(e).__name__)

    except Exception as e:
        return finish(
            TaskStatus.FAILED,
            error=str(e),
            error_type=type(e).__name__,
            traceback=traceback.format_exc(),
        )


class BatchOrchestrator:
    """Runs batch units with skip-if-computed semantics.

    Manages the batch workflow:
    1. Plan one unit per candidate font and weight stop
    2. Skip units that already have a stored result (unless forced)
    3. Run the rest in-process or in worker processes
    4. Persist every terminal result as soon as it arrives

    Example:
        settings = StrokeWidthSettings()
        orchestrator = BatchOrchestrator(settings, ResultStore(Path("widths.jsonl")))
        stats = orchestrator.run_tag_filter(index, "/Sans")
    """

    def __init__(
        self,
        settings: StrokeWidthSettings,
        store: ResultStore,
        font_source: FontSource | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Application settings (batch, estimator and geometry config)
            store: Result store used for skipping and persistence
            font_source: Outline loader shipped to workers (default FontSource)
            logger: Structured logger (default "strokewidth.batch")
        """
        self.settings = settings
        self.store = store
        self.font_source = font_source
        self.logger = logger or structlog.get_logger("strokewidth.batch")
        self.last_stats: BatchStats | None = None

    def plan(self, candidates: Iterable[tuple[str, Path]]) -> list[FontTask]:
        """Turn (family, font_path) pairs into units for the configured character and method.

        Variable fonts with a wght axis yield one unit per weight stop
        (see FontSource.locations_of_interest) unless all_weights is off.
        """
        batch = self.settings.batch
        source = self.font_source or FontSource(self.settings.geometry)
        tasks: dict[tuple, FontTask] = {}
        for family, font_path in candidates:
            for location in self._locations(source, Path(font_path)):
                task = FontTask(
                    font_path=str(font_path),
                    character=batch.character,
                    method=batch.method.value,
                    family=family,
                    location=tuple(sorted(location.items())),
                )
                tasks.setdefault(task.key, task)
        return list(tasks.values())

    def _locations(self, source: FontSource, font_path: Path) -> list[dict[str, float]]:
        if not self.settings.batch.all_weights:
            return [{}]
        try:
            return source.locations_of_interest(font_path)
        except FontError as e:
            # The default-instance unit reports the same error when it runs
            self.logger.warning("Cannot read font axes", font=str(font_path), error=str(e))
            return [{}]

    def should_skip(self, task: FontTask) -> bool:
        """True if the store already holds a terminal result and force is off."""
        return not self.settings.batch.force and self.store.lookup(*task.key) is not None

    def run_tag_filter(
        self,
        index: TagIndex,
        expression: str,
        family_filter: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchStats:
        """Measure every font of every family whose tags match an expression.

        Raises:
            TagIndexError: If the tag data cannot be read or the expression is invalid
        """
        candidates = index.resolve(expression, family_filter)
        self.logger.info(
            "Resolved tag filter",
            expression=expression,
            family_filter=family_filter,
            fonts=len(candidates),
        )
        return self.run(self.plan(candidates), progress_callback)

    def run(
        self,
        tasks: list[FontTask],
        progress_callback: ProgressCallback | None = None,
    ) -> BatchStats:
        """Run units and persist their results.

        Args:
            tasks: Units to run
            progress_callback: Optional callback(done, total, task, status)
                called once per unit

        Returns:
            BatchStats with counts per terminal state, errors and timings

        Raises:
            ResultStoreError: If a result cannot be persisted
            KeyboardInterrupt: If the run is cancelled by the user
        """
        batch_logger = BatchLogger(self.logger)
        stats = batch_logger.stats
        stats.start_time = time.time()
        self.last_stats = stats

        total = len(tasks)
        done = 0

        def collect(result: TaskResult) -> None:
            nonlocal done
            if result.status != TaskStatus.SKIPPED:
                font, character, method, location = result.task.key
                self.store.put(font, character, method, result, location)
            batch_logger.log_result(result)
            done += 1
            if progress_callback is not None:
                progress_callback(done, total, result.task, result.status)

        to_run: list[FontTask] = []
        for task in tasks:
            if self.should_skip(task):
                collect(TaskResult(task=task, status=TaskStatus.SKIPPED, error="already computed"))
            else:
                to_run.append(task)

        max_workers = self.settings.batch.max_workers
        self.logger.info(
            "Starting batch",
            units=total,
            to_run=len(to_run),
            skipped=stats.skipped_count,
            max_workers=max_workers,
        )

        if to_run:
            if max_workers == 1:
                self._run_serial(to_run, batch_logger, collect)
            else:
                self._run_parallel(to_run, max_workers, batch_logger, collect)

        stats.end_time = time.time()
        self.logger.info(
            "Batch complete",
            completed=stats.completed_count,
            skipped=stats.skipped_count,
            failed=stats.failed_count,
            timed_out=stats.timed_out_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return stats

    def _run_serial(
        self,
        tasks: list[FontTask],
        batch_logger: BatchLogger,
        collect: Callable[[TaskResult], None],
    ) -> None:
        settings_dict = self.settings.model_dump()
        for i, task in enumerate(tasks):
            batch_logger.log_unit_start(task)
            try:
                result = run_task(task.to_dict(), settings_dict, self.font_source)
            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                batch_logger.stats.was_cancelled = True
                batch_logger.stats.cancelled_count = len(tasks) - i
                raise
            collect(TaskResult.from_dict(result))

    def _run_parallel(
        self,
        tasks: list[FontTask],
        max_workers: int | None,
        batch_logger: BatchLogger,
        collect: Callable[[TaskResult], None],
    ) -> None:
        settings_dict = self.settings.model_dump()
        pending_futures: dict[Future, FontTask] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for task in tasks:
                future = executor.submit(run_task, task.to_dict(), settings_dict, self.font_source)
                pending_futures[future] = task
                batch_logger.log_unit_start(task)

            try:
                for future in as_completed(list(pending_futures)):
                    task = pending_futures.pop(future)
                    try:
                        result = TaskResult.from_dict(future.result())
                    except Exception as e:
                        # Executor-level error, e.g. a worker died (BrokenProcessPool)
                        result = TaskResult(
                            task=task,
                            status=TaskStatus.FAILED,
                            error=str(e) or "worker process failed",
                            error_type=type(e).__name__,
                            traceback=traceback.format_exc(),
                        )
                    collect(result)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()
                batch_logger.stats.was_cancelled = True
                batch_logger.stats.cancelled_count = len(pending_futures)
                executor.shutdown(wait=True, cancel_futures=True)
                raise
