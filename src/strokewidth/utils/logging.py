"""Logging utilities for stroke-width."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from strokewidth.domain import FontTask, TaskResult, TaskStatus, location_label

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_ATTR = "_strokewidth_handler"


@dataclass
class BatchStats:
    """Statistics from a batch run."""

    completed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    timed_out_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    unit_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def total(self) -> int:
        return self.completed_count + self.skipped_count + self.failed_count + self.timed_out_count

    @property
    def has_failures(self) -> bool:
        """True if any unit ended FAILED or TIMED_OUT."""
        return self.failed_count > 0 or self.timed_out_count > 0

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_timing_ms(self) -> float:
        if not self.unit_timings_ms:
            return 0.0
        return sum(self.unit_timings_ms) / len(self.unit_timings_ms)

    @property
    def min_timing_ms(self) -> float:
        return min(self.unit_timings_ms, default=0.0)

    @property
    def max_timing_ms(self) -> float:
        return max(self.unit_timings_ms, default=0.0)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging to the console and an optional file.

    Args:
        log_file: Path to log file (no file logging if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        setattr(file_handler, _HANDLER_ATTR, True)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(console_handler, _HANDLER_ATTR, True)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("strokewidth")
    logger.debug("Logging initialized", log_file=str(log_file) if log_file else None)

    return logger


class BatchLogger:
    """Logs batch unit lifecycle events and accumulates BatchStats."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger("strokewidth.batch")
        self._stats = BatchStats()

    def log_unit_start(self, task: FontTask) -> None:
        """Log a unit entering RUNNING."""
        self._logger.debug(
            "Unit started",
            font=task.font_path,
            location=location_label(task.location_dict),
            char=task.character,
            method=task.method,
        )

    def log_unit_complete(self, result: TaskResult) -> None:
        estimate = result.estimate
        self._logger.info(
            "Unit completed",
            font=result.task.font_path,
            location=location_label(result.task.location_dict),
            family=result.task.family,
            width=round(estimate.width, 2) if estimate else None,
            low_confidence=estimate.low_confidence if estimate else None,
            duration_ms=round(result.duration_ms, 2),
        )
        self._stats.completed_count += 1
        self._stats.unit_timings_ms.append(result.duration_ms)

    def log_unit_skipped(self, task: FontTask, reason: str) -> None:
        self._logger.debug("Unit skipped", font=task.font_path, reason=reason)
        self._stats.skipped_count += 1

    def log_unit_failed(self, result: TaskResult) -> None:
        self._logger.error(
            "Unit failed",
            font=result.task.font_path,
            location=location_label(result.task.location_dict),
            error=result.error,
            error_type=result.error_type,
            traceback=result.traceback,
        )
        self._stats.failed_count += 1
        self._stats.errors.append((result.task.label, result.error or "unknown error"))

    def log_unit_timed_out(self, result: TaskResult) -> None:
        self._logger.warning(
            "Unit timed out",
            font=result.task.font_path,
            location=location_label(result.task.location_dict),
            error=result.error,
            duration_ms=round(result.duration_ms, 2),
        )
        self._stats.timed_out_count += 1
        self._stats.errors.append((result.task.label, result.error or "timed out"))

    def log_result(self, result: TaskResult) -> None:
        """Dispatch a terminal result to the matching log method."""
        if result.status == TaskStatus.COMPLETED:
            self.log_unit_complete(result)
        elif result.status == TaskStatus.TIMED_OUT:
            self.log_unit_timed_out(result)
        elif result.status == TaskStatus.SKIPPED:
            self.log_unit_skipped(result.task, result.error or "already computed")
        else:
            self.log_unit_failed(result)

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return self._logger

    @property
    def stats(self) -> BatchStats:
        """Get current batch statistics."""
        return self._stats
