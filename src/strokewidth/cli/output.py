"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from strokewidth.domain import Outline, WidthEstimate
from strokewidth.utils import BatchStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Low confidence
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for batch units.

    Returns:
        Configured Progress instance with bar, count and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    console.print(f"\n[bold]Stroke Width[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_outline_info(font_path: str, character: str, outline: Outline) -> None:
    """Print what was loaded for a character.

    Args:
        font_path: Path to the font file
        character: Measured character
        outline: Loaded outline
    """
    # Use Text to safely handle paths with special characters
    line1 = Text("  ")
    line1.append(font_path)
    line1.append(f" {SYM_DOT} {character!r} → {outline.name}")
    console.print(line1)
    console.print(
        f"  {len(outline.contours)} contours {SYM_DOT} {outline.segment_count} segments "
        f"{SYM_DOT} {outline.units_per_em:,} UPM {SYM_DOT} {outline.fill_rule.name.lower()}"
    )


def print_estimate(label: str, estimate: WidthEstimate) -> None:
    """Print one width estimate.

    Args:
        label: Location label (e.g. "default" or "wght@700")
        estimate: The estimate
    """
    mark = f"[yellow]{SYM_WARN}[/yellow]" if estimate.low_confidence else f"[green]{SYM_OK}[/green]"
    line = (
        f"  {mark} {label:<14} [bold]{estimate.width:.2f}[/bold] "
        f"{SYM_DOT} {estimate.min_width:.2f}–{estimate.max_width:.2f} "
        f"{SYM_DOT} {estimate.normalized_width:.2f}/1000em "
        f"{SYM_DOT} {estimate.sample_count}/{estimate.sample_count + estimate.excluded_count} samples"
    )
    if estimate.low_confidence:
        line += " [yellow](low confidence)[/yellow]"
    console.print(line)


def print_failure(label: str, error: Exception) -> None:
    """Print a per-location measurement failure."""
    console.print(
        f"  [red]{SYM_ERR}[/red] {label:<14} [red]{type(error).__name__}[/red] {SYM_DOT} {error}"
    )


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_batch_info(expression: str, store_path: str, workers: int | None, timeout: float) -> None:
    workers_str = "auto" if workers is None else ("in-process" if workers == 1 else str(workers))
    console.print(f"  tags {expression!r} {SYM_DOT} store {store_path}")
    console.print(
        f"  {workers_str} workers {SYM_DOT} {timeout:g}s per font {SYM_DOT} Ctrl+C to cancel"
    )


def print_batch_summary(stats: BatchStats, verbose: bool = False) -> None:
    """Print batch summary with per-state counts.

    Args:
        stats: Statistics from the run
        verbose: Also list every failed or timed-out unit
    """
    time_str = _format_time(stats.duration_seconds)
    if stats.has_failures:
        console.print(f"\n[bold yellow]{SYM_ERR} Finished with failures[/bold yellow] in {time_str}")
    else:
        console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    fail_style = "red" if stats.has_failures else "green"
    console.print(
        f"  {stats.completed_count} completed {SYM_DOT} {stats.skipped_count} skipped "
        f"{SYM_DOT} [{fail_style}]{stats.failed_count} failed {SYM_DOT} "
        f"{stats.timed_out_count} timed out[/{fail_style}]"
    )

    if stats.unit_timings_ms:
        console.print(
            f"  {stats.avg_timing_ms:.1f}ms avg "
            f"({stats.min_timing_ms:.1f}–{stats.max_timing_ms:.1f}ms range)"
        )

    if verbose and stats.errors:
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Font")
        table.add_column("Error")
        for unit, error in stats.errors:
            table.add_row(unit, error)
        console.print(table)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress fonts")


def print_cancellation_summary(completed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        completed: Number of units finished before cancellation
        cancelled: Number of pending units that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {completed} fonts finished {SYM_DOT} {cancelled} units cancelled")
    console.print("  Finished results are already in the store")
