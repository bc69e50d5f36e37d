"""CLI application entry point for stroke-width.

This module provides the main CLI interface using Typer.

Exit codes:
    0  every unit completed or was skipped
    1  a unit failed or timed out, or the run could not start
    130  cancelled with Ctrl+C
"""

import csv
import io
from pathlib import Path
from typing import Annotated

import typer

from strokewidth import __version__
from strokewidth.cli.output import (
    console,
    create_progress,
    print_batch_info,
    print_batch_summary,
    print_cancellation_notice,
    print_cancellation_summary,
    print_error,
    print_estimate,
    print_failure,
    print_header,
    print_outline_info,
    print_step,
)
from strokewidth.config import (
    Aggregation,
    BatchConfig,
    EstimationMethod,
    EstimatorConfig,
    LoggingConfig,
    StrokeWidthSettings,
)
from strokewidth.core import get_estimator
from strokewidth.core.batch import BatchOrchestrator
from strokewidth.domain import FontTask, TaskStatus, location_label
from strokewidth.exceptions import FontError, StrokeWidthError
from strokewidth.io import FontSource, ResultStore, TagIndex
from strokewidth.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="stroke-width",
    help="Estimate the stroke width of glyphs in TrueType/OpenType fonts.",
    add_completion=False,
    no_args_is_help=True,
)

EXIT_FAILURE = 1
EXIT_CANCELLED = 130  # Standard Unix SIGINT exit code


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Stroke Width[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Estimate the stroke width of glyphs in TrueType/OpenType fonts."""


def _validate_character(character: str) -> str:
    if len(character) != 1:
        print_error(
            f"Expected a single character, got {character!r}",
            details="Pass one character, e.g. 'o' or 'H'.",
        )
        raise typer.Exit(code=EXIT_FAILURE)
    return character


@app.command()
def measure(
    character: Annotated[
        str,
        typer.Argument(help="Character to measure (e.g. o)", show_default=False),
    ],
    font: Annotated[
        Path,
        typer.Argument(help="Path to TTF/OTF font file", show_default=False),
    ],
    method: Annotated[
        EstimationMethod,
        typer.Option("--method", "-m", help="Estimation method"),
    ] = EstimationMethod.CENTER_OF_MASS,
    all_weights: Annotated[
        bool,
        typer.Option(
            "--all-weights",
            help="Measure every 100 units along a variable font's wght axis",
        ),
    ] = False,
    ray_count: Annotated[
        int,
        typer.Option("--ray-count", help="Rays cast by the center-of-mass method", min=4),
    ] = 360,
    aggregation: Annotated[
        Aggregation,
        typer.Option("--aggregation", help="How observations are combined"),
    ] = Aggregation.MEDIAN,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show outline details"),
    ] = False,
) -> None:
    """Measure the stroke width of one character in one font.

    Example:
        stroke-width measure o Roboto[wght].ttf --all-weights
    """
    character = _validate_character(character)
    configure_logging()

    settings = StrokeWidthSettings(
        estimator=EstimatorConfig(ray_count=ray_count, aggregation=aggregation),
    )
    source = FontSource(settings.geometry)
    estimator = get_estimator(method, settings.estimator, settings.geometry)

    print_header(__version__)
    failures = 0
    try:
        locations = source.locations_of_interest(font) if all_weights else [{}]
        print_step(f"Measuring {character!r} with {method.value}")

        for location in locations:
            label = location_label(location)
            try:
                outline = source.load_outline(font, character, location or None)
                if verbose:
                    print_outline_info(str(font), character, outline)
                print_estimate(label, estimator.estimate(outline))
            except FontError:
                raise
            except StrokeWidthError as e:
                failures += 1
                print_failure(label, e)

    except FontError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FAILURE) from None
    except KeyboardInterrupt:
        print_cancellation_notice()
        raise typer.Exit(code=EXIT_CANCELLED) from None

    if failures:
        raise typer.Exit(code=EXIT_FAILURE)


@app.command()
def batch(
    tag_filter: Annotated[
        str,
        typer.Option(
            "--tag-filter",
            "-t",
            help="Tag expression: '/a/b' matches a tag subtree, anything else is a regex",
            show_default=False,
        ),
    ],
    fonts_root: Annotated[
        Path,
        typer.Option("--fonts-root", help="Directory of family folders", show_default=False),
    ],
    tags_csv: Annotated[
        Path,
        typer.Option("--tags-csv", help="Tags CSV (family,location,tag,value)", show_default=False),
    ],
    store: Annotated[
        Path,
        typer.Option("--store", "-s", help="Result store (JSON lines)", show_default=False),
    ],
    family_filter: Annotated[
        str | None,
        typer.Option("--family-filter", help="Regex; only measure matching families"),
    ] = None,
    character: Annotated[
        str,
        typer.Option("--char", "-c", help="Character to measure"),
    ] = "o",
    method: Annotated[
        EstimationMethod,
        typer.Option("--method", "-m", help="Estimation method"),
    ] = EstimationMethod.CENTER_OF_MASS,
    force: Annotated[
        bool,
        typer.Option("--force", help="Recompute fonts that already have a stored result"),
    ] = False,
    all_weights: Annotated[
        bool,
        typer.Option(
            "--all-weights/--default-only",
            help="Measure variable fonts at every 100 weight units, or only the default instance",
        ),
    ] = True,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto, 1: in-process)",
            min=1,
        ),
    ] = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", help="Seconds allowed per font", min=0.001),
    ] = 30.0,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Write detailed logs to file"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="List every failed font"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Minimal console output"),
    ] = False,
) -> None:
    """Measure every font of every family whose tags match a filter.

    Fonts with a stored result are skipped unless --force is given, so an
    interrupted run can simply be started again. Variable fonts are measured
    once per weight stop unless --default-only is given.

    Example:
        stroke-width batch -t /Sans --fonts-root ~/oss/fonts \\
            --tags-csv ~/oss/fonts/tags/all/families.csv --store widths.jsonl
    """
    character = _validate_character(character)

    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=EXIT_FAILURE)

    settings = StrokeWidthSettings(
        batch=BatchConfig(
            character=character,
            method=method,
            timeout_seconds=timeout,
            max_workers=workers,
            force=force,
            all_weights=all_weights,
        ),
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )
    logger = configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)
        print_step("Resolving fonts")
        print_batch_info(tag_filter, str(store), workers, timeout)

    orchestrator = None
    stats = None
    try:
        result_store = ResultStore(store)
        index = TagIndex(fonts_root, tags_csv)
        orchestrator = BatchOrchestrator(settings, result_store, logger=logger)

        if quiet:
            stats = orchestrator.run_tag_filter(index, tag_filter, family_filter)
        else:
            print_step("Measuring")
            with create_progress() as progress:
                task_id = progress.add_task("Measuring", total=None)

                def update_progress(
                    done: int, total: int, task: FontTask, status: TaskStatus
                ) -> None:
                    progress.update(task_id, completed=done, total=total)
                    if status in (TaskStatus.FAILED, TaskStatus.TIMED_OUT):
                        progress.console.print(
                            f"  [red]{status.value}[/red] {task.label}"
                        )

                stats = orchestrator.run_tag_filter(
                    index, tag_filter, family_filter, progress_callback=update_progress
                )

    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            partial = orchestrator.last_stats if orchestrator else None
            print_cancellation_summary(
                completed=partial.total if partial else 0,
                cancelled=partial.cancelled_count if partial else 0,
            )
        raise typer.Exit(code=EXIT_CANCELLED) from None
    except StrokeWidthError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FAILURE) from None

    if not quiet:
        print_batch_summary(stats, verbose=verbose)

    if stats.has_failures:
        raise typer.Exit(code=EXIT_FAILURE)


@app.command()
def export(
    store: Annotated[
        Path,
        typer.Option("--store", "-s", help="Result store (JSON lines)", show_default=False),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Append tag rows to this CSV (default: stdout)"),
    ] = None,
) -> None:
    """Export completed results as family tag rows in 1000 UPM units.

    Rows look like "Roboto,,/quant/stroke_width,84.00".
    """
    try:
        rows = ResultStore(store).export_tags()
    except StrokeWidthError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FAILURE) from None

    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerows(rows)
    text = buffer.getvalue()

    if output is None:
        typer.echo(text, nl=False)
        return

    try:
        with open(output, "a", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        print_error(f"Could not write {output}: {e}")
        raise typer.Exit(code=EXIT_FAILURE) from None
    console.print(f"Wrote {len(rows)} tag rows to {output}")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
