"""CLI application entry point for polykit.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from polykit import __version__
from polykit.cli.output import (
    SYM_OK,
    console,
    create_progress,
    print_cancelled,
    print_error,
    print_header,
    print_job_errors,
    print_jobs_info,
    print_jobs_table,
    print_processing_info,
    print_step,
    print_summary,
)
from polykit.config import LoggingConfig, PolykitSettings, ProcessingConfig
from polykit.core import MeshProcessor
from polykit.exceptions import (
    JobError,
    JobLoadError,
    ProcessingCancelledError,
    PolykitError,
    ResultSaveError,
)
from polykit.io import JobReader, ResultWriter

# Create the Typer app
app = typer.Typer(
    name="polykit",
    help="Turn paths and curves from a job file into triangle meshes.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Polykit[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def run(
    jobs_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the JSON job file",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}-meshes.json)",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Validate the job file and list its jobs without processing",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
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
    """Run every job in a job file and write the resulting meshes.

    Jobs simplify polylines, triangulate polygons with holes, flatten cubic
    splines or extrude strokes. Each job runs in a worker process.

    Example:
        polykit shapes.json

    This will create shapes-meshes.json with one result per job.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not jobs_file.exists():
        print_error(
            f"Input file not found: {jobs_file}",
            details=f"The file '{jobs_file}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not jobs_file.is_file():
        print_error(
            f"Input path is not a file: {jobs_file}",
            details="Please provide a path to a JSON job file.",
        )
        raise typer.Exit(code=1)

    if log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        print_error(
            f"Invalid log level: {log_level}",
            details="Valid values: DEBUG, INFO, WARNING, ERROR",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__)

    settings = PolykitSettings(
        processing=ProcessingConfig(
            max_workers=workers,
        ),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "ERROR",
        ),
    )

    try:
        if not quiet:
            print_step("Loading jobs")

        reader = JobReader(jobs_file)
        reader.load()
        jobs = list(reader.iter_jobs())

        if not quiet:
            print_jobs_info(str(jobs_file), jobs)
            if verbose or dry_run:
                print_jobs_table(jobs)

        if dry_run:
            if not quiet:
                console.print(f"\n[bold green]{SYM_OK} Dry run complete[/bold green] - no files written")
            raise typer.Exit(code=0)

        if not jobs:
            if not quiet:
                console.print("\nNo jobs found. Nothing to process.")
            raise typer.Exit(code=0)

        if not quiet:
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Processing")
            print_processing_info(actual_workers, is_auto=(workers is None))

        actual_output_path = output if output is not None else ResultWriter.get_output_path(jobs_file)

        processor = MeshProcessor(settings)

        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task("jobs", total=len(jobs))

                    def update_progress(completed: int, *_: object) -> None:
                        progress.update(task_id, completed=completed)

                    stats = processor.process(
                        jobs_path=jobs_file,
                        output_path=actual_output_path,
                        max_workers=workers,
                        progress_callback=update_progress,
                    )
            else:
                stats = processor.process(
                    jobs_path=jobs_file,
                    output_path=actual_output_path,
                    max_workers=workers,
                )
        except ProcessingCancelledError as e:
            if not quiet:
                print_cancelled(processed=e.processed_count, cancelled=e.pending_count)
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        if not quiet:
            print_summary(stats, actual_output_path)
            if verbose and stats.errors:
                print_job_errors(stats.errors)

        if stats.error_count:
            raise typer.Exit(code=2)

    except JobLoadError as e:
        print_error(f"Could not load job file: {e.reason}")
        raise typer.Exit(code=1)
    except JobError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except ResultSaveError as e:
        print_error(f"Could not save results: {e.reason}")
        raise typer.Exit(code=1)
    except PolykitError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
