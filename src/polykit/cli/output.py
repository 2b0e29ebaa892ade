"""Rich console output for the CLI.

All user-facing text goes through the shared ``console``; structured logs
go through structlog instead.
"""

from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from polykit.domain import Job
from polykit.utils import ProcessingStats

console = Console()

SYM_STEP = "▸"
SYM_OK = "✓"
SYM_ERR = "✗"
SYM_DOT = "·"


def format_duration(seconds: float) -> str:
    """Render a duration as ms, seconds, or minutes and seconds."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:.1f}s"


def format_size(path: Path) -> str:
    """Render the size of a file, or "unknown" if it cannot be read."""
    try:
        size = path.stat().st_size
    except OSError:
        return "unknown"
    for unit, scale in (("MB", 1 << 20), ("KB", 1 << 10)):
        if size >= scale:
            return f"{size / scale:.1f} {unit}"
    return f"{size} B"


def create_progress() -> Progress:
    """Progress bar showing finished and total job counts."""
    return Progress(
        TextColumn("  [progress.description]{task.description}"),
        BarColumn(bar_width=32, complete_style="green", finished_style="green"),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def print_header(version: str) -> None:
    console.print(f"\n[bold]Polykit[/bold] v{version}")
    console.rule(style="dim")


def print_step(message: str) -> None:
    console.print(f"\n{SYM_STEP} {message}")


def print_jobs_info(jobs_path: str, jobs: list[Job]) -> None:
    """Print the job file name and how many jobs of each kind it holds."""
    console.print(Text("  ").append(jobs_path))
    kinds = Counter(job.kind.value for job in jobs)
    parts = [f"{len(jobs):,} jobs"] + [f"{n} {kind}" for kind, n in sorted(kinds.items())]
    console.print("  " + f" {SYM_DOT} ".join(parts))


def _describe_input(job: Job) -> str:
    if job.path is not None:
        return f"{len(job.path)} points"
    if job.hull is not None:
        return f"{len(job.hull)} points, {len(job.holes)} holes"
    if job.spline is not None:
        return f"{job.spline.segment_count} segments"
    return "-"


def print_jobs_table(jobs: list[Job]) -> None:
    """Print one row per job with its kind and input size."""
    table = Table(box=None, padding=(0, 2), header_style="bold")
    table.add_column("Job")
    table.add_column("Kind")
    table.add_column("Input", justify="right")
    for job in jobs:
        table.add_row(job.name, job.kind.value, _describe_input(job))
    console.print(table)


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{suffix} {SYM_DOT} Ctrl+C to cancel")


def print_summary(stats: ProcessingStats, output_path: Path) -> None:
    """Print the outcome of a finished run.

    Args:
        stats: Statistics of the run
        output_path: Result file that was written
    """
    console.print(
        f"\n[bold green]{SYM_OK} Complete[/bold green] in {format_duration(stats.duration_seconds)}"
    )
    console.print(
        Text("  ").append(str(output_path), style="bold").append(f" ({format_size(output_path)})")
    )

    grid = Table.grid(padding=(0, 2))
    grid.add_column(justify="right")
    grid.add_column()
    grid.add_row(str(stats.processed_count), "processed")
    grid.add_row(str(stats.skipped_count), "skipped")
    grid.add_row(
        Text(str(stats.error_count), style="red" if stats.error_count else "green"), "errors"
    )
    grid.add_row(f"{stats.triangles_produced:,}", "triangles")
    if stats.job_timings_ms:
        grid.add_row(
            f"{stats.avg_job_ms:.1f}ms",
            f"per job ({stats.min_job_ms:.1f} to {stats.max_job_ms:.1f}ms)",
        )
    console.print(grid)


def print_job_errors(errors: list[tuple[str, str]]) -> None:
    for job_name, message in errors:
        console.print(f"  [red]{SYM_ERR}[/red] {job_name}: {message}")


def print_error(message: str, details: str | None = None) -> None:
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancelled(processed: int, cancelled: int) -> None:
    """Print what a cancelled run finished before it stopped."""
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} jobs completed {SYM_DOT} {cancelled} jobs cancelled")
    console.print("  No output file created")
