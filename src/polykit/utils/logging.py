"""Logging utilities for Polykit.

Log records go through structlog into the standard library root logger,
which fans them out to a verbose file handler and a terse console handler.
Batch runs tally their outcomes into a ProcessingStats instance through
ProcessingLogger, so every counted event is also a logged event.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

_HANDLER_PREFIX = "polykit."


@dataclass
class ProcessingStats:
    """Outcome counts and timings of one batch run."""

    processed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    triangles_produced: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    job_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Wall time between start and end, or 0 while unfinished."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_job_ms(self) -> float:
        if not self.job_timings_ms:
            return 0.0
        return sum(self.job_timings_ms) / len(self.job_timings_ms)

    @property
    def min_job_ms(self) -> float:
        return min(self.job_timings_ms, default=0.0)

    @property
    def max_job_ms(self) -> float:
        return max(self.job_timings_ms, default=0.0)


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _install(root: logging.Logger, handler: logging.Handler, name: str) -> None:
    """Attach a handler, replacing the one a previous call installed."""
    handler.set_name(_HANDLER_PREFIX + name)
    for old in [h for h in root.handlers if h.get_name() == handler.get_name()]:
        root.removeHandler(old)
        old.close()
    root.addHandler(handler)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Route structlog output to a log file and the console.

    Calling this again replaces the handlers of the earlier call instead of
    stacking new ones.

    Args:
        log_file: Log file path; a timestamped file in the working
            directory when None
        console_level: Minimum level shown on the console
        file_level: Minimum level written to the file
        quiet: Show only errors on the console

    Returns:
        Logger bound to the "polykit" name
    """
    if log_file is None:
        log_file = Path(f"polykit_{datetime.now():%Y%m%d_%H%M%S}.log")
    file_threshold = _level(file_level)
    console_threshold = logging.ERROR if quiet else _level(console_level)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(file_threshold)
    to_file.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    _install(root, to_file, "file")

    to_console = logging.StreamHandler()
    to_console.setLevel(console_threshold)
    to_console.setFormatter(logging.Formatter("%(message)s"))
    _install(root, to_console, "console")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("polykit")
    logger.info("Logging initialized", log_file=str(log_file), file_level=file_level)
    return logger


class ProcessingLogger:
    """Logs job events of a batch run and tallies them into its stats."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        stats: ProcessingStats | None = None,
    ) -> None:
        self._logger = logger
        self.stats = stats if stats is not None else ProcessingStats()

    def job_started(self, job_name: str, kind: str) -> None:
        self._logger.debug("Job submitted", job=job_name, kind=kind)

    def job_finished(self, job_name: str, triangles: int, duration_ms: float) -> None:
        self._logger.info(
            "Job processed",
            job=job_name,
            triangles=triangles,
            duration_ms=round(duration_ms, 2),
        )
        self.stats.processed_count += 1
        self.stats.triangles_produced += triangles
        self.stats.job_timings_ms.append(duration_ms)

    def job_skipped(self, job_name: str, reason: str) -> None:
        self._logger.debug("Job skipped", job=job_name, reason=reason)
        self.stats.skipped_count += 1

    def job_failed(self, job_name: str, error: str, error_type: str, traceback: str | None = None) -> None:
        self._logger.error(
            "Job failed",
            job=job_name,
            error=error,
            error_type=error_type,
            traceback=traceback,
        )
        self.stats.error_count += 1
        self.stats.errors.append((job_name, error))
