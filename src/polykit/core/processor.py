"""Parallel processing orchestration for batch mesh generation.

This module runs the jobs of a job file through the polygon factories in
worker processes using ProcessPoolExecutor. Every worker builds its own
factory instances, so no factory is ever shared between processes.

Key components:
- process_job: Top-level picklable function for parallel execution
- MeshProcessor: Main orchestrator class for job file processing
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from polykit.config import ExtruderConfig, FlattenerConfig, PolykitSettings, SimplifierConfig
from polykit.core.extruder import StrokeExtruder
from polykit.core.flattener import CurveFlattener
from polykit.core.simplifier import PathSimplifier
from polykit.core.triangulator import EarclipTriangulator
from polykit.domain import Job, JobKind, Path as PointPath
from polykit.exceptions import ProcessingCancelledError
from polykit.io import JobReader, ResultWriter
from polykit.utils import ProcessingLogger, ProcessingStats, configure_logging


def _run_simplify(job: Job, settings: PolykitSettings) -> dict[str, Any]:
    config = SimplifierConfig(**{**settings.simplifier.model_dump(), **job.options})
    simplifier = PathSimplifier(job.path, epsilon=config.epsilon)
    simplifier.calculate()
    path = PointPath(points=simplifier.get_points(), closed=job.path.closed)
    return {"path": path.to_dict(), "indices": simplifier.get_indices(), "triangles": 0}


def _run_triangulate(job: Job, settings: PolykitSettings) -> dict[str, Any]:
    triangulator = EarclipTriangulator(job.hull)
    for hole in job.holes:
        triangulator.add_hole(hole)
    triangulator.calculate()
    polygon = triangulator.get_polygon()
    return {"polygon": polygon.to_dict(), "triangles": polygon.triangle_count}


def _run_flatten(job: Job, settings: PolykitSettings) -> dict[str, Any]:
    config = FlattenerConfig(**{**settings.flattener.model_dump(), **job.options})
    flattener = CurveFlattener(job.spline, tolerance=config.tolerance, max_depth=config.max_depth)
    flattener.calculate()
    return {
        "path": flattener.get_path().to_dict(),
        "parameters": flattener.get_parameters(),
        "normals": [[n.x, n.y] for n in flattener.get_normals()],
        "triangles": 0,
    }


def _run_extrude(job: Job, settings: PolykitSettings) -> dict[str, Any]:
    config = ExtruderConfig(**{**settings.extruder.model_dump(), **job.options})
    extruder = StrokeExtruder(job.path, config=config)
    extruder.calculate(job.width)
    polygon = extruder.get_polygon()
    return {
        "polygon": polygon.to_dict(),
        "border": [path.to_dict() for path in extruder.get_border()],
        "triangles": polygon.triangle_count,
    }


_RUNNERS: dict[JobKind, Callable[[Job, PolykitSettings], dict[str, Any]]] = {
    JobKind.SIMPLIFY: _run_simplify,
    JobKind.TRIANGULATE: _run_triangulate,
    JobKind.FLATTEN: _run_flatten,
    JobKind.EXTRUDE: _run_extrude,
}


def process_job(job_dict: dict[str, Any], settings_dict: dict[str, Any]) -> dict[str, Any]:
    """Run a single job through its factory.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes the job and settings, runs the factory, and returns its output.

    Args:
        job_dict: Serialized job (from Job.to_dict())
        settings_dict: Serialized settings (from PolykitSettings.model_dump())

    Returns:
        Dictionary containing either:
        - Success: {"name", "kind", <factory output>, "triangles": int, "duration_ms": float}
        - Error: {"error": str, "error_type": str, "job_name": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        job = Job.from_dict(job_dict)
        settings = PolykitSettings.model_validate(settings_dict)

        output = _RUNNERS[job.kind](job, settings)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "name": job.name,
            "kind": job.kind.value,
            **output,
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        tb = traceback.format_exc()
        return {
            "error": str(e),
            "error_type": type(e).__name__,
            "job_name": job_dict.get("name", "unknown"),
            "traceback": tb,
            "duration_ms": duration_ms,
        }


def _is_empty(job: Job) -> bool:
    """Check whether a job has no input geometry at all."""
    if job.kind in (JobKind.SIMPLIFY, JobKind.EXTRUDE):
        return job.path is None or job.path.is_empty()
    if job.kind == JobKind.TRIANGULATE:
        return job.hull is None or job.hull.is_empty()
    return job.spline is None or job.spline.is_empty()


class MeshProcessor:
    """Orchestrates parallel batch processing of job files.

    Manages the complete workflow:
    1. Load the job file
    2. Skip jobs without input geometry
    3. Run jobs in parallel using worker processes
    4. Collect results and update statistics
    5. Save the result file

    Example:
        settings = PolykitSettings()
        processor = MeshProcessor(settings)
        stats = processor.process(
            jobs_path=Path("shapes.json"),
            output_path=Path("shapes-meshes.json"),
            max_workers=4
        )
    """

    def __init__(self, config: PolykitSettings) -> None:
        """Initialize mesh processor with configuration.

        Args:
            config: Polykit settings containing factory and processing config
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=False,
        )

    def process(
        self,
        jobs_path: Path,
        output_path: Path | None = None,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> ProcessingStats:
        """Process a job file with parallel job execution.

        Args:
            jobs_path: Path to the JSON job file
            output_path: Path for the result file (auto-generated if None)
            max_workers: Maximum worker processes (None = auto-detect)
            progress_callback: Optional callback(completed, total, job_name, success)
                for progress updates; skipped jobs count as completed and successful

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            JobLoadError: If the job file cannot be read
            JobFormatError: If the job file is malformed
            ResultSaveError: If the result file cannot be written
            ProcessingCancelledError: If processing is cancelled by user
        """
        stats = ProcessingStats()
        stats.start_time = time.time()
        log = ProcessingLogger(self.logger, stats)

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        if output_path is None:
            output_path = ResultWriter.get_output_path(jobs_path)

        self.logger.info(
            "Starting job processing",
            input=str(jobs_path),
            output=str(output_path),
            max_workers=max_workers,
        )

        reader = JobReader(jobs_path)
        reader.load()

        self.logger.info("Job file loaded", job_count=reader.job_count)

        all_jobs = list(reader.iter_jobs())
        jobs_to_process: list[Job] = []
        for job in all_jobs:
            if _is_empty(job):
                log.job_skipped(job.name, "no input geometry")
                if progress_callback is not None:
                    progress_callback(stats.skipped_count, len(all_jobs), job.name, True)
                continue
            jobs_to_process.append(job)

        self.logger.info(
            "Filtered jobs",
            total=reader.job_count,
            to_process=len(jobs_to_process),
            skipped=stats.skipped_count,
        )

        results: list[dict[str, Any]] = []
        if jobs_to_process:
            results = self._process_jobs_parallel(
                jobs=jobs_to_process,
                max_workers=max_workers,
                log=log,
                progress_callback=progress_callback,
                completed=stats.skipped_count,
                total=len(all_jobs),
            )
        else:
            self.logger.info("No jobs to process")

        self._save_results(output_path, jobs_to_process, results)

        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            triangles=stats.triangles_produced,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return stats

    def _process_jobs_parallel(
        self,
        jobs: list[Job],
        max_workers: int | None,
        log: ProcessingLogger,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
        completed: int = 0,
        total: int | None = None,
    ) -> list[dict[str, Any]]:
        """Process jobs in parallel using ProcessPoolExecutor.

        Args:
            jobs: List of jobs to process
            max_workers: Maximum worker processes
            log: Event logger holding the run statistics
            progress_callback: Optional callback(completed, total, job_name, success)
                for progress updates
            completed: Jobs already reported to the callback
            total: Job count reported to the callback (defaults to len(jobs))

        Returns:
            Successful job results, in completion order
        """
        results: list[dict[str, Any]] = []
        stats = log.stats

        settings_dict = self.config.model_dump(mode="json")
        tasks = {job.name: job.to_dict() for job in jobs}

        self.logger.info(
            "Starting parallel processing",
            job_count=len(tasks),
            max_workers=max_workers,
        )

        if total is None:
            total = len(tasks)
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for name, job_dict in tasks.items():
                log.job_started(name, job_dict["kind"])
                future = executor.submit(process_job, job_dict, settings_dict)
                pending_futures[future] = name

            try:
                for future in as_completed(pending_futures):
                    job_name = pending_futures.pop(future)
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            log.job_failed(
                                job_name,
                                result["error"],
                                result.get("error_type", "Exception"),
                                traceback=result.get("traceback"),
                            )
                        else:
                            success = True
                            results.append(result)
                            log.job_finished(
                                job_name,
                                triangles=result.get("triangles", 0),
                                duration_ms=result.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error
                        log.job_failed(
                            job_name,
                            str(e),
                            type(e).__name__,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, job_name, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise ProcessingCancelledError(
                    processed_count=stats.processed_count,
                    pending_count=stats.cancelled_count,
                ) from None

        return results

    def _save_results(
        self,
        output_path: Path,
        jobs: list[Job],
        results: list[dict[str, Any]],
    ) -> None:
        """Save successful results in job file order.

        Args:
            output_path: Path to save the result document
            jobs: Jobs that were submitted, in file order
            results: Successful results, in completion order
        """
        by_name = {result["name"]: result for result in results}
        writer = ResultWriter(output_path)
        for job in jobs:
            result = by_name.get(job.name)
            if result is not None:
                writer.add_result(result)

        writer.save()

        self.logger.info(
            "Results saved",
            output=str(output_path),
            results=writer.result_count,
        )
