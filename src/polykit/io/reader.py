"""Job file reader.

This module provides the JobReader class for loading batch job files and
turning them into Job domain models.
"""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from polykit.domain.job import Job
from polykit.exceptions import JobFormatError, JobLoadError, SplineError


class JobReader:
    """Loads JSON job files.

    A job file is an object with a ``jobs`` list; each entry names a factory
    kind and carries its input geometry:

        {"jobs": [{"name": "ring", "kind": "extrude",
                   "path": {"points": [[0, 0], [10, 0]], "closed": false},
                   "width": 2, "options": {"joint": "round"}}]}

    Example:
        reader = JobReader(Path("shapes.json"))
        reader.load()
        for job in reader.iter_jobs():
            print(job.name)
    """

    def __init__(self, jobs_path: Path) -> None:
        """Initialize the job reader.

        Args:
            jobs_path: Path to the JSON job file
        """
        self._jobs_path = jobs_path
        self._jobs: list[Job] | None = None

    def load(self) -> None:
        """Load and validate the job file.

        Raises:
            JobLoadError: If the file is missing or not valid JSON
            JobFormatError: If the JSON does not describe valid jobs
        """
        if not self._jobs_path.exists():
            raise JobLoadError(str(self._jobs_path), "file not found")

        try:
            with self._jobs_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise JobLoadError(str(self._jobs_path), str(e)) from e
        except json.JSONDecodeError as e:
            raise JobLoadError(str(self._jobs_path), f"invalid JSON: {e}") from e

        self._jobs = self._parse(data)

    def _parse(self, data: Any) -> list[Job]:
        path = str(self._jobs_path)
        if not isinstance(data, dict) or not isinstance(data.get("jobs"), list):
            raise JobFormatError(path, "expected an object with a 'jobs' list")

        jobs: list[Job] = []
        names: set[str] = set()
        for position, entry in enumerate(data["jobs"]):
            if not isinstance(entry, dict):
                raise JobFormatError(path, f"job #{position} is not an object")
            try:
                job = Job.from_dict(entry)
            except KeyError as e:
                raise JobFormatError(path, f"job #{position} is missing {e}") from e
            except (AttributeError, TypeError, ValueError, SplineError) as e:
                raise JobFormatError(path, f"job #{position}: {e}") from e

            if job.name in names:
                raise JobFormatError(path, f"duplicate job name '{job.name}'")
            names.add(job.name)
            jobs.append(job)

        return jobs

    @property
    def job_count(self) -> int:
        """Return the number of jobs in the file.

        Raises:
            RuntimeError: If the file has not been loaded yet
        """
        if self._jobs is None:
            raise RuntimeError("Job file not loaded. Call load() first.")
        return len(self._jobs)

    def iter_jobs(self) -> Iterator[Job]:
        """Iterate over the jobs in file order.

        Raises:
            RuntimeError: If the file has not been loaded yet
        """
        if self._jobs is None:
            raise RuntimeError("Job file not loaded. Call load() first.")
        yield from self._jobs

    def get_job(self, name: str) -> Job | None:
        """Get a specific job by name.

        Args:
            name: Name of the job to retrieve

        Returns:
            Job, or None if no job has that name
        """
        return next((job for job in self.iter_jobs() if job.name == name), None)

    def __enter__(self) -> "JobReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self._jobs = None
