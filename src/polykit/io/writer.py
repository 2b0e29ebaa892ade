"""Result writer for batch runs.

This module provides the ResultWriter class, which collects per-job factory
output and saves it as a single JSON document.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from polykit import __version__
from polykit.exceptions import ResultSaveError


class ResultWriter:
    """Writes batch results as JSON.

    Results are kept in insertion order; adding a result for a job name that
    already has one replaces it.

    Example:
        writer = ResultWriter(Path("shapes-meshes.json"))
        writer.add_result({"name": "ring", "kind": "extrude", "polygon": {...}})
        writer.save()
    """

    def __init__(self, output_path: Path) -> None:
        """Initialize the result writer.

        Args:
            output_path: Path where the results will be saved
        """
        self._output_path = output_path
        self._results: dict[str, dict[str, Any]] = {}

    @property
    def result_count(self) -> int:
        """Number of results collected so far."""
        return len(self._results)

    def add_result(self, result: dict[str, Any]) -> None:
        """Add the output of one job.

        Args:
            result: Job result (must carry the job ``name``)

        Raises:
            ValueError: If the result has no name
        """
        name = result.get("name")
        if not name:
            raise ValueError("Result has no job name")
        self._results[name] = result

    def save(self) -> None:
        """Save the collected results to the output path.

        Raises:
            ResultSaveError: If the file cannot be written
        """
        document = {
            "generator": f"polykit {__version__}",
            "created": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
            "results": list(self._results.values()),
        }
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            with self._output_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise ResultSaveError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_output_path(input_path: Path) -> Path:
        """Generate the default result path for a job file.

        Converts: shapes.json -> shapes-meshes.json

        Args:
            input_path: Job file path

        Returns:
            Path with -meshes suffix before the .json extension
        """
        return input_path.parent / f"{input_path.stem}-meshes.json"
