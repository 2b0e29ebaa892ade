"""Batch job descriptors.

A job names one factory run: the factory kind, its input geometry and any
per-job option overrides for that factory's configuration section.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from polykit.domain.path import Path
from polykit.domain.spline import CubicSpline


class JobKind(str, Enum):
    """Factory a job runs through."""

    SIMPLIFY = "simplify"
    TRIANGULATE = "triangulate"
    FLATTEN = "flatten"
    EXTRUDE = "extrude"


@dataclass
class Job:
    """A single factory run.

    Attributes:
        name: Job identifier, unique within a job file
        kind: Which factory to run
        path: Input path (simplify, extrude)
        hull: Outer hull (triangulate)
        holes: Holes inside the hull (triangulate)
        spline: Input curve (flatten)
        width: Stroke width (extrude)
        options: Overrides for the factory's configuration section
    """

    name: str
    kind: JobKind
    path: Path | None = None
    hull: Path | None = None
    holes: list[Path] = field(default_factory=list)
    spline: CubicSpline | None = None
    width: float = 0.0
    options: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Check that the job carries the geometry its kind needs.

        Raises:
            ValueError: If required geometry is missing
        """
        if self.kind in (JobKind.SIMPLIFY, JobKind.EXTRUDE) and self.path is None:
            raise ValueError(f"job '{self.name}' ({self.kind.value}) requires a path")
        if self.kind == JobKind.TRIANGULATE and self.hull is None:
            raise ValueError(f"job '{self.name}' (triangulate) requires a hull")
        if self.kind == JobKind.FLATTEN and self.spline is None:
            raise ValueError(f"job '{self.name}' (flatten) requires a spline")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the job
        """
        data: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.path is not None:
            data["path"] = self.path.to_dict()
        if self.hull is not None:
            data["hull"] = self.hull.to_dict()
        if self.holes:
            data["holes"] = [h.to_dict() for h in self.holes]
        if self.spline is not None:
            data["spline"] = self.spline.to_dict()
        if self.kind == JobKind.EXTRUDE:
            data["width"] = self.width
        if self.options:
            data["options"] = dict(self.options)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a job

        Returns:
            Job instance

        Raises:
            KeyError: If name or kind is missing
            ValueError: If kind is unknown or geometry is missing
        """
        job = cls(
            name=str(data["name"]),
            kind=JobKind(data["kind"]),
            path=Path.from_dict(data["path"]) if "path" in data else None,
            hull=Path.from_dict(data["hull"]) if "hull" in data else None,
            holes=[Path.from_dict(h) for h in data.get("holes", [])],
            spline=CubicSpline.from_dict(data["spline"]) if "spline" in data else None,
            width=float(data.get("width", 0.0)),
            options=dict(data.get("options", {})),
        )
        job.validate()
        return job
