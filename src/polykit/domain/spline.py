"""Piecewise cubic Bezier spline.

A spline of n segments stores 3n + 1 control points laid out as

    anchor0, right0, left1, anchor1, right1, left2, anchor2, ...

so segment i is defined by points[3i : 3i + 4]. A closed spline ends with an
anchor equal to its first anchor.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from polykit.domain.path import Point
from polykit.exceptions import SplineError


@dataclass
class CubicSpline:
    """A sequence of cubic Bezier segments sharing end anchors.

    Attributes:
        points: Control points (3n + 1 for n segments)
        closed: Whether the spline describes a closed curve
    """

    points: list[Point] = field(default_factory=list)
    closed: bool = False

    def __post_init__(self) -> None:
        if self.points and len(self.points) % 3 != 1:
            raise SplineError(
                f"Expected 3n+1 control points for a cubic spline, got {len(self.points)}"
            )

    @property
    def segment_count(self) -> int:
        """Number of cubic segments."""
        if not self.points:
            return 0
        return (len(self.points) - 1) // 3

    def is_empty(self) -> bool:
        """Check if the spline has no control points."""
        return not self.points

    def anchor(self, index: int) -> Point:
        """Return the anchor point at the given anchor index."""
        if index < 0 or index > self.segment_count:
            raise SplineError(f"Anchor index {index} out of range")
        return self.points[3 * index]

    def anchors(self) -> list[Point]:
        """Return all anchor points in order."""
        return self.points[::3]

    def segment(self, index: int) -> tuple[Point, Point, Point, Point]:
        """Return the four control points of a segment."""
        if index < 0 or index >= self.segment_count:
            raise SplineError(f"Segment index {index} out of range")
        p0, p1, p2, p3 = self.points[3 * index : 3 * index + 4]
        return p0, p1, p2, p3

    def get_point(self, segment: int, t: float) -> Point:
        """Evaluate a segment at parameter t in [0, 1].

        Args:
            segment: Segment index
            t: Local curve parameter

        Returns:
            Point on the curve
        """
        p0, p1, p2, p3 = self.segment(segment)
        s = 1.0 - t
        b0 = s * s * s
        b1 = 3.0 * s * s * t
        b2 = 3.0 * s * t * t
        b3 = t * t * t
        return Point(
            b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x,
            b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y,
        )

    def copy(self) -> "CubicSpline":
        """Return an independent copy of this spline."""
        return CubicSpline(points=list(self.points), closed=self.closed)

    @classmethod
    def line(cls, start: Point, end: Point) -> "CubicSpline":
        """Create a single straight segment with degenerate tangents."""
        return cls(points=[start, start, end, end], closed=False)

    @classmethod
    def from_coordinates(
        cls, coordinates: Sequence[Point | Sequence[float]], closed: bool = False
    ) -> "CubicSpline":
        """Build a spline from points or (x, y) pairs."""
        return cls(points=[Point.coerce(c) for c in coordinates], closed=closed)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with control points as [x, y] pairs
        """
        return {
            "points": [[p.x, p.y] for p in self.points],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CubicSpline":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a spline

        Returns:
            CubicSpline instance

        Raises:
            SplineError: If the control point count is not 3n+1
        """
        return cls.from_coordinates(
            [Point.from_dict(p) if isinstance(p, dict) else p for p in data.get("points", [])],
            closed=bool(data.get("closed", False)),
        )
