"""Core geometric types for path representation.

This module defines the fundamental geometric types used throughout polykit:
- Point: An immutable 2D coordinate
- Path: An ordered point sequence with an open/closed flag
- WindingDirection: Enum for path winding direction
"""

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class WindingDirection(Enum):
    """Path winding direction.

    Polykit uses the mathematical (y-up) convention:
    - Outer hulls wind counter-clockwise (positive signed area)
    - Holes wind clockwise (negative signed area)
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def is_close(self, other: "Point", tolerance: float = 1e-9) -> bool:
        """Check whether two points coincide within an absolute tolerance.

        Args:
            other: Point to compare against
            tolerance: Maximum per-axis difference

        Returns:
            True if both coordinates differ by at most tolerance
        """
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))

    @classmethod
    def coerce(cls, value: "Point | Sequence[float]") -> "Point":
        """Build a point from a Point or an (x, y) pair."""
        if isinstance(value, Point):
            return value
        x, y = value
        return cls(float(x), float(y))


@dataclass
class Path:
    """An ordered sequence of points with an open/closed flag.

    Closure is implicit: a closed path does not repeat its first point at
    the end.

    Attributes:
        points: List of points along the path
        closed: Whether the last point connects back to the first
    """

    points: list[Point] = field(default_factory=list)
    closed: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __getitem__(self, index: int) -> Point:
        return self.points[index]

    def is_empty(self) -> bool:
        """Check if the path has no points."""
        return not self.points

    def signed_area(self) -> float:
        """Calculate signed area using shoelace formula.

        The sign of the area indicates winding direction:
        - Positive area: counter-clockwise winding
        - Negative area: clockwise winding

        The path is treated as closed regardless of its flag.

        Returns:
            Signed area of the path
        """
        n = len(self.points)
        if n < 3:
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += self.points[i].x * self.points[j].y
            area -= self.points[j].x * self.points[i].y

        return area / 2.0

    def orientation(self) -> WindingDirection | None:
        """Return the winding direction, or None for a degenerate path."""
        area = self.signed_area()
        if area > 0:
            return WindingDirection.COUNTER_CLOCKWISE
        if area < 0:
            return WindingDirection.CLOCKWISE
        return None

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the path.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def length(self) -> float:
        """Total length of the path, including the closing edge if closed."""
        n = len(self.points)
        if n < 2:
            return 0.0

        total = 0.0
        for i in range(n - 1):
            a, b = self.points[i], self.points[i + 1]
            total += math.hypot(b.x - a.x, b.y - a.y)
        if self.closed:
            a, b = self.points[-1], self.points[0]
            total += math.hypot(b.x - a.x, b.y - a.y)
        return total

    def reversed(self) -> "Path":
        """Return a copy of this path with the traversal order reversed."""
        return Path(points=self.points[::-1], closed=self.closed)

    def copy(self) -> "Path":
        """Return an independent copy of this path."""
        return Path(points=list(self.points), closed=self.closed)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Points are written as [x, y] pairs to keep result files compact.

        Returns:
            Dictionary representation of the path
        """
        return {
            "points": [[p.x, p.y] for p in self.points],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Path":
        """Deserialize from dictionary.

        Accepts points either as [x, y] pairs or as {"x": .., "y": ..} objects.

        Args:
            data: Dictionary representation of a path

        Returns:
            Path instance
        """
        points = [
            Point.from_dict(p) if isinstance(p, dict) else Point.coerce(p)
            for p in data.get("points", [])
        ]
        return cls(points=points, closed=bool(data.get("closed", False)))

    @classmethod
    def from_coordinates(
        cls, coordinates: Iterable["Point | Sequence[float]"], closed: bool = False
    ) -> "Path":
        """Build a path from points or (x, y) pairs."""
        return cls(points=[Point.coerce(c) for c in coordinates], closed=closed)
