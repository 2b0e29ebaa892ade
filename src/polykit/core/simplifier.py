"""Douglas-Peucker path simplification.

This module provides the PathSimplifier factory, which reduces a dense
polyline (such as raw touch or mouse input) to a sparse subsequence whose
dropped points all lie within a tolerance of the kept shape.
"""

from collections.abc import Sequence

import structlog

from polykit.core.geometry import EPSILON, point_line_distance
from polykit.domain import Path, Point
from polykit.exceptions import OutputBufferError

logger = structlog.get_logger(__name__)

# Touch coordinates are rarely more precise than a point.
DEFAULT_EPSILON = 1.0


class PathSimplifier:
    """Factory reducing a polyline with the Douglas-Peucker algorithm.

    The factory follows the configure, calculate, extract lifecycle. Input
    data is copied on ``set``; results are only available after
    ``calculate`` and are returned as fresh lists.

    Example:
        simplifier = PathSimplifier(points, epsilon=0.5)
        simplifier.calculate()
        path = simplifier.get_path()
    """

    def __init__(
        self,
        points: Path | Sequence[Point | Sequence[float]] | None = None,
        epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        """Initialize the simplifier.

        Args:
            points: Optional initial polyline
            epsilon: Maximum distance a dropped point may lie from the result
        """
        self._input: list[Point] = []
        self._output: list[int] = []
        self._calculated = False
        self.epsilon = epsilon
        if points is not None:
            self.set(points)

    def set(self, points: Path | Sequence[Point | Sequence[float]]) -> None:
        """Set the polyline to simplify.

        The data is copied. Any previous result is discarded.

        Args:
            points: A Path or a sequence of points / (x, y) pairs
        """
        self.reset()
        source = points.points if isinstance(points, Path) else points
        self._input = [Point.coerce(p) for p in source]

    @property
    def epsilon(self) -> float:
        """Simplification tolerance (same units as the points)."""
        return self._epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        self._epsilon = float(value)
        self.reset()

    @property
    def calculated(self) -> bool:
        """Whether a result is available."""
        return self._calculated

    def reset(self) -> None:
        """Discard the result but keep the input."""
        self._output = []
        self._calculated = False

    def clear(self) -> None:
        """Discard the result and the input."""
        self.reset()
        self._input = []

    def calculate(self) -> None:
        """Simplify the current polyline.

        Does nothing if a result is already available.
        """
        if self._calculated:
            return

        n = len(self._input)
        if n <= 2:
            self._output = self._collapse_short()
        else:
            self._output = self._douglas_peucker(0, n - 1)

        self._calculated = True
        logger.debug(
            "Path simplified",
            input_points=n,
            output_points=len(self._output),
            epsilon=self._epsilon,
        )

    def _collapse_short(self) -> list[int]:
        if not self._input:
            return []
        if len(self._input) == 1 or self._input[0] == self._input[1]:
            return [0]
        return [0, 1]

    def _douglas_peucker(self, first: int, last: int) -> list[int]:
        """Run Douglas-Peucker over the index range [first, last].

        Uses an explicit stack of ranges so that long, nearly collinear
        inputs cannot exhaust the interpreter stack.

        Returns:
            Sorted list of kept indices
        """
        points = self._input
        keep = [False] * len(points)
        keep[first] = True
        keep[last] = True

        stack = [(first, last)]
        while stack:
            start, end = stack.pop()
            if end - start <= 1:
                continue

            sp = points[start]
            ep = points[end]
            if sp.is_close(ep, EPSILON):
                # No direction vector; restart from the first distinct point.
                index = next(
                    (i for i in range(start + 1, end) if not points[i].is_close(sp, EPSILON)),
                    None,
                )
                if index is not None:
                    keep[index] = True
                    stack.append((index, end))
                continue

            d_max = 0.0
            index = start
            for i in range(start + 1, end):
                dist = point_line_distance(points[i], sp, ep)
                if dist > d_max or index == start:
                    d_max = dist
                    index = i

            if d_max > self._epsilon:
                keep[index] = True
                stack.append((index, end))
                stack.append((start, index))

        return [i for i, kept in enumerate(keep) if kept]

    def get_indices(self) -> list[int]:
        """Return the positions of the kept points in the input.

        Returns:
            Increasing list of input indices, empty if not calculated
        """
        if not self._calculated:
            return []
        return list(self._output)

    def get_points(self) -> list[Point]:
        """Return the simplified points.

        The result is an order-preserving subsequence of the input.

        Returns:
            List of kept points, empty if not calculated
        """
        if not self._calculated:
            return []
        return [self._input[i] for i in self._output]

    def append_points(self, buffer: list[Point]) -> int:
        """Append the simplified points to a buffer.

        Args:
            buffer: List to extend

        Returns:
            The number of points added

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        if not self._calculated:
            return 0
        buffer.extend(self._input[i] for i in self._output)
        return len(self._output)

    def get_path(self) -> Path:
        """Return the simplified points as an open path.

        Returns:
            Open Path, empty if not calculated
        """
        return Path(points=self.get_points(), closed=False)

    def append_path(self, buffer: Path) -> Path:
        """Append the simplified points to an existing path.

        Args:
            buffer: Path to extend

        Returns:
            The buffer, for chaining

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        self.append_points(buffer.points)
        return buffer
