"""Adaptive flattening of cubic Bezier splines.

This module provides the CurveFlattener factory, which turns a CubicSpline
into a polyline by de Casteljau subdivision. Alongside the polyline it keeps
the refined control polygon, so callers can recover the curve parameter,
tangents and normals of every emitted point and draw editing handles.
"""

import math

import structlog

from polykit.core._bezier import Cubic, flatness, split_cubic
from polykit.core.geometry import EPSILON, perpendicular_direction
from polykit.domain import CubicSpline, Path, Point, Polygon
from polykit.exceptions import OutputBufferError

logger = structlog.get_logger(__name__)

DEFAULT_FLATNESS = 0.5
MAX_DEPTH = 8


class CurveFlattener:
    """Factory approximating a cubic spline by a polyline.

    Each segment is halved at t=0.5 until both of its inner control points
    lie within ``tolerance`` of the chord, or until ``max_depth`` halvings
    have been made. The depth cap guarantees termination for any
    tolerance and any (including degenerate) control polygon.

    The spline is copied on ``set``, so a flattener may be handed to a
    worker while the caller keeps editing its own spline.

    Example:
        flattener = CurveFlattener(spline, tolerance=0.25)
        flattener.calculate()
        path = flattener.get_path()
        normals = flattener.get_normals()
    """

    def __init__(
        self,
        spline: CubicSpline | None = None,
        tolerance: float = DEFAULT_FLATNESS,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize the flattener.

        Args:
            spline: Optional spline to flatten
            tolerance: Flatness tolerance (absolute distance)
            max_depth: Maximum number of halvings per segment
        """
        self._spline: CubicSpline | None = None
        self._points: list[Point] = []
        self._params: list[float] = []
        self._anchors: set[int] = set()
        self._closed = False
        self._calculated = False
        self.tolerance = tolerance
        self.max_depth = max_depth
        if spline is not None:
            self.set(spline)

    def set(self, spline: CubicSpline) -> None:
        """Set the spline to flatten.

        The spline is copied. Any previous result is discarded.

        Args:
            spline: Spline to flatten
        """
        self.reset()
        self._spline = spline.copy()

    @property
    def tolerance(self) -> float:
        """Flatness tolerance."""
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: float) -> None:
        self._tolerance = float(value)
        self.reset()

    @property
    def max_depth(self) -> int:
        """Maximum subdivision depth per segment."""
        return self._max_depth

    @max_depth.setter
    def max_depth(self, value: int) -> None:
        self._max_depth = max(0, int(value))
        self.reset()

    @property
    def calculated(self) -> bool:
        """Whether a result is available."""
        return self._calculated

    def reset(self) -> None:
        """Discard the result but keep the spline."""
        self._points = []
        self._params = []
        self._anchors = set()
        self._closed = False
        self._calculated = False

    def clear(self) -> None:
        """Discard the result and the spline."""
        self.reset()
        self._spline = None

    def calculate(self) -> None:
        """Flatten the current spline.

        Does nothing if a result is already available.
        """
        if self._calculated:
            return

        spline = self._spline
        if spline is not None and not spline.is_empty():
            self._closed = spline.closed
            for segment in range(spline.segment_count):
                self._generate(segment, spline.segment(segment))

            self._anchors.add(len(self._points))
            self._points.append(spline.points[-1])
            self._params.append(float(spline.segment_count))

        self._calculated = True
        logger.debug(
            "Spline flattened",
            segments=spline.segment_count if spline is not None else 0,
            anchors=len(self._anchors),
            tolerance=self._tolerance,
        )

    def _generate(self, segment: int, cubic: Cubic) -> None:
        """Subdivide one segment, emitting its flat pieces left to right.

        Each flat piece contributes its start anchor and its two tangent
        helpers; the end anchor is emitted by the following piece.
        """
        stack: list[tuple[Cubic, float, float, int]] = [(cubic, 0.0, 1.0, 0)]
        while stack:
            piece, t0, t1, depth = stack.pop()
            if depth >= self._max_depth or flatness(piece) <= self._tolerance:
                self._anchors.add(len(self._points))
                self._points.extend(piece[:3])
                self._params.append(segment + t0)
                continue

            left, right = split_cubic(piece)
            tm = (t0 + t1) / 2
            stack.append((right, tm, t1, depth + 1))
            stack.append((left, t0, tm, depth + 1))

    # ------------------------------------------------------------------
    # Materialization

    def _anchor_count(self) -> int:
        """Number of anchors exposed to callers.

        A closed curve repeats its first anchor at the end of the refined
        control list; that duplicate is not reported.
        """
        count = len(self._params)
        if self._closed and count > 1 and self._points[0].is_close(self._points[-1], EPSILON):
            count -= 1
        return count

    def is_anchor(self, pos: int) -> bool:
        """Check whether a position in the refined control list is an anchor.

        Args:
            pos: Position in the list returned by ``get_refinement``

        Returns:
            True if the point lies on the curve rather than being a tangent helper
        """
        return pos in self._anchors

    def get_path(self) -> Path:
        """Return the polyline approximating the spline.

        Returns:
            Path through the anchors, closed if the spline is closed; empty
            if not calculated
        """
        if not self._calculated:
            return Path()
        count = self._anchor_count()
        return Path(points=self._points[: 3 * (count - 1) + 1 : 3] if count else [], closed=self._closed)

    def append_path(self, buffer: Path) -> Path:
        """Append the polyline to an existing path.

        Args:
            buffer: Path to extend

        Returns:
            The buffer, for chaining

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        if self._calculated:
            buffer.points.extend(self.get_path().points)
        return buffer

    def get_parameters(self) -> list[float]:
        """Return the spline parameter of every polyline point.

        Parameters are global: the integer part is the segment index and
        the fractional part the local curve parameter.

        Returns:
            One parameter per point of ``get_path``
        """
        if not self._calculated:
            return []
        return self._params[: self._anchor_count()]

    def get_tangents(self) -> list[Point]:
        """Return the tangent vectors of the refined control polygon.

        Tangents are in control point order: the right tangent of the first
        anchor, the left tangent of the second, its right tangent, and so
        on. For n anchors (counting the closing anchor of a closed curve)
        there are 2(n - 1) tangents.

        Returns:
            Tangent vectors as points, empty if not calculated
        """
        if not self._calculated:
            return []
        tangents: list[Point] = []
        pts = self._points
        for start in range(0, len(pts) - 1, 3):
            a0, r, l, a1 = pts[start : start + 4]
            tangents.append(Point(r.x - a0.x, r.y - a0.y))
            tangents.append(Point(l.x - a1.x, l.y - a1.y))
        return tangents

    def get_normals(self) -> list[Point]:
        """Return a unit normal for every polyline point.

        Normals are the counter-clockwise perpendicular of the direction of
        travel: the right tangent of each anchor, or for the final anchor
        of an open curve its incoming left tangent. Degenerate tangents
        fall back to the chord of the adjacent piece.

        Returns:
            One normal per point of ``get_path``
        """
        if not self._calculated:
            return []

        pts = self._points
        last = len(pts) - 1
        normals: list[Point] = []
        for k in range(self._anchor_count()):
            pos = 3 * k
            if pos < last:
                candidates = [(pts[pos], pts[pos + 1]), (pts[pos], pts[pos + 3])]
            elif pos >= 3:
                candidates = [(pts[pos - 1], pts[pos]), (pts[pos - 3], pts[pos])]
            else:
                candidates = []
            normals.append(_normal(candidates))
        return normals

    def get_anchors(self, radius: float, segments: int = 4) -> Polygon:
        """Return disc markers for the polyline points.

        Args:
            radius: Radius of each marker
            segments: Number of rim vertices per marker (at least 3)

        Returns:
            Mesh with one triangle fan per anchor, empty if not calculated
        """
        if not self._calculated:
            return Polygon()
        mesh = Polygon()
        for center in self.get_path().points:
            mesh.append(_disc(center, radius, segments))
        return mesh

    def get_handles(self, radius: float, segments: int = 4) -> Polygon:
        """Return disc markers for the tangent helper points.

        Args:
            radius: Radius of each marker
            segments: Number of rim vertices per marker (at least 3)

        Returns:
            Mesh with one triangle fan per tangent point, empty if not calculated
        """
        if not self._calculated:
            return Polygon()
        mesh = Polygon()
        for pos, point in enumerate(self._points):
            if pos not in self._anchors:
                mesh.append(_disc(point, radius, segments))
        return mesh

    def get_refinement(self) -> CubicSpline:
        """Return the subdivided control points as a new spline.

        The refinement traces the same curve as the input, with one segment
        per flat piece.

        Returns:
            CubicSpline, empty if not calculated
        """
        if not self._calculated:
            return CubicSpline()
        return CubicSpline(points=list(self._points), closed=self._closed)


def _normal(candidates: list[tuple[Point, Point]]) -> Point:
    for start, end in candidates:
        try:
            px, py = perpendicular_direction(start, end)
        except ValueError:
            continue
        return Point(px, py)
    return Point(0.0, 0.0)


def _disc(center: Point, radius: float, segments: int) -> Polygon:
    """Triangle fan approximating a disc, counter-clockwise."""
    segments = max(3, segments)
    vertices = [center]
    for i in range(segments):
        angle = 2 * math.pi * i / segments
        vertices.append(Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle)))
    indices: list[int] = []
    for i in range(segments):
        indices.extend((0, 1 + i, 1 + (i + 1) % segments))
    return Polygon(vertices=vertices, indices=indices)
