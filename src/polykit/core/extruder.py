"""Stroke extrusion: turning a centerline into a filled outline mesh.

This module provides the StrokeExtruder factory. The centerline is snapped
to an integer grid and offset by half the stroke width with Clipper, which
handles joints, caps and self-overlap. The resulting contour tree is
re-triangulated with EarclipTriangulator, one exterior (with its holes) at a
time, into a single mesh.
"""

from collections.abc import Sequence

import pyclipper
import structlog

from polykit.config import EndCap, ExtruderConfig, Joint
from polykit.core.geometry import signed_area
from polykit.core.triangulator import EarclipTriangulator
from polykit.domain import Path, Point, Polygon
from polykit.exceptions import OutputBufferError

logger = structlog.get_logger(__name__)

_JOIN_TYPES = {
    Joint.MITER: pyclipper.JT_MITER,
    Joint.SQUARE: pyclipper.JT_SQUARE,
    Joint.ROUND: pyclipper.JT_ROUND,
}

_END_TYPES = {
    EndCap.BUTT: pyclipper.ET_OPENBUTT,
    EndCap.SQUARE: pyclipper.ET_OPENSQUARE,
    EndCap.ROUND: pyclipper.ET_OPENROUND,
}


class StrokeExtruder:
    """Factory thickening a path into a filled stroke mesh.

    Geometry parameters (joint, end cap, miter limit, grid resolution, arc
    tolerance) come from an ExtruderConfig and can be changed through
    properties; every change discards the current result. The stroke width
    is passed to ``calculate``.

    Example:
        extruder = StrokeExtruder(points, closed=True)
        extruder.joint = Joint.ROUND
        extruder.calculate(2.0)
        mesh = extruder.get_polygon()
        outlines = extruder.get_border()
    """

    def __init__(
        self,
        points: Path | Sequence[Point | Sequence[float]] | None = None,
        closed: bool = False,
        config: ExtruderConfig | None = None,
    ) -> None:
        """Initialize the extruder.

        Args:
            points: Optional centerline
            closed: Whether the centerline is closed (ignored for a Path)
            config: Extrusion parameters (defaults if None)
        """
        config = config or ExtruderConfig()
        self._joint = config.joint
        self._end_cap = config.end_cap
        self._miter_limit = config.miter_limit
        self._resolution = config.resolution
        self._arc_tolerance = config.arc_tolerance

        self._input: list[Point] = []
        self._closed = False
        self._polygon = Polygon()
        self._border: list[Path] = []
        self._calculated = False
        if points is not None:
            self.set(points, closed)

    # ------------------------------------------------------------------
    # Initialization

    def set(self, points: Path | Sequence[Point | Sequence[float]], closed: bool = False) -> None:
        """Set the centerline.

        The data is copied. Any previous result is discarded.

        Args:
            points: A Path or a sequence of points / (x, y) pairs
            closed: Whether the centerline is closed; a Path uses its own flag
        """
        self.reset()
        if isinstance(points, Path):
            self._input = list(points.points)
            self._closed = points.closed
        else:
            self._input = [Point.coerce(p) for p in points]
            self._closed = closed

    def set_polygon(self, polygon: Polygon) -> None:
        """Use the outer boundary of a mesh as a closed centerline.

        The counter-clockwise boundary loop of largest area is used; an
        empty or degenerate mesh leaves the extruder without input.

        Args:
            polygon: Mesh whose outline should be stroked
        """
        self.clear()
        loops = [[polygon.vertices[i] for i in loop] for loop in polygon.boundaries()]
        outers = [loop for loop in loops if signed_area(loop) > 0]
        if outers:
            self.set(Path(points=max(outers, key=signed_area), closed=True))

    @property
    def joint(self) -> Joint:
        """Joint shape at interior vertices."""
        return self._joint

    @joint.setter
    def joint(self, value: Joint | str) -> None:
        self._joint = Joint(value)
        self.reset()

    @property
    def end_cap(self) -> EndCap:
        """Cap shape at the ends of an open centerline."""
        return self._end_cap

    @end_cap.setter
    def end_cap(self, value: EndCap | str) -> None:
        self._end_cap = EndCap(value)
        self.reset()

    @property
    def miter_limit(self) -> float:
        """Maximum miter length as a multiple of the stroke width."""
        return self._miter_limit

    @miter_limit.setter
    def miter_limit(self, value: float) -> None:
        self._miter_limit = float(value)
        self.reset()

    @property
    def resolution(self) -> int:
        """Grid subdivisions per unit."""
        return self._resolution

    @resolution.setter
    def resolution(self, value: int) -> None:
        self._resolution = max(1, int(value))
        self.reset()

    @property
    def arc_tolerance(self) -> float:
        """Maximum deviation of round joints and caps from a true arc."""
        return self._arc_tolerance

    @arc_tolerance.setter
    def arc_tolerance(self, value: float) -> None:
        self._arc_tolerance = float(value)
        self.reset()

    @property
    def closed(self) -> bool:
        """Whether the centerline is closed."""
        return self._closed

    @property
    def calculated(self) -> bool:
        """Whether a result is available."""
        return self._calculated

    def reset(self) -> None:
        """Discard the result but keep the centerline."""
        self._polygon = Polygon()
        self._border = []
        self._calculated = False

    def clear(self) -> None:
        """Discard the result and the centerline."""
        self.reset()
        self._input = []
        self._closed = False

    # ------------------------------------------------------------------
    # Calculation

    def calculate(self, width: float) -> None:
        """Extrude the centerline to the given stroke width.

        Does nothing if a result is already available. A non-positive width
        or a centerline without length gives an empty result.

        Args:
            width: Stroke width
        """
        if self._calculated:
            return

        self._calculated = True
        scale = self._resolution
        grid = [(round(p.x * scale), round(p.y * scale)) for p in self._input]
        if width <= 0 or len(set(grid)) < 2:
            logger.debug("Nothing to extrude", width=width, points=len(self._input))
            return

        # Clipper measures the miter limit in multiples of the offset delta,
        # which is half the stroke width.
        offset = pyclipper.PyclipperOffset(2.0 * self._miter_limit, self._arc_tolerance * scale)
        end_type = pyclipper.ET_CLOSEDLINE if self._closed else _END_TYPES[self._end_cap]
        offset.AddPath(grid, _JOIN_TYPES[self._joint], end_type)
        tree = offset.Execute2(width / 2.0 * scale)

        for node in tree.Childs:
            self._emit(node)

        logger.debug(
            "Stroke extruded",
            width=width,
            joint=self._joint.value,
            end_cap=self._end_cap.value,
            contours=len(self._border),
            triangles=self._polygon.triangle_count,
        )

    def _emit(self, node: "pyclipper.PyPolyNode") -> None:
        """Triangulate an exterior contour with its holes, then its islands."""
        scale = float(self._resolution)
        hull = self._contour(node.Contour, scale, outer=True)
        holes = [self._contour(child.Contour, scale, outer=False) for child in node.Childs]

        triangulator = EarclipTriangulator(hull)
        for hole in holes:
            triangulator.add_hole(hole)
        triangulator.calculate()
        triangulator.append_polygon(self._polygon)

        self._border.append(hull)
        self._border.extend(holes)

        for child in node.Childs:
            for island in child.Childs:
                self._emit(island)

    @staticmethod
    def _contour(contour: list[list[int]], scale: float, outer: bool) -> Path:
        """Convert a grid contour back to a path wound by its role."""
        path = Path(points=[Point(x / scale, y / scale) for x, y in contour], closed=True)
        area = path.signed_area()
        if (outer and area < 0) or (not outer and area > 0):
            return path.reversed()
        return path

    # ------------------------------------------------------------------
    # Materialization

    def get_polygon(self) -> Polygon:
        """Return the stroke mesh.

        Returns:
            Polygon, empty if not calculated
        """
        if not self._calculated:
            return Polygon()
        return self._polygon.copy()

    def append_polygon(self, buffer: Polygon) -> Polygon:
        """Append the stroke mesh to an existing mesh.

        Indices are offset by the number of vertices already in the buffer.

        Args:
            buffer: Mesh to extend

        Returns:
            The buffer, for chaining

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        if self._calculated:
            buffer.append(self._polygon)
        return buffer

    def get_border(self) -> list[Path]:
        """Return the outline contours of the stroke.

        Each exterior contour (counter-clockwise) is followed by its holes
        (clockwise).

        Returns:
            List of closed paths, empty if not calculated
        """
        if not self._calculated:
            return []
        return [path.copy() for path in self._border]

    def append_border(self, buffer: list[Path]) -> int:
        """Append the outline contours to a buffer.

        Args:
            buffer: List to extend

        Returns:
            The number of contours added

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        if not self._calculated:
            return 0
        buffer.extend(path.copy() for path in self._border)
        return len(self._border)
