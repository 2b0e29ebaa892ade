"""Generators for common outlines and mesh wireframes.

ShapeFactory builds the paths the other factories consume: lines,
triangles, rectangles, regular polygons, ellipses, arcs, rounded rectangles
and capsules. Curved shapes get just enough chords to stay within the
factory tolerance of the true curve. Every closed outline is
counter-clockwise.

The factory also goes the other way: ``fill`` triangulates an outline and
``make_traversal`` turns a triangle mesh back into wireframe paths.
"""

import math

import structlog

from polykit.config import Capsule, Traversal
from polykit.core.triangulator import EarclipTriangulator
from polykit.domain import Path, Point, Polygon
from polykit.exceptions import GeometryError

logger = structlog.get_logger(__name__)


def curve_segments(radius: float, arc: float, tolerance: float) -> int:
    """Number of chords needed to approximate a circular arc.

    Each chord spans at most 2 * acos(r / (r + tolerance)) radians, which
    keeps its distance from the arc below tolerance.

    Args:
        radius: Arc radius
        arc: Swept angle in radians (sign is ignored)
        tolerance: Maximum distance between chord and arc

    Returns:
        Chord count, at least 2
    """
    if radius <= 0 or arc == 0:
        return 2
    step = 2.0 * math.acos(radius / (radius + tolerance))
    return max(2, math.ceil(abs(arc) / step))


def _half_turn(segments: int, sweep: float) -> list[tuple[float, float]]:
    """Unit (cos, sin) pairs over [0, sweep] with exact end points."""
    step = sweep / segments
    units = [(math.cos(k * step), math.sin(k * step)) for k in range(segments + 1)]
    units[0] = (1.0, 0.0)
    if sweep == math.pi:
        units[-1] = (-1.0, 0.0)
    elif sweep == math.pi / 2:
        units[-1] = (0.0, 1.0)
    return units


def _dedupe(points: list[Point]) -> list[Point]:
    """Drop consecutive repeats, including the wrap from last to first."""
    result: list[Point] = []
    for p in points:
        if not result or p != result[-1]:
            result.append(p)
    while len(result) > 1 and result[-1] == result[0]:
        result.pop()
    return result


class ShapeFactory:
    """Factory for common outlines.

    Example:
        shapes = ShapeFactory(tolerance=0.25)
        outline = shapes.make_rounded_rect(0, 0, 40, 20, 5)
        mesh = shapes.fill(outline)
        wires = shapes.make_traversal(mesh, Traversal.INTERIOR)
    """

    def __init__(self, tolerance: float = 0.5) -> None:
        """Initialize the factory.

        Args:
            tolerance: Maximum distance between curved shapes and their chords
        """
        self.tolerance = tolerance

    @property
    def tolerance(self) -> float:
        """Curve tolerance for ellipses, arcs, rounded rectangles and capsules."""
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: float) -> None:
        if value <= 0:
            raise GeometryError(f"Curve tolerance must be positive, got {value}")
        self._tolerance = float(value)

    # ------------------------------------------------------------------
    # Straight shapes

    def make_line(self, start: Point, end: Point) -> Path:
        """Return an open path from start to end."""
        return Path(points=[Point.coerce(start), Point.coerce(end)], closed=False)

    def make_triangle(self, a: Point, b: Point, c: Point) -> Path:
        """Return a closed triangle with the corners in the given order."""
        return Path(points=[Point.coerce(a), Point.coerce(b), Point.coerce(c)], closed=True)

    def make_rect(self, x: float, y: float, width: float, height: float) -> Path:
        """Return a rectangle with its bottom left corner at (x, y)."""
        return Path(
            points=[
                Point(x, y),
                Point(x + width, y),
                Point(x + width, y + height),
                Point(x, y + height),
            ],
            closed=True,
        )

    def make_ngon(self, cx: float, cy: float, radius: float, sides: int) -> Path:
        """Return a regular polygon with its first vertex on the +x axis.

        Raises:
            GeometryError: If sides is less than 3
        """
        if sides < 3:
            raise GeometryError(f"A regular polygon needs at least 3 sides, got {sides}")
        step = 2.0 * math.pi / sides
        return Path(
            points=[
                Point(cx + radius * math.cos(k * step), cy + radius * math.sin(k * step))
                for k in range(sides)
            ],
            closed=True,
        )

    # ------------------------------------------------------------------
    # Rounded shapes

    def make_ellipse(self, cx: float, cy: float, width: float, height: float) -> Path:
        """Return an ellipse with the given diameters along x and y."""
        rx = width / 2.0
        ry = height / 2.0
        segments = max(3, curve_segments(max(rx, ry), 2.0 * math.pi, self._tolerance))
        step = 2.0 * math.pi / segments
        return Path(
            points=[
                Point(cx + rx * math.cos(k * step), cy + ry * math.sin(k * step))
                for k in range(segments)
            ],
            closed=True,
        )

    def make_circle(self, cx: float, cy: float, radius: float) -> Path:
        """Return a circle."""
        return self.make_ellipse(cx, cy, 2.0 * radius, 2.0 * radius)

    def make_arc(self, cx: float, cy: float, radius: float, start: float, degrees: float) -> Path:
        """Return an open arc.

        Angles are in degrees, counter-clockwise from the +x axis; a negative
        sweep runs clockwise. There is never more than one chord per degree.

        Args:
            cx: Center x
            cy: Center y
            radius: Arc radius
            start: Start angle in degrees
            degrees: Swept angle in degrees
        """
        sweep = math.radians(degrees)
        segments = curve_segments(radius, sweep, self._tolerance)
        segments = max(1, min(segments, int(abs(degrees))))
        first = math.radians(start)
        step = sweep / segments
        return Path(
            points=[
                Point(
                    cx + radius * math.cos(first + k * step),
                    cy + radius * math.sin(first + k * step),
                )
                for k in range(segments + 1)
            ],
            closed=False,
        )

    def make_rounded_rect(
        self, x: float, y: float, width: float, height: float, radius: float
    ) -> Path:
        """Return a rectangle with quarter-circle corners.

        Raises:
            GeometryError: If the radius is negative or exceeds half the
                width or height
        """
        if radius < 0 or radius > width / 2.0 or radius > height / 2.0:
            raise GeometryError(
                f"Corner radius {radius} does not fit a {width}x{height} rectangle"
            )
        if radius == 0:
            return self.make_rect(x, y, width, height)

        segments = curve_segments(radius, math.pi / 2.0, self._tolerance)
        quarter = _half_turn(segments, math.pi / 2.0)
        left = x + radius
        right = x + width - radius
        bottom = y + radius
        top = y + height - radius

        points = [Point(right + radius * c, top + radius * s) for c, s in quarter]
        points += [Point(left - radius * s, top + radius * c) for c, s in quarter]
        points += [Point(left - radius * c, bottom - radius * s) for c, s in quarter]
        points += [Point(right + radius * s, bottom - radius * c) for c, s in quarter]
        return Path(points=_dedupe(points), closed=True)

    def make_capsule(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        shape: Capsule | str = Capsule.FULL,
    ) -> Path:
        """Return a capsule fitting the given bounding box.

        The capsule lies along the longer side of the box. A half capsule
        keeps only one rounded end and is cut flat where the other end would
        start, so it is shorter than the box by one radius.

        Args:
            x: Bounding box left
            y: Bounding box bottom
            width: Bounding box width
            height: Bounding box height
            shape: Which ends are rounded
        """
        shape = Capsule(shape)
        if shape is Capsule.DEGENERATE:
            return self.make_ellipse(x + width / 2.0, y + height / 2.0, width, height)
        if width == height:
            return self.make_circle(x + width / 2.0, y + height / 2.0, width / 2.0)

        radius = min(width, height) / 2.0
        half = _half_turn(curve_segments(radius, math.pi, self._tolerance), math.pi)
        round_default = shape in (Capsule.FULL, Capsule.HALF)
        round_opposite = shape in (Capsule.FULL, Capsule.HALF_REVERSE)

        points: list[Point] = []
        if width < height:
            cx = x + radius
            low = y + radius
            high = y + height - radius
            if round_default:
                points += [Point(cx - radius * c, low - radius * s) for c, s in half]
            else:
                points += [Point(cx - radius, low), Point(cx + radius, low)]
            if round_opposite:
                points += [Point(cx + radius * c, high + radius * s) for c, s in half]
            else:
                points += [Point(cx + radius, high), Point(cx - radius, high)]
        else:
            cy = y + radius
            low = x + radius
            high = x + width - radius
            if round_default:
                points += [Point(low - radius * s, cy + radius * c) for c, s in half]
            else:
                points += [Point(low, cy + radius), Point(low, cy - radius)]
            if round_opposite:
                points += [Point(high + radius * s, cy - radius * c) for c, s in half]
            else:
                points += [Point(high, cy - radius), Point(high, cy + radius)]

        return Path(points=points, closed=True)

    # ------------------------------------------------------------------
    # Meshes

    def fill(self, outline: Path) -> Polygon:
        """Triangulate a closed outline.

        Args:
            outline: Simple outline, typically one made by this factory

        Returns:
            Mesh over the outline vertices
        """
        triangulator = EarclipTriangulator(outline)
        triangulator.calculate()
        return triangulator.get_polygon()

    def make_traversal(self, polygon: Polygon, traversal: Traversal | str) -> list[Path]:
        """Return a wireframe of a triangle mesh.

        OPEN and CLOSED give one path per boundary loop (outer loops
        counter-clockwise, hole loops clockwise), left open or closed.
        INTERIOR gives one closed path per triangle. NONE gives nothing.

        Args:
            polygon: Mesh to trace
            traversal: Kind of wireframe

        Returns:
            List of paths
        """
        traversal = Traversal(traversal)
        if traversal is Traversal.NONE:
            return []
        if traversal is Traversal.INTERIOR:
            return [Path(points=[a, b, c], closed=True) for a, b, c in polygon.triangles()]

        closed = traversal is Traversal.CLOSED
        paths = [
            Path(points=[polygon.vertices[i] for i in loop], closed=closed)
            for loop in polygon.boundaries()
        ]
        logger.debug("Mesh traversed", traversal=traversal.value, paths=len(paths))
        return paths
