"""Geometric primitives shared by the polygon factories.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula)
- Turn orientation tests (cross product sign)
- Point-in-polygon testing (ray casting algorithm)
- Proper segment intersection
- Point to line distances
- Perpendicular vector computation

All functions are pure and stateless.
"""

import math

from polykit.domain import Point

# Coordinates closer than this are treated as the same point.
EPSILON = 1e-9


def cross(o: Point, a: Point, b: Point) -> float:
    """Return the z component of (a - o) x (b - o).

    Positive when o -> a -> b turns left (counter-clockwise).
    """
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def signed_area(points: list[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> p1 = Point(0.0, 0.0)
        >>> p2 = Point(1.0, 0.0)
        >>> p3 = Point(1.0, 1.0)
        >>> p4 = Point(0.0, 1.0)
        >>> signed_area([p1, p2, p3, p4])  # CCW square
        1.0
        >>> signed_area([p1, p4, p3, p2])  # CW square
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def point_in_polygon(point: Point, polygon: list[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.

    Args:
        point: The point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def segments_cross(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Check whether segment p1-p2 crosses segment p3-p4.

    Segments that share an endpoint never count as crossing, so edges
    meeting at a common vertex of a ring are not reported. Touching at an
    interior point does count.

    Args:
        p1: First endpoint of segment 1
        p2: Second endpoint of segment 1
        p3: First endpoint of segment 2
        p4: Second endpoint of segment 2

    Returns:
        True if the segments intersect away from a shared endpoint
    """
    if p1 == p3 or p1 == p4 or p2 == p3 or p2 == p4:
        return False

    d1 = cross(p1, p2, p3)
    d2 = cross(p1, p2, p4)
    d3 = cross(p3, p4, p1)
    d4 = cross(p3, p4, p2)

    if d1 == 0 and d2 == 0:
        # Collinear: only overlapping spans intersect
        return (
            max(min(p1.x, p2.x), min(p3.x, p4.x)) <= min(max(p1.x, p2.x), max(p3.x, p4.x))
            and max(min(p1.y, p2.y), min(p3.y, p4.y)) <= min(max(p1.y, p2.y), max(p3.y, p4.y))
        )

    return not (d1 * d2 > 0 or d3 * d4 > 0)


def point_line_distance(point: Point, start: Point, end: Point) -> float:
    """Perpendicular distance from a point to the infinite line start-end.

    Falls back to the distance to start when the line is degenerate.

    Args:
        point: The point to measure
        start: First point on the line
        end: Second point on the line

    Returns:
        Non-negative distance
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return math.hypot(point.x - start.x, point.y - start.y)
    return abs(dx * (point.y - start.y) - dy * (point.x - start.x)) / length


def perpendicular_direction(p1: Point, p2: Point) -> tuple[float, float]:
    """Calculate the unit perpendicular vector to a line from p1 to p2.

    The perpendicular is rotated 90 degrees counter-clockwise from the
    direction vector (p2 - p1).

    Args:
        p1: Start point of line
        p2: End point of line

    Returns:
        Tuple (px, py) representing the unit perpendicular vector

    Raises:
        ValueError: If p1 and p2 are the same point (zero-length line)

    Examples:
        >>> px, py = perpendicular_direction(Point(0.0, 0.0), Point(1.0, 0.0))
        >>> (px, py)
        (-0.0, 1.0)
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y

    length = math.hypot(dx, dy)
    if length < EPSILON:
        raise ValueError("Cannot calculate perpendicular of zero-length line")

    dx /= length
    dy /= length

    # Rotate 90 degrees counter-clockwise: (x, y) -> (-y, x)
    return -dy, dx
