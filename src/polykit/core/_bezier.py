"""Internal cubic Bezier helpers for the curve flattener.

This is an internal module containing helper functions for CurveFlattener.
Not intended for public use.
"""

from polykit.core.geometry import point_line_distance
from polykit.domain import Point

Cubic = tuple[Point, Point, Point, Point]


def _mid(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def split_cubic(points: Cubic) -> tuple[Cubic, Cubic]:
    """Split a cubic Bezier curve at t=0.5.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: The 4 control points (p0, p1, p2, p3)

    Returns:
        Control points of the left and right halves. The halves share the
        curve midpoint.
    """
    p0, p1, p2, p3 = points

    # First level
    q1 = _mid(p0, p1)
    q2 = _mid(p1, p2)
    q3 = _mid(p2, p3)

    # Second level
    r1 = _mid(q1, q2)
    r2 = _mid(q2, q3)

    # Third level (curve midpoint)
    mid = _mid(r1, r2)

    return (p0, q1, r1, mid), (mid, r2, q3, p3)


def flatness(points: Cubic) -> float:
    """Measure how far a cubic deviates from its chord.

    The curve lies inside the convex hull of its control points, so the
    larger distance of the two inner control points from the chord p0-p3
    bounds the distance of the curve from the chord. For a degenerate chord
    the distance to p0 is used instead.

    Args:
        points: The 4 control points (p0, p1, p2, p3)

    Returns:
        Non-negative deviation bound
    """
    p0, p1, p2, p3 = points
    return max(point_line_distance(p1, p0, p3), point_line_distance(p2, p0, p3))
