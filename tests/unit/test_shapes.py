"""Tests for shape generation and mesh traversal."""

import math

import pytest

from polykit.config import Capsule, Traversal
from polykit.core.shapes import ShapeFactory, curve_segments
from polykit.core.triangulator import EarclipTriangulator
from polykit.domain import Path, Point
from polykit.exceptions import GeometryError


def has_repeats(path: Path) -> bool:
    """Whether any two cyclically adjacent points coincide."""
    pts = path.points
    return any(pts[i] == pts[(i + 1) % len(pts)] for i in range(len(pts)))


@pytest.fixture
def shapes() -> ShapeFactory:
    """Factory with a fine curve tolerance."""
    return ShapeFactory(tolerance=0.01)


class TestCurveSegments:
    """Tests for the chord count of circular arcs."""

    @pytest.mark.parametrize("radius", [0.5, 10.0, 250.0])
    def test_chords_stay_within_tolerance(self, radius):
        """The gap between each chord and the arc is at most the tolerance."""
        n = curve_segments(radius, 2 * math.pi, 0.5)
        sagitta = radius * (1 - math.cos(math.pi / n))
        assert sagitta <= 0.5

    def test_finer_tolerance_needs_more_chords(self):
        """Tightening the tolerance never reduces the chord count."""
        assert curve_segments(10, math.pi, 0.01) > curve_segments(10, math.pi, 0.5)

    def test_degenerate_inputs(self):
        """Zero radius or zero sweep falls back to the minimum count."""
        assert curve_segments(0, math.pi, 0.5) == 2
        assert curve_segments(10, 0, 0.5) == 2

    def test_sign_of_sweep_is_ignored(self):
        """Clockwise sweeps need as many chords as counter-clockwise ones."""
        assert curve_segments(10, -math.pi, 0.5) == curve_segments(10, math.pi, 0.5)


class TestStraightShapes:
    """Tests for lines, triangles, rectangles and regular polygons."""

    def test_line(self):
        """A line is an open two point path."""
        line = ShapeFactory().make_line((0, 0), (3, 4))
        assert not line.closed
        assert line.points == [Point(0, 0), Point(3, 4)]
        assert line.length() == pytest.approx(5.0)

    def test_triangle_keeps_order(self):
        """Triangle corners are kept in the order given."""
        tri = ShapeFactory().make_triangle(Point(0, 0), Point(0, 1), Point(1, 0))
        assert tri.closed
        assert tri.signed_area() == pytest.approx(-0.5)

    def test_rect(self):
        """Rectangles start at the bottom left and run counter-clockwise."""
        rect = ShapeFactory().make_rect(1, 2, 4, 3)
        assert rect.closed
        assert rect.points == [Point(1, 2), Point(5, 2), Point(5, 5), Point(1, 5)]
        assert rect.signed_area() == pytest.approx(12.0)

    def test_ngon(self):
        """A regular hexagon has six corners on its circumcircle."""
        hexagon = ShapeFactory().make_ngon(1, 1, 2, 6)
        assert len(hexagon) == 6
        assert hexagon.points[0].is_close(Point(3, 1))
        for p in hexagon:
            assert math.hypot(p.x - 1, p.y - 1) == pytest.approx(2.0)
        assert hexagon.signed_area() == pytest.approx(3 * math.sqrt(3) / 2 * 4)

    def test_ngon_needs_three_sides(self):
        """Fewer than three sides is rejected."""
        with pytest.raises(GeometryError):
            ShapeFactory().make_ngon(0, 0, 1, 2)


class TestRoundShapes:
    """Tests for ellipses, circles and arcs."""

    def test_tolerance_must_be_positive(self):
        """A zero tolerance is rejected."""
        with pytest.raises(GeometryError):
            ShapeFactory(tolerance=0)

    def test_circle(self):
        """Circle points lie on the circle and the chords respect the tolerance."""
        circle = ShapeFactory().make_circle(5, -5, 10)
        assert circle.closed
        assert len(circle) == curve_segments(10, 2 * math.pi, 0.5)
        for p in circle:
            assert math.hypot(p.x - 5, p.y + 5) == pytest.approx(10.0)
        assert math.pi * 9.5**2 < circle.signed_area() < math.pi * 100

    def test_ellipse(self):
        """Ellipse sizes are diameters."""
        ellipse = ShapeFactory().make_ellipse(0, 0, 20, 8)
        assert ellipse.signed_area() > 0
        for p in ellipse:
            assert (p.x / 10) ** 2 + (p.y / 4) ** 2 == pytest.approx(1.0)
        min_x, min_y, max_x, max_y = ellipse.bounding_box()
        assert min_x == pytest.approx(-10, abs=1.0)
        assert max_x == pytest.approx(10)

    def test_arc(self):
        """A quarter arc is open and runs counter-clockwise."""
        arc = ShapeFactory().make_arc(0, 0, 10, 0, 90)
        assert not arc.closed
        assert len(arc) == curve_segments(10, math.pi / 2, 0.5) + 1
        assert arc.points[0].is_close(Point(10, 0))
        assert arc.points[-1].is_close(Point(0, 10))
        for p in arc:
            assert math.hypot(p.x, p.y) == pytest.approx(10.0)

    def test_clockwise_arc(self):
        """A negative sweep runs clockwise."""
        arc = ShapeFactory().make_arc(0, 0, 10, 90, -90)
        assert arc.points[0].is_close(Point(0, 10))
        assert arc.points[-1].is_close(Point(10, 0))

    def test_arc_has_at_most_one_chord_per_degree(self):
        """Huge radii are capped at one chord per degree of sweep."""
        arc = ShapeFactory().make_arc(0, 0, 1e6, 0, 10)
        assert len(arc) == 11


class TestRoundedRect:
    """Tests for rounded rectangles."""

    def test_area(self, shapes):
        """Area approaches the rectangle minus the corner cutoffs."""
        rect = shapes.make_rounded_rect(0, 0, 40, 20, 5)
        assert rect.closed
        assert rect.signed_area() == pytest.approx(800 - (4 - math.pi) * 25, abs=0.5)
        min_x, min_y, max_x, max_y = rect.bounding_box()
        assert (min_x, min_y) == (pytest.approx(0), pytest.approx(0))
        assert (max_x, max_y) == (pytest.approx(40), pytest.approx(20))

    def test_zero_radius_is_a_rect(self, shapes):
        """Without rounding the result is a plain rectangle."""
        assert shapes.make_rounded_rect(0, 0, 4, 2, 0) == shapes.make_rect(0, 0, 4, 2)

    def test_full_radius_has_no_repeated_points(self):
        """Corners that meet share a single point."""
        rect = ShapeFactory().make_rounded_rect(0, 0, 40, 10, 5)
        assert not has_repeats(rect)
        assert rect.signed_area() > 0

    def test_radius_too_large(self, shapes):
        """A radius over half the short side is rejected."""
        with pytest.raises(GeometryError):
            shapes.make_rounded_rect(0, 0, 40, 10, 6)

    def test_fill(self, shapes):
        """The filled outline covers the same area with a triangle fan count."""
        rect = shapes.make_rounded_rect(0, 0, 40, 20, 5)
        mesh = shapes.fill(rect)
        assert mesh.triangle_count == len(rect) - 2
        assert mesh.area() == pytest.approx(rect.signed_area())


class TestCapsule:
    """Tests for capsules."""

    def test_full_horizontal(self, shapes):
        """A full capsule is a rectangle with two semicircular ends."""
        capsule = shapes.make_capsule(0, 0, 30, 10)
        assert capsule.signed_area() == pytest.approx(200 + 25 * math.pi, abs=0.5)
        min_x, min_y, max_x, max_y = capsule.bounding_box()
        assert min_x == pytest.approx(0, abs=0.05)
        assert max_x == pytest.approx(30, abs=0.05)
        assert (min_y, max_y) == (pytest.approx(0), pytest.approx(10))
        assert not has_repeats(capsule)

    def test_full_vertical(self, shapes):
        """Tall boxes give vertical capsules."""
        capsule = shapes.make_capsule(0, 0, 10, 30, Capsule.FULL)
        assert capsule.signed_area() == pytest.approx(200 + 25 * math.pi, abs=0.5)
        min_x, min_y, max_x, max_y = capsule.bounding_box()
        assert min_y == pytest.approx(0, abs=0.05)
        assert max_y == pytest.approx(30, abs=0.05)

    def test_half_rounds_left_end(self, shapes):
        """HALF keeps the left end round and cuts the right end flat."""
        capsule = shapes.make_capsule(0, 0, 30, 10, Capsule.HALF)
        assert capsule.signed_area() == pytest.approx(200 + 12.5 * math.pi, abs=0.5)
        min_x, _, max_x, _ = capsule.bounding_box()
        assert min_x == pytest.approx(0, abs=0.05)
        assert max_x == 25

    def test_half_reverse_rounds_right_end(self, shapes):
        """HALF_REVERSE keeps the right end round."""
        capsule = shapes.make_capsule(0, 0, 30, 10, "half_reverse")
        assert capsule.signed_area() > 0
        min_x, _, max_x, _ = capsule.bounding_box()
        assert min_x == 5
        assert max_x == pytest.approx(30, abs=0.05)

    def test_half_vertical_rounds_bottom(self, shapes):
        """For vertical capsules the default end is the bottom."""
        capsule = shapes.make_capsule(0, 0, 10, 30, Capsule.HALF)
        assert capsule.signed_area() > 0
        _, min_y, _, max_y = capsule.bounding_box()
        assert min_y == pytest.approx(0, abs=0.05)
        assert max_y == 25

    def test_degenerate_is_an_ellipse(self, shapes):
        """DEGENERATE fills the box with an ellipse."""
        capsule = shapes.make_capsule(0, 0, 30, 10, Capsule.DEGENERATE)
        assert capsule == shapes.make_ellipse(15, 5, 30, 10)

    def test_square_box_is_a_circle(self, shapes):
        """A square box gives a circle."""
        assert shapes.make_capsule(0, 0, 10, 10) == shapes.make_circle(5, 5, 5)


class TestTraversal:
    """Tests for mesh wireframes."""

    @pytest.fixture
    def mesh(self):
        """10x10 square with a 2x2 hole, triangulated."""
        triangulator = EarclipTriangulator([(0, 0), (10, 0), (10, 10), (0, 10)])
        triangulator.add_hole([(4, 4), (4, 6), (6, 6), (6, 4)])
        triangulator.calculate()
        return triangulator.get_polygon()

    def test_none(self, mesh):
        """NONE produces no paths."""
        assert ShapeFactory().make_traversal(mesh, Traversal.NONE) == []

    @pytest.mark.parametrize("traversal", [Traversal.OPEN, Traversal.CLOSED])
    def test_boundaries(self, mesh, traversal):
        """Boundary traversal gives the hull and the hole with their windings."""
        paths = ShapeFactory().make_traversal(mesh, traversal)
        assert len(paths) == 2
        assert all(p.closed == (traversal is Traversal.CLOSED) for p in paths)
        assert sorted(p.signed_area() for p in paths) == [
            pytest.approx(-4.0),
            pytest.approx(100.0),
        ]

    def test_interior(self, mesh):
        """INTERIOR gives one closed counter-clockwise path per triangle."""
        paths = ShapeFactory().make_traversal(mesh, "interior")
        assert len(paths) == mesh.triangle_count == 8
        assert all(p.closed and len(p) == 3 for p in paths)
        assert all(p.signed_area() > 0 for p in paths)
        assert sum(p.signed_area() for p in paths) == pytest.approx(96.0)
