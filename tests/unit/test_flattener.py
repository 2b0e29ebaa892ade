"""Tests for adaptive cubic spline flattening."""

import math

import pytest

from polykit.core.flattener import CurveFlattener
from polykit.core.geometry import point_line_distance
from polykit.domain import CubicSpline, Path, Point
from polykit.exceptions import OutputBufferError


@pytest.fixture
def arch() -> CubicSpline:
    """Single-segment arch from (0, 0) up and over to (10, 0)."""
    return CubicSpline.from_coordinates([(0, 0), (0, 10), (10, 10), (10, 0)])


@pytest.fixture
def s_curve() -> CubicSpline:
    """Two-segment S-shaped spline."""
    return CubicSpline.from_coordinates(
        [(0, 0), (0, 8), (6, 8), (6, 0), (6, -8), (12, -8), (12, 0)]
    )


def circle(radius: float = 10.0) -> CubicSpline:
    """Closed four-segment approximation of a circle."""
    k = 0.5522847498 * radius
    r = radius
    return CubicSpline.from_coordinates(
        [
            (r, 0), (r, k), (k, r), (0, r),
            (-k, r), (-r, k), (-r, 0),
            (-r, -k), (-k, -r), (0, -r),
            (k, -r), (r, -k), (r, 0),
        ],
        closed=True,
    )


def flatten(spline: CubicSpline, tolerance: float = 0.5, max_depth: int = 8) -> CurveFlattener:
    flattener = CurveFlattener(spline, tolerance=tolerance, max_depth=max_depth)
    flattener.calculate()
    return flattener


class TestStraightInput:
    """Tests for splines that are already flat."""

    def test_line(self) -> None:
        """Test that a straight segment yields its two endpoints."""
        flattener = flatten(CubicSpline.line(Point(0, 0), Point(10, 0)))
        assert flattener.get_path().points == [Point(0, 0), Point(10, 0)]
        assert flattener.get_parameters() == [0.0, 1.0]

    def test_collinear_controls(self) -> None:
        """Test that collinear control points need no subdivision."""
        spline = CubicSpline.from_coordinates([(0, 0), (3, 0), (7, 0), (10, 0)])
        flattener = flatten(spline, tolerance=0.001)
        assert len(flattener.get_path()) == 2

    def test_all_points_coincident(self) -> None:
        """Test that a degenerate spline terminates with zero normals."""
        spline = CubicSpline.from_coordinates([(2, 2)] * 4)
        flattener = flatten(spline, tolerance=0.01)
        assert len(flattener.get_path()) == 2
        assert flattener.get_normals() == [Point(0.0, 0.0), Point(0.0, 0.0)]


class TestSubdivision:
    """Tests for the adaptive subdivision itself."""

    def test_endpoints_preserved(self, arch: CubicSpline) -> None:
        """Test that the polyline starts and ends at the spline's ends."""
        path = flatten(arch).get_path()
        assert path.points[0] == Point(0, 0)
        assert path.points[-1] == Point(10, 0)
        assert not path.closed

    def test_points_lie_on_curve(self, s_curve: CubicSpline) -> None:
        """Test that every emitted point is the curve point at its parameter."""
        flattener = flatten(s_curve, tolerance=0.1)
        for point, param in zip(flattener.get_path(), flattener.get_parameters()):
            if param >= s_curve.segment_count:
                continue
            segment = int(param)
            expected = s_curve.get_point(segment, param - segment)
            assert point.x == pytest.approx(expected.x, abs=1e-9)
            assert point.y == pytest.approx(expected.y, abs=1e-9)

    @pytest.mark.parametrize("tolerance", [1.0, 0.25, 0.05])
    def test_deviation_within_tolerance(self, s_curve: CubicSpline, tolerance: float) -> None:
        """Test that the curve stays within tolerance of each polyline edge."""
        flattener = flatten(s_curve, tolerance=tolerance, max_depth=16)
        points = flattener.get_path().points
        params = flattener.get_parameters()
        for i in range(len(points) - 1):
            t0, t1 = params[i], params[i + 1]
            for frac in (0.25, 0.5, 0.75):
                t = t0 + (t1 - t0) * frac
                segment = min(int(t), s_curve.segment_count - 1)
                on_curve = s_curve.get_point(segment, t - segment)
                assert point_line_distance(on_curve, points[i], points[i + 1]) <= tolerance + 1e-9

    def test_parameters_increase(self, s_curve: CubicSpline) -> None:
        """Test that parameters are strictly increasing over [0, segment_count]."""
        params = flatten(s_curve, tolerance=0.1).get_parameters()
        assert params[0] == 0.0
        assert params[-1] == 2.0
        assert all(a < b for a, b in zip(params, params[1:]))

    def test_segment_boundaries_kept(self, s_curve: CubicSpline) -> None:
        """Test that every input anchor appears in the output."""
        params = flatten(s_curve).get_parameters()
        assert 1.0 in params

    def test_smaller_tolerance_more_points(self, arch: CubicSpline) -> None:
        """Test that tightening the tolerance never removes points."""
        counts = [len(flatten(arch, tolerance=tol).get_path()) for tol in (2.0, 0.5, 0.1, 0.01)]
        assert counts == sorted(counts)
        assert counts[-1] > counts[0]

    def test_max_depth_caps_subdivision(self, arch: CubicSpline) -> None:
        """Test that depth bounds the number of pieces per segment."""
        assert len(flatten(arch, tolerance=1e-12, max_depth=0).get_path()) == 2
        assert len(flatten(arch, tolerance=1e-12, max_depth=3).get_path()) == 2**3 + 1

    def test_symmetric_arch(self, arch: CubicSpline) -> None:
        """Test that a symmetric curve flattens symmetrically."""
        points = flatten(arch, tolerance=0.2).get_path().points
        for left, right in zip(points, reversed(points)):
            assert left.x == pytest.approx(10.0 - right.x)
            assert left.y == pytest.approx(right.y)


class TestClosedSplines:
    """Tests for closed splines."""

    def test_duplicate_anchor_dropped(self) -> None:
        """Test that the closing anchor is not repeated in the path."""
        flattener = flatten(circle(), tolerance=0.1)
        path = flattener.get_path()
        assert path.closed
        assert path.points[0] != path.points[-1]
        assert len(flattener.get_parameters()) == len(path)
        assert len(flattener.get_normals()) == len(path)

    def test_points_near_circle(self) -> None:
        """Test that flattened points lie close to the true circle."""
        path = flatten(circle(10.0), tolerance=0.05).get_path()
        for point in path:
            assert math.hypot(point.x, point.y) == pytest.approx(10.0, abs=0.01)

    def test_area_close_to_circle(self) -> None:
        """Test that the polygon area approaches the circle area."""
        path = flatten(circle(10.0), tolerance=0.01).get_path()
        assert path.signed_area() == pytest.approx(math.pi * 100.0, rel=0.01)


class TestDerivedData:
    """Tests for tangents, normals, markers and the refinement."""

    def test_tangent_count(self, s_curve: CubicSpline) -> None:
        """Test that there are two tangents per polyline edge."""
        flattener = flatten(s_curve, tolerance=0.2)
        assert len(flattener.get_tangents()) == 2 * (len(flattener.get_path()) - 1)

    def test_arch_normals(self, arch: CubicSpline) -> None:
        """Test the normals at the ends of the arch.

        The curve leaves (0, 0) heading up and arrives at (10, 0) heading
        down, so the left-hand normals point to -x and +x.
        """
        normals = flatten(arch).get_normals()
        assert normals[0].x == pytest.approx(-1.0)
        assert normals[0].y == pytest.approx(0.0, abs=1e-12)
        assert normals[-1].x == pytest.approx(1.0)
        assert normals[-1].y == pytest.approx(0.0, abs=1e-12)

    def test_normals_unit_length(self, s_curve: CubicSpline) -> None:
        """Test that normals are unit vectors."""
        for normal in flatten(s_curve, tolerance=0.1).get_normals():
            assert math.hypot(normal.x, normal.y) == pytest.approx(1.0)

    def test_line_normals_fall_back_to_chord(self) -> None:
        """Test that zero-length tangents use the chord direction."""
        normals = flatten(CubicSpline.line(Point(0, 0), Point(10, 0))).get_normals()
        assert normals == [Point(-0.0, 1.0), Point(-0.0, 1.0)]

    def test_is_anchor(self, arch: CubicSpline) -> None:
        """Test anchor flags on the refined control list."""
        flattener = flatten(arch)
        refinement = flattener.get_refinement()
        flags = [flattener.is_anchor(i) for i in range(len(refinement.points))]
        assert flags[0] and flags[-1]
        assert flags == [i % 3 == 0 for i in range(len(flags))]

    def test_refinement_traces_curve(self, arch: CubicSpline) -> None:
        """Test that the refinement has one segment per polyline edge."""
        flattener = flatten(arch, tolerance=0.2)
        refinement = flattener.get_refinement()
        assert refinement.segment_count == len(flattener.get_path()) - 1
        assert refinement.anchors() == flattener.get_path().points

    def test_anchor_markers(self) -> None:
        """Test that each polyline point gets a disc marker."""
        flattener = flatten(CubicSpline.line(Point(0, 0), Point(10, 0)))
        mesh = flattener.get_anchors(0.5)
        assert len(mesh.vertices) == 10
        assert mesh.triangle_count == 8
        assert mesh.area() == pytest.approx(4 * 0.5**2)

    def test_handle_markers(self) -> None:
        """Test that each tangent helper gets a disc marker."""
        flattener = flatten(CubicSpline.line(Point(0, 0), Point(10, 0)))
        mesh = flattener.get_handles(1.0, segments=6)
        assert len(mesh.vertices) == 14
        assert mesh.triangle_count == 12

    def test_marker_minimum_segments(self) -> None:
        """Test that markers use at least three rim vertices."""
        flattener = flatten(CubicSpline.line(Point(0, 0), Point(10, 0)))
        assert flattener.get_anchors(1.0, segments=1).triangle_count == 6


class TestLifecycle:
    """Tests for the configure, calculate, extract lifecycle."""

    def test_results_empty_before_calculate(self, arch: CubicSpline) -> None:
        """Test that queries before calculate return empty values."""
        flattener = CurveFlattener(arch)
        assert flattener.get_path().is_empty()
        assert flattener.get_parameters() == []
        assert flattener.get_normals() == []
        assert flattener.get_tangents() == []
        assert flattener.get_refinement().is_empty()
        assert flattener.get_anchors(1.0).is_empty()

    def test_empty_spline(self) -> None:
        """Test that an empty spline gives an empty result."""
        flattener = flatten(CubicSpline())
        assert flattener.calculated
        assert flattener.get_path().is_empty()

    def test_tolerance_change_resets(self, arch: CubicSpline) -> None:
        """Test that changing a parameter discards the result."""
        flattener = flatten(arch, tolerance=2.0)
        coarse = len(flattener.get_path())
        flattener.tolerance = 0.05
        assert not flattener.calculated
        flattener.calculate()
        assert len(flattener.get_path()) > coarse

    def test_spline_is_copied(self, arch: CubicSpline) -> None:
        """Test that later edits to the caller's spline are not seen."""
        flattener = CurveFlattener(arch)
        arch.points[3] = Point(50, 50)
        flattener.calculate()
        assert flattener.get_path().points[-1] == Point(10, 0)

    def test_clear(self, arch: CubicSpline) -> None:
        """Test that clear drops the spline."""
        flattener = flatten(arch)
        flattener.clear()
        flattener.calculate()
        assert flattener.get_path().is_empty()

    def test_append_path(self, arch: CubicSpline) -> None:
        """Test appending into an existing path."""
        flattener = flatten(arch)
        buffer = Path.from_coordinates([(-1, -1)])
        assert flattener.append_path(buffer) is buffer
        assert len(buffer) == 1 + len(flattener.get_path())

    def test_none_buffer_raises(self, arch: CubicSpline) -> None:
        """Test that a missing output buffer is a usage error."""
        with pytest.raises(OutputBufferError):
            flatten(arch).append_path(None)  # type: ignore[arg-type]
