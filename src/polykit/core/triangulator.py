"""Ear-clipping triangulation with hole support.

This module provides the EarclipTriangulator factory. Holes are absorbed into
the outer hull through bridging edges, reducing the problem to a single
simple ring, which is then triangulated by repeatedly clipping ears.

The vertex ring is stored as an arena of parallel arrays (coordinates,
original index, next/prev links, flags) rather than node objects, so that a
triangulator can be reset and reused without rebuilding object graphs.
Complexity is O(n^2) in the worst case, which is fine for UI shapes and
stroke outlines.
"""

import math
from collections.abc import Sequence

import structlog

from polykit.core.geometry import cross, point_in_polygon, segments_cross, signed_area
from polykit.domain import Path, Point, Polygon
from polykit.exceptions import OutputBufferError

logger = structlog.get_logger(__name__)

PointSource = Path | Sequence[Point | Sequence[float]]


def _as_points(source: PointSource) -> list[Point]:
    points = source.points if isinstance(source, Path) else source
    return [Point.coerce(p) for p in points]


class _VertexArena:
    """Doubly linked vertex rings stored as parallel arrays.

    Slot ``i`` for ``i < len(points)`` holds input vertex ``i``. Bridge
    copies created while merging holes are appended after the input slots
    and carry the original index of the vertex they duplicate.
    """

    def __init__(self, points: list[Point]) -> None:
        self.coords: list[Point] = list(points)
        self.index: list[int] = list(range(len(points)))
        self.next: list[int] = [0] * len(points)
        self.prev: list[int] = [0] * len(points)
        self.active: list[bool] = [True] * len(points)
        self.ear: list[bool] = [False] * len(points)

    def __len__(self) -> int:
        return len(self.coords)

    def link_ring(self, start: int, size: int, reverse: bool = False) -> None:
        """Link slots [start, start + size) into a circular ring."""
        for k in range(size):
            pos = start + k
            succ = start + (k + 1) % size
            pred = start + (k - 1) % size
            if reverse:
                succ, pred = pred, succ
            self.next[pos] = succ
            self.prev[pos] = pred

    def copy_slot(self, slot: int) -> int:
        """Duplicate a slot (links included) and return the new slot."""
        self.coords.append(self.coords[slot])
        self.index.append(self.index[slot])
        self.next.append(self.next[slot])
        self.prev.append(self.prev[slot])
        self.active.append(self.active[slot])
        self.ear.append(False)
        return len(self.coords) - 1

    def ring(self, start: int) -> list[int]:
        """Return the slots of the ring containing start, in link order."""
        slots = [start]
        curr = self.next[start]
        # A ring never has more nodes than the arena.
        guard = len(self.coords)
        while curr != start and guard > 0:
            slots.append(curr)
            curr = self.next[curr]
            guard -= 1
        return slots

    def turn(self, slot: int) -> float:
        """Cross product at slot: positive when the vertex is convex."""
        return cross(
            self.coords[self.prev[slot]], self.coords[slot], self.coords[self.next[slot]]
        )

    def in_cone(self, slot: int, p: Point) -> bool:
        """Check whether p lies in the interior cone of the vertex at slot.

        The cone is bounded by the lines (not segments) to the two
        neighbors. For a convex vertex p must be left of both edges, for a
        reflex vertex left of either one.
        """
        a = self.coords[self.prev[slot]]
        b = self.coords[slot]
        c = self.coords[self.next[slot]]
        left_in = cross(a, b, p) > 0
        left_out = cross(b, c, p) > 0
        if cross(a, b, c) > 0:
            return left_in and left_out
        return left_in or left_out


class EarclipTriangulator:
    """Factory triangulating a simple polygon with optional holes.

    The outer hull should be counter-clockwise and each hole clockwise,
    lying inside the hull. Holes may touch the hull or each other at shared
    vertices, as offsetting libraries tend to produce; such holes are joined
    at the shared point instead of through a bridge. Overlapping input gives
    undefined (but non-crashing) output.

    Output indices refer to the combined vertex list: hull points first, in
    their original order, followed by the points of each hole in the order
    the holes were added.

    Example:
        triangulator = EarclipTriangulator(hull)
        triangulator.add_hole(hole)
        triangulator.calculate()
        mesh = triangulator.get_polygon()
    """

    def __init__(self, points: PointSource | None = None) -> None:
        """Initialize the triangulator.

        Args:
            points: Optional outer hull
        """
        self._input: list[Point] = []
        self._exterior = 0
        self._holes: list[tuple[int, int]] = []
        self._output: list[int] = []
        self._arena: _VertexArena | None = None
        self._calculated = False
        if points is not None:
            self.set(points)

    # ------------------------------------------------------------------
    # Initialization

    def set(self, points: PointSource) -> None:
        """Set the outer hull.

        The data is copied. Any holes added earlier are discarded along
        with the previous result.

        Args:
            points: Hull as a Path or a sequence of points / (x, y) pairs
        """
        self.clear()
        self._input = _as_points(points)
        self._exterior = len(self._input)

    def add_hole(self, points: PointSource) -> None:
        """Add a hole to the triangulation.

        The data is copied. Hole points are appended after the hull points
        and any earlier holes. Discards the previous result.

        Args:
            points: Hole as a Path or a sequence of points / (x, y) pairs
        """
        self.reset()
        hole = _as_points(points)
        if not hole:
            return
        self._holes.append((len(self._input), len(hole)))
        self._input.extend(hole)

    def set_polygon(self, polygon: Polygon) -> None:
        """Derive hull and holes from an existing mesh.

        The boundary loops of the mesh are extracted; the counter-clockwise
        loop of largest area becomes the hull and every clockwise loop
        inside it becomes a hole. Other outer loops are ignored.

        Args:
            polygon: Mesh to re-triangulate
        """
        self.clear()
        loops = [[polygon.vertices[i] for i in loop] for loop in polygon.boundaries()]
        outers = [loop for loop in loops if signed_area(loop) > 0]
        if not outers:
            return

        hull = max(outers, key=signed_area)
        self.set(hull)
        corners = set(hull)
        for loop in loops:
            if signed_area(loop) >= 0:
                continue
            # Any hole vertex off the hull outline decides containment
            sample = next((p for p in loop if p not in corners), None)
            if sample is not None and point_in_polygon(sample, hull):
                self.add_hole(loop)

    @property
    def calculated(self) -> bool:
        """Whether a result is available."""
        return self._calculated

    def reset(self) -> None:
        """Discard the triangulation but keep the hull and holes."""
        self._output = []
        self._arena = None
        self._calculated = False

    def clear(self) -> None:
        """Discard the triangulation, the hull and all holes."""
        self.reset()
        self._input = []
        self._exterior = 0
        self._holes = []

    # ------------------------------------------------------------------
    # Calculation

    def calculate(self) -> None:
        """Triangulate the current hull and holes.

        Does nothing if a result is already available.
        """
        if self._calculated:
            return

        if self._exterior >= 3:
            self._arena = self._allocate()
            self._remove_holes(self._arena)
            self._output = self._clip_ears(self._arena)
            self._arena = None

        self._calculated = True
        logger.debug(
            "Polygon triangulated",
            vertices=len(self._input),
            holes=len(self._holes),
            triangles=len(self._output) // 3,
        )

    def _allocate(self) -> _VertexArena:
        """Build one ring for the hull and one per hole.

        Rings wound against the expected direction are linked in reverse,
        so that the merged ring is always counter-clockwise.
        """
        arena = _VertexArena(self._input)
        hull = self._input[: self._exterior]
        arena.link_ring(0, self._exterior, reverse=signed_area(hull) < 0)
        for start, size in self._holes:
            hole = self._input[start : start + size]
            arena.link_ring(start, size, reverse=signed_area(hole) > 0)
        return arena

    def _remove_holes(self, arena: _VertexArena) -> None:
        """Splice every hole ring into the hull ring.

        Holes sharing a point with the merged ring are joined there first;
        the others are bridged in order of decreasing maximum x.
        """
        remaining = [(start, size) for start, size in self._holes if size >= 3]
        while remaining:
            touch = None
            for k, (start, size) in enumerate(remaining):
                touch = self._find_touch(arena, start, size)
                if touch is not None:
                    del remaining[k]
                    break
            if touch is not None:
                self._pinch(arena, *touch)
                continue

            # Hole point with the largest x (first one found on ties)
            part = 0
            hole_slot = remaining[0][0]
            for k, (start, size) in enumerate(remaining):
                for slot in range(start, start + size):
                    if arena.coords[slot].x > arena.coords[hole_slot].x:
                        part = k
                        hole_slot = slot

            bridge_slot = self._find_bridge(arena, hole_slot, remaining)
            del remaining[part]

            if bridge_slot is None:
                logger.warning(
                    "No visible hull vertex for hole; hole ignored",
                    hole_point=arena.coords[hole_slot].to_tuple(),
                )
                continue

            self._splice(arena, bridge_slot, hole_slot)

    def _find_bridge(
        self,
        arena: _VertexArena,
        hole_slot: int,
        remaining: list[tuple[int, int]],
    ) -> int | None:
        """Find the merged-ring vertex to connect a hole point to.

        Candidates lie strictly to the right of the hole point, contain it
        in their interior cone, and can be joined to it without crossing
        any edge of the merged ring or of a remaining hole. Where another
        hole touches an end of the bridge, the bridge must leave that point
        on the material side of the hole. Among the candidates the one whose
        direction is closest to the +x ray wins; ties go to the nearer
        candidate, then to ring order.
        """
        hp = arena.coords[hole_slot]
        ring = arena.ring(0)

        edges: list[tuple[Point, Point]] = [
            (arena.coords[s], arena.coords[arena.next[s]]) for s in ring
        ]
        others: list[int] = []
        for start, size in remaining:
            for slot in range(start, start + size):
                edges.append((arena.coords[slot], arena.coords[arena.next[slot]]))
                if slot != hole_slot:
                    others.append(slot)

        best: int | None = None
        best_key = (-math.inf, -math.inf)
        for slot in ring:
            cp = arena.coords[slot]
            if cp.x <= hp.x or not arena.in_cone(slot, hp):
                continue

            dist = math.hypot(cp.x - hp.x, cp.y - hp.y)
            key = ((cp.x - hp.x) / dist, -dist)
            if key <= best_key:
                continue
            if any(segments_cross(hp, cp, a, b) for a, b in edges):
                continue
            if not self._clear_of_holes(arena, others, hp, cp):
                continue
            best = slot
            best_key = key
        return best

    @staticmethod
    def _clear_of_holes(arena: _VertexArena, slots: list[int], hp: Point, cp: Point) -> bool:
        """Check that a bridge does not run into a hole touching its ends."""
        for slot in slots:
            p = arena.coords[slot]
            if p == hp and not arena.in_cone(slot, cp):
                return False
            if p == cp and not arena.in_cone(slot, hp):
                return False
        return True

    @staticmethod
    def _find_touch(arena: _VertexArena, start: int, size: int) -> tuple[int, int] | None:
        """Find a merged-ring vertex sharing its position with a hole vertex.

        The hole must fit in the interior cone of the ring vertex, which
        rules out holes that only graze it from outside or run along one of
        its edges.

        Returns:
            (ring slot, hole slot), or None if the hole touches nothing
        """
        at: dict[Point, list[int]] = {}
        for slot in arena.ring(0):
            at.setdefault(arena.coords[slot], []).append(slot)

        for hole in range(start, start + size):
            before = arena.coords[arena.prev[hole]]
            after = arena.coords[arena.next[hole]]
            for slot in at.get(arena.coords[hole], ()):
                if arena.in_cone(slot, before) and arena.in_cone(slot, after):
                    return slot, hole
        return None

    @staticmethod
    def _pinch(arena: _VertexArena, bridge: int, hole: int) -> None:
        """Join a hole ring into the merged ring at a shared point.

        The ring runs ... -> bridge -> (around the hole) -> hole -> ...
        afterwards, passing the shared point twice without new vertices.
        """
        bridge_next = arena.next[bridge]
        hole_next = arena.next[hole]

        arena.next[bridge] = hole_next
        arena.prev[hole_next] = bridge
        arena.next[hole] = bridge_next
        arena.prev[bridge_next] = hole

    @staticmethod
    def _splice(arena: _VertexArena, bridge: int, hole: int) -> None:
        """Join the hole ring into the bridge ring.

        After splicing, the ring runs ... -> bridge' -> hole -> (around the
        hole) -> hole' -> bridge -> ..., where the primed slots are copies.
        """
        hole_copy = arena.copy_slot(hole)
        bridge_copy = arena.copy_slot(bridge)

        arena.next[arena.prev[bridge]] = bridge_copy
        arena.next[arena.prev[hole]] = hole_copy

        arena.prev[bridge] = hole_copy
        arena.next[hole_copy] = bridge
        arena.next[bridge_copy] = hole
        arena.prev[hole] = bridge_copy

    def _update(self, arena: _VertexArena, slot: int) -> None:
        """Recompute the ear flag of a vertex.

        A vertex is an ear if it is strictly convex and no non-convex vertex
        of the ring lies inside or on its triangle. Vertices at the same
        position as a triangle corner (bridge copies and shared points of
        touching rings) do not count.
        """
        prev_slot = arena.prev[slot]
        next_slot = arena.next[slot]
        if arena.turn(slot) <= 0:
            arena.ear[slot] = False
            return

        a = arena.coords[prev_slot]
        b = arena.coords[slot]
        c = arena.coords[next_slot]

        curr = arena.next[next_slot]
        while curr != prev_slot:
            p = arena.coords[curr]
            if p != a and p != b and p != c and arena.turn(curr) <= 0:
                if cross(a, b, p) >= 0 and cross(b, c, p) >= 0 and cross(c, a, p) >= 0:
                    arena.ear[slot] = False
                    return
            curr = arena.next[curr]
        arena.ear[slot] = True

    def _clip_ears(self, arena: _VertexArena) -> list[int]:
        """Clip ears from the merged ring until one triangle remains."""
        output: list[int] = []
        ring = arena.ring(0)
        remaining = len(ring)
        for slot in ring:
            self._update(arena, slot)

        cursor = ring[0]
        while remaining > 3:
            ear = self._next_ear(arena, cursor, remaining)
            if ear is None:
                logger.warning(
                    "Could not find a suitable ear; polygon is not simple",
                    remaining=remaining,
                )
                return output

            prev_slot = arena.prev[ear]
            next_slot = arena.next[ear]
            output.extend((arena.index[prev_slot], arena.index[ear], arena.index[next_slot]))

            arena.active[ear] = False
            arena.next[prev_slot] = next_slot
            arena.prev[next_slot] = prev_slot
            remaining -= 1

            self._update(arena, prev_slot)
            self._update(arena, next_slot)
            cursor = next_slot

        if remaining == 3:
            output.extend(
                (arena.index[arena.prev[cursor]], arena.index[cursor], arena.index[arena.next[cursor]])
            )
        return output

    @staticmethod
    def _next_ear(arena: _VertexArena, cursor: int, remaining: int) -> int | None:
        """Walk the ring from cursor and return the first clippable vertex.

        Prefers a proper ear. When the ring has none (only possible with
        collinear runs or malformed input), a collinear vertex is clipped
        as a zero-area triangle so that the walk can continue.
        """
        curr = cursor
        for _ in range(remaining):
            if arena.ear[curr]:
                return curr
            curr = arena.next[curr]

        curr = cursor
        for _ in range(remaining):
            if arena.turn(curr) == 0:
                return curr
            curr = arena.next[curr]
        return None

    # ------------------------------------------------------------------
    # Materialization

    def get_triangulation(self) -> list[int]:
        """Return the triangle indices.

        Returns:
            Flat index list (three per triangle), empty if not calculated
        """
        if not self._calculated:
            return []
        return list(self._output)

    def append_triangulation(self, buffer: list[int]) -> int:
        """Append the triangle indices to a buffer.

        Indices are not offset; see ``append_polygon`` for that.

        Args:
            buffer: List to extend

        Returns:
            The number of indices added

        Raises:
            OutputBufferError: If buffer is None
        """
        if buffer is None:
            raise OutputBufferError(type(self).__name__)
        if not self._calculated:
            return 0
        buffer.extend(self._output)
        return len(self._output)

    def get_polygon(self) -> Polygon:
        """Return the triangulation as a new mesh.

        The mesh contains the hull and hole vertices in input order.

        Returns:
            Polygon, empty if not calculated
        """
        if not self._calculated:
            return Polygon()
        return Polygon(vertices=list(self._input), indices=list(self._output))

    def append_polygon(self, buffer: Polygon) -> Polygon:
        """Append the triangulation to an existing mesh.

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
            buffer.append(Polygon(vertices=self._input, indices=self._output))
        return buffer
