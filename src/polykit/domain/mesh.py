"""Triangle mesh type produced by the polygon factories.

A Polygon is the hand-off format to renderers: a vertex list plus a flat
triangle index list. Factories either return a fresh Polygon or append into a
caller-supplied one, in which case indices are offset by the vertex count the
buffer already had.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from polykit.domain.path import Point


@dataclass
class Polygon:
    """A triangulated shape.

    Every three consecutive entries of ``indices`` form one counter-clockwise
    triangle over ``vertices``.

    Attributes:
        vertices: Vertex positions
        indices: Triangle indices into vertices (length is a multiple of 3)
    """

    vertices: list[Point] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        """Number of triangles in the mesh."""
        return len(self.indices) // 3

    def is_empty(self) -> bool:
        """Check if the mesh has no vertices."""
        return not self.vertices

    def triangles(self) -> Iterator[tuple[Point, Point, Point]]:
        """Iterate over triangles as vertex triples."""
        verts = self.vertices
        idx = self.indices
        for i in range(0, len(idx) - len(idx) % 3, 3):
            yield verts[idx[i]], verts[idx[i + 1]], verts[idx[i + 2]]

    def area(self) -> float:
        """Sum of signed triangle areas.

        Counter-clockwise triangles contribute positive area, so a valid
        factory output has area equal to the area it covers.
        """
        total = 0.0
        for a, b, c in self.triangles():
            total += (b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y)
        return total / 2.0

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the vertices.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.vertices:
            return (0.0, 0.0, 0.0, 0.0)

        xs = [p.x for p in self.vertices]
        ys = [p.y for p in self.vertices]
        return (min(xs), min(ys), max(xs), max(ys))

    def is_valid(self) -> bool:
        """Check the index invariants: whole triangles, all indices in bounds."""
        if len(self.indices) % 3 != 0:
            return False
        size = len(self.vertices)
        return all(0 <= i < size for i in self.indices)

    def append(self, other: "Polygon") -> "Polygon":
        """Append another mesh, offsetting its indices.

        Args:
            other: Mesh to append

        Returns:
            This polygon, for chaining
        """
        offset = len(self.vertices)
        self.vertices.extend(other.vertices)
        self.indices.extend(offset + i for i in other.indices)
        return self

    def boundaries(self) -> list[list[int]]:
        """Extract the boundary loops of the mesh.

        A directed triangle edge lies on the boundary when no triangle uses
        it in the opposite direction. Chaining those edges yields closed
        loops; with counter-clockwise triangles, outer loops come out
        counter-clockwise and hole loops clockwise.

        Returns:
            List of loops, each a list of vertex indices
        """
        directed: set[tuple[int, int]] = set()
        idx = self.indices
        for i in range(0, len(idx) - len(idx) % 3, 3):
            a, b, c = idx[i], idx[i + 1], idx[i + 2]
            directed.update(((a, b), (b, c), (c, a)))

        outgoing: dict[int, list[int]] = {}
        for a, b in sorted(directed):
            if a != b and (b, a) not in directed:
                outgoing.setdefault(a, []).append(b)

        loops: list[list[int]] = []
        for start in sorted(outgoing):
            while outgoing.get(start):
                loop = [start]
                current = outgoing[start].pop()
                while current != start:
                    loop.append(current)
                    nexts = outgoing.get(current)
                    if not nexts:
                        break
                    current = nexts.pop()
                if len(loop) >= 3:
                    loops.append(loop)
        return loops

    def copy(self) -> "Polygon":
        """Return an independent copy of this mesh."""
        return Polygon(vertices=list(self.vertices), indices=list(self.indices))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with vertices as [x, y] pairs and the flat index list
        """
        return {
            "vertices": [[p.x, p.y] for p in self.vertices],
            "indices": list(self.indices),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Polygon":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a mesh

        Returns:
            Polygon instance
        """
        return cls(
            vertices=[Point.coerce(v) for v in data.get("vertices", [])],
            indices=[int(i) for i in data.get("indices", [])],
        )
