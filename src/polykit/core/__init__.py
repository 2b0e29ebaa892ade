"""Core algorithms for polykit.

This module contains the polygon factories and their helpers:

- Geometry operations (signed area, point-in-polygon, intersections)
- Path simplification (Douglas-Peucker)
- Triangulation (ear clipping with hole bridging)
- Curve flattening (adaptive de Casteljau subdivision)
- Stroke extrusion (grid-snapped offsetting plus re-triangulation)

Every factory follows the same lifecycle: configure with ``set``, run
``calculate``, then extract results with ``get_*`` or ``append_*``. Factory
instances own their buffers and are not safe for concurrent use; run one
instance per worker.

Key functions:
- signed_area: Calculate polygon area using shoelace formula
- point_in_polygon: Test if point is inside polygon
- segments_cross: Test two segments for intersection
- point_line_distance: Distance from a point to a line
- perpendicular_direction: Calculate perpendicular unit vector

Key classes:
- PathSimplifier: Reduces dense polylines
- EarclipTriangulator: Triangulates polygons with holes
- CurveFlattener: Approximates cubic splines by polylines
- StrokeExtruder: Thickens paths into filled meshes
- ShapeFactory: Builds common outlines and mesh wireframes
- MeshProcessor: Runs job files in parallel
"""

from polykit.core.extruder import StrokeExtruder
from polykit.core.flattener import CurveFlattener
from polykit.core.geometry import (
    perpendicular_direction,
    point_in_polygon,
    point_line_distance,
    segments_cross,
    signed_area,
)
from polykit.core.processor import MeshProcessor, process_job
from polykit.core.shapes import ShapeFactory, curve_segments
from polykit.core.simplifier import PathSimplifier
from polykit.core.triangulator import EarclipTriangulator

__all__ = [
    # Factories
    "CurveFlattener",
    "EarclipTriangulator",
    "PathSimplifier",
    "ShapeFactory",
    "StrokeExtruder",
    # Processor classes
    "MeshProcessor",
    # Geometry functions
    "curve_segments",
    "perpendicular_direction",
    "point_in_polygon",
    "point_line_distance",
    "process_job",
    "segments_cross",
    "signed_area",
]
