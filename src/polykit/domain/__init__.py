"""Domain models for polykit.

This module contains the value types exchanged with the polygon factories.
All models are designed to be:

- Copied into factories on configuration (factories never alias caller data)
- Serializable for inter-process communication (parallel processing)
- Independent of the rendering layer that consumes them

Key classes:
- Point: An immutable 2D coordinate
- Path: A point sequence with an open/closed flag
- Polygon: A vertex list plus counter-clockwise triangle indices
- CubicSpline: Piecewise cubic Bezier control data
- Job: A single batch factory run
"""

from polykit.domain.job import Job, JobKind
from polykit.domain.mesh import Polygon
from polykit.domain.path import Path, Point, WindingDirection
from polykit.domain.spline import CubicSpline

__all__: list[str] = [
    # Enums
    "JobKind",
    "WindingDirection",
    # Core types
    "CubicSpline",
    "Job",
    "Path",
    "Point",
    "Polygon",
]
