"""Polykit - Turn raw 2D point data into drawable meshes.

Polykit is a small family of polygon factories that convert paths and curves
into solid, renderable geometry: ear-clipping triangulation with holes,
Douglas-Peucker path simplification, stroke extrusion with joints and caps,
and adaptive Bezier curve flattening.

Example:
    $ polykit shapes.json

This will run every job in shapes.json and write shapes-meshes.json with the
resulting vertex and triangle index buffers.
"""

__version__ = "0.1.0"
__author__ = "Polykit Contributors"

__all__ = ["__author__", "__version__"]
