"""Configuration settings for Polykit."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class Joint(str, Enum):
    """Rule for connecting two extruded line segments.

    SQUARE is the bevel joint: the corner is chamfered at the stroke
    half-width instead of being extended to a point.
    """

    MITER = "miter"
    SQUARE = "square"
    ROUND = "round"


class EndCap(str, Enum):
    """Rule for terminating an open extruded path."""

    BUTT = "butt"
    SQUARE = "square"
    ROUND = "round"


class Traversal(str, Enum):
    """Wireframe produced from a triangle mesh.

    OPEN and CLOSED trace each boundary loop of the mesh; INTERIOR traces
    every triangle separately.
    """

    NONE = "none"
    OPEN = "open"
    CLOSED = "closed"
    INTERIOR = "interior"


class Capsule(str, Enum):
    """Which ends of a capsule are rounded.

    The default end is the left one for a horizontal capsule and the bottom
    one for a vertical capsule. DEGENERATE gives an ellipse.
    """

    DEGENERATE = "degenerate"
    FULL = "full"
    HALF = "half"
    HALF_REVERSE = "half_reverse"


class SimplifierConfig(BaseModel):
    """Configuration for Douglas-Peucker path simplification."""

    epsilon: float = Field(
        default=1.0,
        description="Maximum deviation of a dropped point (non-positive keeps all non-collinear points)",
    )


class FlattenerConfig(BaseModel):
    """Configuration for Bezier curve flattening."""

    tolerance: float = Field(
        default=0.5,
        gt=0.0,
        description="Maximum perpendicular deviation of control points from the chord",
    )
    max_depth: int = Field(
        default=8,
        ge=0,
        le=16,
        description="Hard cap on de Casteljau subdivision depth",
    )


class ExtruderConfig(BaseModel):
    """Configuration for stroke extrusion."""

    joint: Joint = Field(
        default=Joint.SQUARE,
        description="Joint shape at interior path vertices",
    )
    end_cap: EndCap = Field(
        default=EndCap.BUTT,
        description="Cap shape at the ends of open paths",
    )
    miter_limit: float = Field(
        default=2.0,
        gt=0.0,
        description="Maximum miter extension as a multiple of the stroke width",
    )
    resolution: int = Field(
        default=8,
        ge=1,
        le=1 << 16,
        description="Grid subdivisions per unit used for integer offsetting",
    )
    arc_tolerance: float = Field(
        default=0.03125,
        gt=0.0,
        description="Maximum deviation of round joints and caps from a true arc",
    )


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class PolykitSettings(BaseModel):
    """Main application settings."""

    simplifier: SimplifierConfig = Field(default_factory=SimplifierConfig)
    flattener: FlattenerConfig = Field(default_factory=FlattenerConfig)
    extruder: ExtruderConfig = Field(default_factory=ExtruderConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> PolykitSettings:
    """Get default application settings."""
    return PolykitSettings()
