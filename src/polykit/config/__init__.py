"""Configuration management for polykit.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments, job file options or defaults.

Key classes:
- SimplifierConfig: Path simplification settings
- FlattenerConfig: Curve flattening settings
- ExtruderConfig: Stroke extrusion settings (joint, cap, miter limit, grid)
- ProcessingConfig: Batch processing settings
- LoggingConfig: Logging settings
- Joint, EndCap, Traversal, Capsule: Shape and extrusion enumerations
- PolykitSettings: Main application settings
"""

from polykit.config.settings import (
    Capsule,
    EndCap,
    ExtruderConfig,
    FlattenerConfig,
    Joint,
    LoggingConfig,
    PolykitSettings,
    ProcessingConfig,
    SimplifierConfig,
    Traversal,
    get_default_settings,
)

__all__ = [
    "Capsule",
    "EndCap",
    "ExtruderConfig",
    "FlattenerConfig",
    "Joint",
    "LoggingConfig",
    "PolykitSettings",
    "ProcessingConfig",
    "SimplifierConfig",
    "Traversal",
    "get_default_settings",
]
