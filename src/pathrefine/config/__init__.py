"""Configuration management for pathrefine.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- SimplifyConfig: Simplification pipeline settings
- Intensity, INTENSITY_PRESETS: Repair strength presets
- HealConfig: Heal engine weights and targets
- ScoringConfig: Health scoring policy constants
- AlignmentParams: Placement of copies along a target path
- SerializerConfig: Output precision
- ProcessingConfig: Document processing settings
- LoggingConfig: Logging settings
- PathRefineSettings: Main application settings
"""

from pathrefine.config.settings import (
    INTENSITY_PRESETS,
    AlignmentParams,
    Distribution,
    HealConfig,
    Intensity,
    IntensityPreset,
    LoggingConfig,
    Operation,
    PathRefineSettings,
    ProcessingConfig,
    ScoringConfig,
    SerializerConfig,
    SimplifyConfig,
    get_default_settings,
)

__all__ = [
    "INTENSITY_PRESETS",
    "AlignmentParams",
    "Distribution",
    "HealConfig",
    "Intensity",
    "IntensityPreset",
    "LoggingConfig",
    "Operation",
    "PathRefineSettings",
    "ProcessingConfig",
    "ScoringConfig",
    "SerializerConfig",
    "SimplifyConfig",
    "get_default_settings",
]
