"""Configuration settings for pathrefine."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class Operation(str, Enum):
    """Document-wide operation run by the processor."""

    SIMPLIFY = "simplify"
    HEAL = "heal"
    AUTO_HEAL = "auto_heal"
    REPAIR = "repair"


class Distribution(str, Enum):
    """How aligned copies are spread over the target range."""

    EVEN = "even"
    RANDOM = "random"


class Intensity(str, Enum):
    """Preset strength of automatic path repair."""

    LIGHT = "light"
    MEDIUM = "medium"
    STRONG = "strong"
    EXTREME = "extreme"


class IntensityPreset(BaseModel):
    """Simplification parameters behind one repair intensity."""

    tolerance_percent: float = Field(description="Simplification tolerance in percent")
    corner_angle: float = Field(description="Turn angle in degrees that splits a curve run")
    auto_close_multiplier: float = Field(
        description="Gap under tolerance times this multiplier closes an open sub-path"
    )
    label: str
    description: str


INTENSITY_PRESETS: dict[Intensity, IntensityPreset] = {
    Intensity.LIGHT: IntensityPreset(
        tolerance_percent=0.05,
        corner_angle=20.0,
        auto_close_multiplier=1.0,
        label="Light",
        description="Subtle cleanup that keeps the most detail",
    ),
    Intensity.MEDIUM: IntensityPreset(
        tolerance_percent=0.15,
        corner_angle=30.0,
        auto_close_multiplier=2.0,
        label="Medium",
        description="Balanced optimization",
    ),
    Intensity.STRONG: IntensityPreset(
        tolerance_percent=0.5,
        corner_angle=45.0,
        auto_close_multiplier=3.0,
        label="Strong",
        description="Aggressive simplification for web graphics and traced images",
    ),
    Intensity.EXTREME: IntensityPreset(
        tolerance_percent=1.5,
        corner_angle=60.0,
        auto_close_multiplier=4.0,
        label="Extreme",
        description="Maximum simplification for heavily traced artwork",
    ),
}


class SimplifyConfig(BaseModel):
    """Configuration for the simplification pipeline.

    Distances are relative: the working tolerance of a sub-path is
    ``tolerance_percent`` percent of its bounding-box diagonal.
    """

    tolerance_percent: float = Field(
        default=0.5,
        ge=0.0,
        le=100.0,
        description="Tolerance as percentage of the sub-path bounding-box diagonal",
    )
    straightness_factor: float = Field(
        default=2.5,
        ge=0.0,
        le=10.0,
        description=(
            "Multiplier on tolerance for control-point deviation when demoting curves to lines"
        ),
    )
    closure_epsilon: float = Field(
        default=0.01,
        ge=0.0,
        le=1.0,
        description="Distance under which a closing point snaps onto the sub-path start",
    )
    corner_angle: float = Field(
        default=30.0,
        ge=0.0,
        le=180.0,
        description="Turn angle in degrees that splits a curve run for refitting",
    )
    g1_max_angle: float = Field(
        default=45.0,
        ge=0.0,
        le=180.0,
        description="Joins turning more than this (degrees) are kept as corners by the G1 pass",
    )
    min_handle_length: float = Field(
        default=0.01,
        ge=0.0,
        description="Handles shorter than this are left untouched by the G1 pass",
    )
    fit_samples: int = Field(
        default=8,
        ge=2,
        le=64,
        description="Samples taken per curve segment for refitting",
    )
    fit_iterations: int = Field(
        default=4,
        ge=0,
        le=20,
        description="Newton reparameterization rounds per fit attempt",
    )
    refit_curves: bool = Field(
        default=True,
        description="Run the least-squares curve refit stage",
    )

    def with_intensity(self, intensity: Intensity) -> "SimplifyConfig":
        """Copy with the tolerance and corner angle of a repair intensity."""
        preset = INTENSITY_PRESETS[intensity]
        return self.model_copy(
            update={
                "tolerance_percent": preset.tolerance_percent,
                "corner_angle": preset.corner_angle,
            }
        )


class HealConfig(BaseModel):
    """Configuration for the point-importance heal engine."""

    curvature_weight: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Weight of the turn-angle term in point importance",
    )
    length_weight: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Weight of the adjacent chord length term in point importance",
    )
    length_cap: float = Field(
        default=10.0,
        gt=0.0,
        description="Average chord length at which the length term saturates",
    )
    target_density: float = Field(
        default=1.5,
        gt=0.0,
        description="Target anchors per 100 length units for automatic healing",
    )
    max_heal_fraction: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Maximum fraction of anchors automatic healing may remove",
    )


class ScoringConfig(BaseModel):
    """Tunable policy of the health scoring model.

    The defaults are empirically tuned values, not geometric laws.
    """

    reference_diagonal: float = Field(
        default=80.0,
        gt=0.0,
        description="Bounding diagonal at which no scale correction applies",
    )
    density_floor: float = Field(
        default=2.0,
        ge=0.0,
        description="Scaled density (anchors per 100 units) below which there is no penalty",
    )
    density_ceiling: float = Field(
        default=8.0,
        gt=0.0,
        description="Scaled density at which the density penalty reaches 100",
    )
    density_weight: float = Field(
        default=0.65,
        ge=0.0,
        le=1.0,
        description="Weight of the density penalty",
    )
    collinear_weight: float = Field(
        default=0.35,
        ge=0.0,
        le=1.0,
        description="Weight of the collinear-anchor penalty",
    )
    collinear_angle: float = Field(
        default=0.087,
        gt=0.0,
        description="Turn angle in radians (about 5 degrees) under which an anchor is redundant",
    )
    min_chord: float = Field(
        default=0.1,
        ge=0.0,
        description="Chords shorter than this are ignored by the collinear check",
    )
    tiny_closed_points: int = Field(
        default=8,
        ge=0,
        description="Closed sub-paths with at most this many anchors always score 100",
    )
    tiny_points: int = Field(
        default=3,
        ge=0,
        description="Sub-paths with at most this many anchors always score 100",
    )
    small_diagonal: float = Field(
        default=25.0,
        ge=0.0,
        description="Bounding diagonal under which small shapes get a fixed score",
    )
    small_points: int = Field(
        default=12,
        ge=0,
        description="Anchor limit for the small shape rule",
    )
    small_score: float = Field(
        default=90.0,
        ge=0.0,
        le=100.0,
        description="Fixed score for small shapes",
    )
    optimal_threshold: float = Field(default=80.0, description="Minimum health of the optimal tier")
    acceptable_threshold: float = Field(
        default=55.0, description="Minimum health of the acceptable tier"
    )
    bloated_threshold: float = Field(default=30.0, description="Minimum health of the bloated tier")
    precision_waste_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Fraction of over-precise coordinates that triggers a precision recommendation",
    )
    lossless_savings: float = Field(
        default=0.12,
        ge=0.0,
        le=1.0,
        description="Savings fraction attributed to lossless cleanup",
    )
    heal_savings_factor: float = Field(
        default=0.5,
        ge=0.0,
        description="Heal savings per unit of average collinear fraction",
    )
    heal_savings_cap: float = Field(
        default=0.40,
        ge=0.0,
        le=1.0,
        description="Maximum heal-derived savings fraction",
    )
    max_savings: float = Field(
        default=0.52,
        ge=0.0,
        le=1.0,
        description="Overall savings cap",
    )


class AlignmentParams(BaseModel):
    """Placement of path copies along a target path.

    Positions are arc-length fractions of the target in [0, 1].
    """

    offset: float = Field(
        default=0.0,
        description="Base position added to every copy (fraction of target length)",
    )
    perp_offset: float = Field(
        default=0.0,
        description="Distance from the target along its normal",
    )
    rotation: float = Field(
        default=0.0,
        description="Extra rotation in degrees on top of the tangent angle",
    )
    preserve_shape: bool = Field(
        default=True,
        description="Move and rotate copies rigidly instead of bending them along the target",
    )
    repeat_count: int = Field(
        default=1,
        ge=1,
        le=10000,
        description="Number of copies",
    )
    scale: float = Field(
        default=1.0,
        gt=0.0,
        description="Uniform scale applied to the source about its center",
    )
    range_start: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Start of the covered part of the target",
    )
    range_end: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="End of the covered part of the target",
    )
    distribution: Distribution = Field(
        default=Distribution.EVEN,
        description=(
            "Even spacing or random positions; random positions need random_seed "
            "and fall back to even spacing without one"
        ),
    )
    random_rotation: float = Field(
        default=0.0,
        ge=0.0,
        le=180.0,
        description="Maximum random rotation in degrees, either direction",
    )
    random_scale: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Maximum random scale change in percent, either direction",
    )
    random_offset: float = Field(
        default=0.0,
        ge=0.0,
        description="Maximum random normal offset, either direction",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for reproducible variation (None = no variation)",
    )


class SerializerConfig(BaseModel):
    """Configuration for SVG serialization."""

    precision: int = Field(
        default=3,
        ge=0,
        le=8,
        description="Decimal digits for coordinates in serialized documents",
    )


class ProcessingConfig(BaseModel):
    """Configuration for document processing."""

    max_workers: int | None = Field(
        default=1,
        description="Max worker processes (1 = in-process, None = auto)",
    )
    skip_hidden: bool = Field(
        default=True,
        description="Leave invisible paths untouched",
    )
    heal_count: int | None = Field(
        default=None,
        ge=0,
        description="Anchors to remove per path in heal mode (None = optimal count)",
    )
    intensity: Intensity = Field(
        default=Intensity.MEDIUM,
        description="Preset strength of repair mode",
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


class PathRefineSettings(BaseModel):
    """Main application settings."""

    simplify: SimplifyConfig = Field(default_factory=SimplifyConfig)
    heal: HealConfig = Field(default_factory=HealConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    serializer: SerializerConfig = Field(default_factory=SerializerConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> PathRefineSettings:
    """Get default application settings."""
    return PathRefineSettings()
