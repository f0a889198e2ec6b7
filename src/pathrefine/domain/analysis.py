"""Analysis result types.

Ephemeral values derived per call by the heal engine and the health
scoring model. They are never stored on a Path or Document.

Key classes:
- PointAnalysis: Importance score of one anchor
- ComplexityTier: Health bucket of a path
- Recommendation: One optimization suggestion
- PathAnalysis: Complexity metrics of a single path
- DocumentAnalysis: Aggregated metrics of a whole document
"""

from dataclasses import dataclass, field
from enum import Enum

from pathrefine.domain.segment import Point


@dataclass(frozen=True, slots=True)
class PointAnalysis:
    """Importance of a single anchor point.

    Attributes:
        segment_index: Index of the segment ending at this anchor
        point: The anchor position
        importance: Score in [0, 1]; low values are safe to remove
        angle: Turn angle at the anchor in radians
        curvature: Turn angle normalized by pi
    """

    segment_index: int
    point: Point
    importance: float
    angle: float
    curvature: float


class ComplexityTier(str, Enum):
    """Health bucket of a path, best to worst."""

    OPTIMAL = "optimal"
    ACCEPTABLE = "acceptable"
    BLOATED = "bloated"
    DISASTER = "disaster"


class RecommendationKind(str, Enum):
    """Kind of optimization suggested for a path."""

    PRECISION = "precision"
    HEAL = "heal"
    SIMPLIFY = "simplify"


@dataclass(frozen=True, slots=True)
class Recommendation:
    """A single optimization suggestion.

    Attributes:
        kind: What kind of fix is suggested
        message: Human readable description
        target_points: Suggested anchor count after the fix, if applicable
    """

    kind: RecommendationKind
    message: str
    target_points: int | None = None


@dataclass(frozen=True)
class PathAnalysis:
    """Complexity metrics of a path.

    Attributes:
        path_id: Id of the analyzed path
        point_count: Anchor count
        subpath_count: Number of sub-paths
        path_length: Total arc length
        point_density: Anchors per 100 length units
        health: Health score 0..100 of the worst sub-path
        tier: Complexity bucket derived from health
        collinear_fraction: Average fraction of redundant interior anchors
        estimated_size: Estimated serialized size in bytes
        recommendations: Suggested fixes
    """

    path_id: str
    point_count: int
    subpath_count: int
    path_length: float
    point_density: float
    health: float
    tier: ComplexityTier
    collinear_fraction: float
    estimated_size: int
    recommendations: list[Recommendation] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentAnalysis:
    """Aggregated health of a document.

    Attributes:
        path_count: Number of paths
        total_points: Anchor count across all paths
        health: Average sub-path health 0..100
        estimated_bytes: Serialized document length
        savings_fraction: Estimated reducible fraction of the size (0..1)
        estimated_savings: Estimated reducible bytes
        paths: Per-path analyses in document order
    """

    path_count: int
    total_points: int
    health: float
    estimated_bytes: int
    savings_fraction: float
    estimated_savings: int
    paths: list[PathAnalysis] = field(default_factory=list)
