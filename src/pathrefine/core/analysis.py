"""Complexity and health scoring.

Every sub-path gets a health score from 0 (disaster) to 100 (nothing to
improve). Tiny shapes are already at their geometric minimum and always
score 100. Larger shapes are penalized for anchor density, normalized by
bounding-box size, and for collinear anchors that add bytes but no shape.

Document health is the average over all sub-paths, which keeps the score
stable when paths are merged or split.
"""

import logging
import math
import re
from collections.abc import Sequence

from pathrefine.config import ScoringConfig
from pathrefine.core.curve_math import length
from pathrefine.core.geometry import bounds_of, distance, turn_angle
from pathrefine.domain import (
    ComplexityTier,
    Document,
    DocumentAnalysis,
    Path,
    PathAnalysis,
    Point,
    Recommendation,
    RecommendationKind,
    Segment,
    SegmentType,
    bbox_diagonal,
    count_anchors,
)
from pathrefine.io.path_data import format_path_data

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"-?\d*\.\d+")

# Bytes of markup around the path data of one element
ELEMENT_OVERHEAD = 50


def _anchor_points(segments: Sequence[Segment]) -> list[Point]:
    return [s.end for s in segments if s.type is not SegmentType.CLOSE]


def precision_waste(d: str) -> float:
    """Fraction of decimal numbers in path data with more than 2 decimals.

    Trailing zeros do not count as precision.

    Examples:
        >>> precision_waste("M 0.5 1.25 L 3.14159 2.000")
        0.25
    """
    matches = _DECIMAL_RE.findall(d)
    if not matches:
        return 0.0
    wasted = sum(1 for v in matches if len(v.split(".")[1].rstrip("0")) > 2)
    return wasted / len(matches)


def format_file_size(size: int) -> str:
    """Human readable byte count.

    Examples:
        >>> format_file_size(512)
        '512 B'
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(3 * 1024 * 1024)
        '3.00 MB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class PathAnalyzer:
    """Scores path complexity and suggests fixes.

    Example:
        analyzer = PathAnalyzer()
        report = analyzer.analyze_document(document)
        print(report.health)
    """

    def __init__(self, config: ScoringConfig | None = None, precision: int = 3) -> None:
        """Initialize the analyzer.

        Args:
            config: Scoring policy, defaults when None
            precision: Coordinate precision used to estimate serialized size
        """
        self.config = config or ScoringConfig()
        self.precision = precision

    def collinear_fraction(self, segments: Sequence[Segment]) -> float:
        """Fraction of interior anchors whose direction change is negligible.

        Anchors next to a chord shorter than ``min_chord`` are not judged.

        Returns:
            Value in [0, 1]; 0 for fewer than 3 anchors
        """
        anchors = _anchor_points(segments)
        if len(anchors) < 3:
            return 0.0

        short = self.config.min_chord
        redundant = 0
        for prev, cur, nxt in zip(anchors, anchors[1:], anchors[2:]):
            if distance(prev, cur) < short or distance(cur, nxt) < short:
                continue
            angle = turn_angle(prev, cur, nxt)
            if angle is not None and angle < self.config.collinear_angle:
                redundant += 1
        return redundant / (len(anchors) - 2)

    def score_subpath(self, segments: Sequence[Segment]) -> float:
        """Health score of one sub-path.

        Args:
            segments: Segments of a single sub-path

        Returns:
            Score in [0, 100], 100 meaning nothing to improve
        """
        cfg = self.config
        total = length(segments)
        if total < 0.001 or not math.isfinite(total):
            return 100.0

        points = count_anchors(segments)
        closed = bool(segments) and segments[-1].type is SegmentType.CLOSE
        if closed and points <= cfg.tiny_closed_points:
            return 100.0
        if points <= cfg.tiny_points:
            return 100.0

        diagonal = bbox_diagonal(bounds_of(p for s in segments for p in s.points))
        if diagonal < cfg.small_diagonal and points <= cfg.small_points:
            return cfg.small_score

        scale = max(1.0, math.sqrt(diagonal / cfg.reference_diagonal))
        density = points / total * 100 / scale
        span = cfg.density_ceiling - cfg.density_floor
        density_penalty = min(100.0, max(0.0, (density - cfg.density_floor) / span * 100))
        collinear_penalty = self.collinear_fraction(segments) * 100

        health = (
            100
            - density_penalty * cfg.density_weight
            - collinear_penalty * cfg.collinear_weight
        )
        return max(0.0, min(100.0, health))

    def tier(self, health: float) -> ComplexityTier:
        """Complexity bucket of a health score."""
        if health >= self.config.optimal_threshold:
            return ComplexityTier.OPTIMAL
        if health >= self.config.acceptable_threshold:
            return ComplexityTier.ACCEPTABLE
        if health >= self.config.bloated_threshold:
            return ComplexityTier.BLOATED
        return ComplexityTier.DISASTER

    def _scored_subpaths(self, path: Path) -> list[tuple[float, float]]:
        """(health, collinear fraction) of every sub-path with length."""
        result = []
        for sp in path.subpaths():
            segments = sp.slice(path.segments)
            if length(segments) <= 0:
                continue
            result.append((self.score_subpath(segments), self.collinear_fraction(segments)))
        return result

    def analyze_path(self, path: Path) -> PathAnalysis:
        """Analyze a single path.

        The tier follows the worst sub-path, so one bloated outline in a
        compound path is not hidden by clean ones.

        Args:
            path: Path to analyze

        Returns:
            PathAnalysis with metrics and recommendations
        """
        cfg = self.config
        point_count = path.anchor_count
        total = length(path.segments)
        density = point_count / total * 100 if total > 0 else 0.0

        scored = self._scored_subpaths(path)
        health = min((h for h, _ in scored), default=100.0)
        collinear = sum(c for _, c in scored) / len(scored) if scored else 0.0

        d = format_path_data(path.segments, self.precision)
        recommendations: list[Recommendation] = []

        if health < cfg.acceptable_threshold:
            floor = 4 if path.is_closed else 2
            target = max(floor, math.floor(point_count * 0.4))
            if point_count > target:
                recommendations.append(
                    Recommendation(
                        RecommendationKind.HEAL,
                        f"Path has {point_count} points - could be reduced to ~{target} with heal",
                        target_points=target,
                    )
                )
        if health < cfg.bloated_threshold:
            recommendations.append(
                Recommendation(
                    RecommendationKind.SIMPLIFY,
                    "Path is far denser than its shape needs - run simplify",
                )
            )
        if precision_waste(d) > cfg.precision_waste_threshold:
            recommendations.append(
                Recommendation(
                    RecommendationKind.PRECISION,
                    "Coordinates have excessive decimal precision - rounding would save bytes",
                )
            )

        return PathAnalysis(
            path_id=path.id,
            point_count=point_count,
            subpath_count=len(path.subpaths()),
            path_length=total,
            point_density=density,
            health=health,
            tier=self.tier(health),
            collinear_fraction=collinear,
            estimated_size=len(d) + ELEMENT_OVERHEAD,
            recommendations=recommendations,
        )

    def analyze_document(
        self, document: Document, actual_bytes: int | None = None
    ) -> DocumentAnalysis:
        """Analyze every path of a document.

        Args:
            document: Document to analyze
            actual_bytes: Real serialized size; estimated from path data when None

        Returns:
            DocumentAnalysis with average health and savings estimate
        """
        cfg = self.config
        analyses = []
        health_sum = 0.0
        collinear_sum = 0.0
        units = 0

        for path in document.paths:
            analyses.append(self.analyze_path(path))
            for health, collinear in self._scored_subpaths(path):
                health_sum += health
                collinear_sum += collinear
                units += 1

        avg_health = health_sum / units if units else 100.0
        avg_collinear = collinear_sum / units if units else 0.0

        heal_fraction = min(cfg.heal_savings_cap, avg_collinear * cfg.heal_savings_factor)
        savings_fraction = min(cfg.max_savings, cfg.lossless_savings + heal_fraction)

        size = actual_bytes if actual_bytes is not None else sum(a.estimated_size for a in analyses)
        optimal = round(size * (1 - savings_fraction))

        logger.debug(
            "Analyzed %d paths: health %.1f, savings %.0f%%",
            len(analyses),
            avg_health,
            savings_fraction * 100,
        )
        return DocumentAnalysis(
            path_count=document.path_count,
            total_points=sum(a.point_count for a in analyses),
            health=avg_health,
            estimated_bytes=size,
            savings_fraction=savings_fraction,
            estimated_savings=size - optimal,
            paths=analyses,
        )


_default_analyzer = PathAnalyzer()


def score_subpath(segments: Sequence[Segment]) -> float:
    """Health score of one sub-path with the default policy."""
    return _default_analyzer.score_subpath(segments)


def collinear_fraction(segments: Sequence[Segment]) -> float:
    """Collinear anchor fraction with the default policy."""
    return _default_analyzer.collinear_fraction(segments)


def analyze_path(path: Path) -> PathAnalysis:
    """Analyze a path with the default policy."""
    return _default_analyzer.analyze_path(path)


def analyze_document(document: Document, actual_bytes: int | None = None) -> DocumentAnalysis:
    """Analyze a document with the default policy."""
    return _default_analyzer.analyze_document(document, actual_bytes)
