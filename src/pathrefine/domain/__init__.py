"""Domain models for pathrefine.

This module contains the core domain models representing documents, paths,
segments and analysis results. All models are designed to be:

- Immutable (frozen dataclasses); operations return new values
- Serializable for inter-process communication (parallel processing)
- Independent of parser and fontTools implementation details

Key classes:
- Point: A 2D point
- Segment: One drawing command (MoveTo, LineTo, cubic, quadratic, ClosePath)
- SubPath: Index range over a path's flat segment buffer
- Path: Segments plus style attributes
- Document: Ordered paths plus canvas size/viewBox
- PointAnalysis, PathAnalysis, DocumentAnalysis: Ephemeral analysis results
"""

from pathrefine.domain.analysis import (
    ComplexityTier,
    DocumentAnalysis,
    PathAnalysis,
    PointAnalysis,
    Recommendation,
    RecommendationKind,
)
from pathrefine.domain.document import Document, ViewBox
from pathrefine.domain.path import (
    Matrix,
    Path,
    SubPath,
    bbox_diagonal,
    count_anchors,
    split_subpaths,
)
from pathrefine.domain.segment import Point, Segment, SegmentType

__all__: list[str] = [
    # Enums
    "SegmentType",
    "ComplexityTier",
    "RecommendationKind",
    # Core types
    "Matrix",
    "Point",
    "Segment",
    "SubPath",
    "Path",
    "ViewBox",
    "Document",
    # Analysis results
    "PointAnalysis",
    "Recommendation",
    "PathAnalysis",
    "DocumentAnalysis",
    # Helpers
    "bbox_diagonal",
    "count_anchors",
    "split_subpaths",
]
