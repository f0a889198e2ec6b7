"""Path model: a flat segment buffer with sub-path index ranges.

This module defines:
- SubPath: An index range over a path's segment buffer
- Path: An ordered segment sequence plus style attributes
- split_subpaths: Compute sub-path ranges for a segment sequence
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any

from pathrefine.domain.segment import Point, Segment, SegmentType

# Affine matrix (a, b, c, d, e, f) as in the SVG matrix() function
Matrix = tuple[float, float, float, float, float, float]


@dataclass(frozen=True, slots=True)
class SubPath:
    """A maximal segment run starting at one MoveTo.

    Sub-paths are index ranges over the owning path's flat segment tuple
    rather than nested containers, so serialization order stays trivial.

    Attributes:
        start: Index of the first segment (normally a MoveTo)
        stop: Index one past the last segment
        closed: True if the last segment is a ClosePath
    """

    start: int
    stop: int
    closed: bool

    def __len__(self) -> int:
        return self.stop - self.start

    def slice(self, segments: tuple[Segment, ...] | list[Segment]) -> tuple[Segment, ...]:
        """Return the segments of this sub-path.

        Args:
            segments: The owning path's full segment sequence

        Returns:
            Tuple of segments in the range
        """
        return tuple(segments[self.start : self.stop])


def split_subpaths(segments: tuple[Segment, ...] | list[Segment]) -> list[SubPath]:
    """Compute sub-path ranges for a flat segment sequence.

    A new sub-path begins at every MoveTo and after every ClosePath.

    Args:
        segments: Flat segment sequence

    Returns:
        List of SubPath ranges in order
    """
    ranges: list[SubPath] = []
    begin: int | None = None

    for i, seg in enumerate(segments):
        if seg.type is SegmentType.MOVE_TO and begin is not None and begin != i:
            ranges.append(SubPath(begin, i, closed=False))
            begin = None
        if begin is None:
            begin = i
        if seg.type is SegmentType.CLOSE:
            ranges.append(SubPath(begin, i + 1, closed=True))
            begin = None

    if begin is not None and begin < len(segments):
        ranges.append(SubPath(begin, len(segments), closed=False))

    return ranges


def count_anchors(segments: tuple[Segment, ...] | list[Segment]) -> int:
    """Count on-curve anchor points of one sub-path.

    The MoveTo and every drawing segment except ClosePath contribute one
    anchor. In a closed sub-path, an explicit final segment landing exactly
    on the start point duplicates the first anchor and is not counted.

    Args:
        segments: Segments of a single sub-path

    Returns:
        Number of distinct anchors
    """
    count = sum(1 for s in segments if s.type is not SegmentType.CLOSE)
    if (
        len(segments) >= 3
        and segments[-1].type is SegmentType.CLOSE
        and segments[-2].type is not SegmentType.MOVE_TO
        and segments[-2].end == segments[-1].end
    ):
        count -= 1
    return count


@dataclass(frozen=True)
class Path:
    """A path: ordered segments plus style attributes.

    A path may hold several sub-paths (compound path, e.g. a letter with a
    hole). All engine operations return new Path instances.

    Attributes:
        id: Identity of the path within its document
        segments: Flat segment sequence
        fill: Fill paint, None if absent
        stroke: Stroke paint, None if absent
        stroke_width: Stroke width, None if absent
        opacity: Element opacity, None if absent
        fill_opacity: Fill opacity, None if absent
        stroke_opacity: Stroke opacity, None if absent
        transform: Affine matrix (a, b, c, d, e, f), None for identity
        visible: False when hidden via visibility or display
    """

    id: str
    segments: tuple[Segment, ...] = ()
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    opacity: float | None = None
    fill_opacity: float | None = None
    stroke_opacity: float | None = None
    transform: Matrix | None = None
    visible: bool = True
    _subpaths: list[SubPath] | None = field(
        default=None, repr=False, compare=False, init=False
    )

    def subpaths(self) -> list[SubPath]:
        """Get sub-path index ranges.

        Result is cached for efficiency.

        Returns:
            List of SubPath ranges
        """
        if self._subpaths is None:
            object.__setattr__(self, "_subpaths", split_subpaths(self.segments))
        return list(self._subpaths)  # type: ignore[arg-type]

    @property
    def anchor_count(self) -> int:
        """Total number of distinct anchor points across all sub-paths."""
        return sum(count_anchors(sp.slice(self.segments)) for sp in self.subpaths())

    @property
    def is_closed(self) -> bool:
        """True when every sub-path is closed."""
        subpaths = self.subpaths()
        return bool(subpaths) and all(sp.closed for sp in subpaths)

    @property
    def is_compound(self) -> bool:
        """True when the path has more than one sub-path."""
        return len(self.subpaths()) > 1

    def is_empty(self) -> bool:
        """Check if path has no drawing segments."""
        return not any(s.draws for s in self.segments)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate control-point bounding box of the path.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y), zeros for an empty path
        """
        pts = [p for s in self.segments for p in s.points if p.is_finite()]
        if not pts:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return (min(xs), min(ys), max(xs), max(ys))

    def center(self) -> Point:
        """Center of the bounding box."""
        x0, y0, x1, y1 = self.bounding_box()
        return Point((x0 + x1) / 2, (y0 + y1) / 2)

    def with_segments(self, segments: list[Segment] | tuple[Segment, ...]) -> "Path":
        """Return a copy with a new segment sequence and the same style."""
        return replace(self, segments=tuple(segments))

    def with_id(self, path_id: str) -> "Path":
        """Return a copy with a different id."""
        return replace(self, id=path_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the path
        """
        return {
            "id": self.id,
            "segments": [s.to_dict() for s in self.segments],
            "fill": self.fill,
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "opacity": self.opacity,
            "fill_opacity": self.fill_opacity,
            "stroke_opacity": self.stroke_opacity,
            "transform": list(self.transform) if self.transform else None,
            "visible": self.visible,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Path":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of the path

        Returns:
            Path instance
        """
        transform = data.get("transform")
        return cls(
            id=data["id"],
            segments=tuple(Segment.from_dict(s) for s in data.get("segments", [])),
            fill=data.get("fill"),
            stroke=data.get("stroke"),
            stroke_width=data.get("stroke_width"),
            opacity=data.get("opacity"),
            fill_opacity=data.get("fill_opacity"),
            stroke_opacity=data.get("stroke_opacity"),
            transform=tuple(transform) if transform else None,  # type: ignore[arg-type]
            visible=data.get("visible", True),
        )


def bbox_diagonal(bbox: tuple[float, float, float, float]) -> float:
    """Length of a bounding box diagonal."""
    return math.hypot(bbox[2] - bbox[0], bbox[3] - bbox[1])
