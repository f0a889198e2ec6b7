"""Point editing: add, remove and join anchors.

An anchor is addressed by the index of the segment that ends on it, so the
anchor of ``segments[i]`` is ``segments[i].end``. A ClosePath ends on the
sub-path start and carries no anchor of its own.

Edits that would leave a sub-path with fewer than 2 anchors (open) or 3
anchors (closed) return the path unchanged.

Key functions:
- add_point_to_segment: Split a segment at a curve parameter
- remove_point: Drop an anchor and merge its two segments
- join_points: Replace everything between two anchors with a straight line
- find_closest_point_on_segment: Nearest sampled point to a position
"""

import logging
import math

from pathrefine.core._bezier import quadratic_to_cubic, split_cubic, split_quadratic
from pathrefine.core.curve_math import segment_point
from pathrefine.core.geometry import distance, lerp
from pathrefine.domain import Path, Point, Segment, SegmentType, SubPath, count_anchors
from pathrefine.exceptions import PathProcessingError

logger = logging.getLogger(__name__)

MIN_OPEN_ANCHORS = 2
MIN_CLOSED_ANCHORS = 3

CLOSEST_POINT_SAMPLES = 20


def _segment_at(path: Path, index: int) -> Segment:
    if not 0 <= index < len(path.segments):
        raise PathProcessingError(path.id, f"segment index {index} is out of range")
    return path.segments[index]


def _subpath_of(path: Path, index: int) -> SubPath:
    for sp in path.subpaths():
        if sp.start <= index < sp.stop:
            return sp
    raise PathProcessingError(path.id, f"segment index {index} is out of range")


def _replace_body(path: Path, sp: SubPath, body: list[Segment]) -> Path | None:
    """Splice a new sub-path body in, None when it falls below the anchor floor."""
    floor = MIN_CLOSED_ANCHORS if sp.closed else MIN_OPEN_ANCHORS
    if count_anchors(body) < floor:
        logger.debug("Edit of %s would leave fewer than %d anchors", path.id, floor)
        return None
    return path.with_segments([*path.segments[: sp.start], *body, *path.segments[sp.stop :]])


def _outgoing_handle(seg: Segment) -> Point:
    if seg.type is SegmentType.CUBIC:
        return seg.controls[0]
    if seg.type is SegmentType.QUADRATIC:
        return quadratic_to_cubic(seg.start, seg.controls[0], seg.end)[0]
    return seg.start


def _incoming_handle(seg: Segment) -> Point:
    if seg.type is SegmentType.CUBIC:
        return seg.controls[1]
    if seg.type is SegmentType.QUADRATIC:
        return quadratic_to_cubic(seg.start, seg.controls[0], seg.end)[1]
    return seg.end


def _merge(first: Segment, second: Segment) -> Segment:
    """One segment from ``first.start`` to ``second.end`` keeping the outer handles."""
    if first.type is SegmentType.LINE_TO and second.type is SegmentType.LINE_TO:
        return Segment.line_to(first.start, second.end)
    return Segment.cubic(
        first.start, _outgoing_handle(first), _incoming_handle(second), second.end
    )


def add_point_to_segment(path: Path, segment_index: int, t: float = 0.5) -> Path:
    """Insert an anchor by splitting one segment at curve parameter t.

    Lines and ClosePaths split into two straight pieces (a split ClosePath
    stays closed), curves split exactly into two curves of the same degree.

    Args:
        path: Path to edit
        segment_index: Index of the segment to split
        t: Curve parameter of the new anchor, strictly between 0 and 1

    Returns:
        Edited path; the input for a MoveTo, a zero-length ClosePath or t
        outside (0, 1)

    Raises:
        PathProcessingError: If segment_index is out of range
    """
    seg = _segment_at(path, segment_index)
    if not 0.0 < t < 1.0 or seg.type is SegmentType.MOVE_TO:
        return path

    if seg.type is SegmentType.CUBIC:
        (_, a1, a2, mid), (_, b1, b2, _) = split_cubic(seg.start, *seg.controls, seg.end, t)
        pieces = [Segment.cubic(seg.start, a1, a2, mid), Segment.cubic(mid, b1, b2, seg.end)]
    elif seg.type is SegmentType.QUADRATIC:
        (_, a1, mid), (_, b1, _) = split_quadratic(seg.start, seg.controls[0], seg.end, t)
        pieces = [Segment.quadratic(seg.start, a1, mid), Segment.quadratic(mid, b1, seg.end)]
    elif seg.type is SegmentType.CLOSE:
        if seg.start == seg.end:
            return path
        mid = lerp(seg.start, seg.end, t)
        pieces = [Segment.line_to(seg.start, mid), Segment.close(mid, seg.end)]
    else:
        mid = lerp(seg.start, seg.end, t)
        pieces = [Segment.line_to(seg.start, mid), Segment.line_to(mid, seg.end)]

    segments = path.segments
    logger.debug("Added anchor to %s at segment %d", path.id, segment_index)
    return path.with_segments([*segments[:segment_index], *pieces, *segments[segment_index + 1 :]])


def remove_point(path: Path, segment_index: int) -> Path:
    """Remove the anchor at the end of one segment.

    The two segments meeting at the anchor become one: two lines become a
    line, anything else becomes a cubic keeping the outer handles. The last
    anchor of an open sub-path is dropped with its segment, and removing an
    open sub-path's MoveTo starts the sub-path at the next anchor.

    Args:
        path: Path to edit
        segment_index: Index of the segment ending on the anchor

    Returns:
        Edited path; the input when the sub-path would fall below its floor

    Raises:
        PathProcessingError: If the index is out of range, names a ClosePath
            or names the start anchor of a closed sub-path
    """
    seg = _segment_at(path, segment_index)
    sp = _subpath_of(path, segment_index)
    if seg.type is SegmentType.CLOSE:
        raise PathProcessingError(path.id, "a ClosePath has no anchor to remove")

    body = list(sp.slice(path.segments))
    local = segment_index - sp.start

    if seg.type is SegmentType.MOVE_TO:
        if sp.closed:
            raise PathProcessingError(path.id, "the start anchor of a closed sub-path is fixed")
        if len(body) < 2:
            return path
        body[:2] = [Segment.move_to(body[1].end)]
    elif local + 1 >= len(body):
        del body[local]
    elif body[local + 1].type is SegmentType.CLOSE:
        body[local : local + 2] = [Segment.close(seg.start, body[local + 1].end)]
    else:
        body[local : local + 2] = [_merge(seg, body[local + 1])]

    edited = _replace_body(path, sp, body)
    if edited is None:
        return path
    logger.debug("Removed anchor %d of %s", segment_index, path.id)
    return edited


def join_points(path: Path, segment_indices: list[int]) -> Path:
    """Connect the first and last selected anchors with a straight line.

    Every anchor between the two is dropped. Selected ClosePaths are
    ignored; fewer than two selected anchors leave the path unchanged.

    Args:
        path: Path to edit
        segment_indices: Indices of the segments ending on the selected anchors

    Returns:
        Edited path; the input when the sub-path would fall below its floor

    Raises:
        PathProcessingError: If an index is out of range or the anchors lie
            in different sub-paths
    """
    anchors = sorted(
        {i for i in segment_indices if _segment_at(path, i).type is not SegmentType.CLOSE}
    )
    if len(anchors) < 2:
        return path

    first, last = anchors[0], anchors[-1]
    sp = _subpath_of(path, first)
    if last >= sp.stop:
        raise PathProcessingError(path.id, "joined anchors must belong to one sub-path")

    body = list(sp.slice(path.segments))
    lo, hi = first - sp.start, last - sp.start
    bridge = Segment.line_to(body[lo].end, body[hi].end)
    edited = _replace_body(path, sp, [*body[: lo + 1], bridge, *body[hi + 1 :]])
    if edited is None:
        return path
    logger.debug("Joined anchors %d and %d of %s", first, last, path.id)
    return edited


def find_closest_point_on_segment(
    segment: Segment, position: Point, samples: int = CLOSEST_POINT_SAMPLES
) -> tuple[Point, float]:
    """Find the sampled point of a segment nearest to a position.

    Args:
        segment: Segment to search
        position: Query position
        samples: Number of equal parameter steps sampled

    Returns:
        Tuple of (nearest point, its curve parameter t)
    """
    best_point, best_t, best_distance = segment.start, 0.0, math.inf
    for k in range(samples + 1):
        t = k / samples
        point = segment_point(segment, t)
        d = distance(point, position)
        if d < best_distance:
            best_point, best_t, best_distance = point, t, d
    return best_point, best_t
