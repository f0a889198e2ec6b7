"""Arc-length measurement and sampling over segment sequences.

Lines are measured exactly; curves are approximated by a fixed number of
chords. Positions along a sequence are addressed by arc-length fraction
``t`` in [0, 1], not by raw curve parameter.

Key functions:
- segment_length: Length of one segment
- length: Total length of a segment sequence
- point_at / tangent_at / normal_at: Evaluate at an arc-length fraction
- sample: n+1 arc-length-even points

Zero-length segments never divide by zero: they are skipped while
locating positions and fall back to endpoint values.
"""

import math
from collections.abc import Sequence

from pathrefine.core._bezier import (
    cubic_derivative,
    cubic_point,
    quadratic_derivative,
    quadratic_point,
)
from pathrefine.core.geometry import distance, lerp
from pathrefine.domain import Point, Segment, SegmentType

# Chords used to approximate one curve segment
CURVE_SUBDIVISIONS = 10

_DEFAULT_TANGENT = (1.0, 0.0)


def segment_point(seg: Segment, t: float) -> Point:
    """Evaluate a segment at its own curve parameter t."""
    if seg.type is SegmentType.CUBIC:
        return cubic_point(seg.start, seg.controls[0], seg.controls[1], seg.end, t)
    if seg.type is SegmentType.QUADRATIC:
        return quadratic_point(seg.start, seg.controls[0], seg.end, t)
    if seg.type is SegmentType.MOVE_TO:
        return seg.end
    return lerp(seg.start, seg.end, t)


def segment_derivative(seg: Segment, t: float) -> tuple[float, float]:
    """First derivative of a segment at its own curve parameter t."""
    if seg.type is SegmentType.CUBIC:
        return cubic_derivative(seg.start, seg.controls[0], seg.controls[1], seg.end, t)
    if seg.type is SegmentType.QUADRATIC:
        return quadratic_derivative(seg.start, seg.controls[0], seg.end, t)
    if seg.type is SegmentType.MOVE_TO:
        return (0.0, 0.0)
    return (seg.end.x - seg.start.x, seg.end.y - seg.start.y)


def _chord_table(seg: Segment) -> list[float]:
    """Cumulative chord lengths at t = k / CURVE_SUBDIVISIONS."""
    table = [0.0]
    prev = seg.start
    for k in range(1, CURVE_SUBDIVISIONS + 1):
        pt = segment_point(seg, k / CURVE_SUBDIVISIONS)
        table.append(table[-1] + distance(prev, pt))
        prev = pt
    return table


def segment_length(seg: Segment) -> float:
    """Length of a single segment.

    Args:
        seg: Segment to measure

    Returns:
        Exact length for lines and ClosePath, chord approximation for
        curves, 0 for MoveTo
    """
    if seg.type is SegmentType.MOVE_TO:
        return 0.0
    if seg.is_curve:
        return _chord_table(seg)[-1]
    return distance(seg.start, seg.end)


def length(segments: Sequence[Segment]) -> float:
    """Total length of a segment sequence.

    A ClosePath counts as the straight line back to its sub-path start.

    Args:
        segments: Segment sequence

    Returns:
        Sum of segment lengths

    Examples:
        >>> tri = [
        ...     Segment.move_to(Point(0, 0)),
        ...     Segment.line_to(Point(0, 0), Point(100, 0)),
        ...     Segment.line_to(Point(100, 0), Point(100, 100)),
        ...     Segment.close(Point(100, 100), Point(0, 0)),
        ... ]
        >>> round(length(tri), 3)
        341.421
    """
    return sum(segment_length(s) for s in segments)


def _param_for_fraction(seg: Segment, fraction: float) -> float:
    """Convert an arc-length fraction within a segment to its curve parameter."""
    if not seg.is_curve:
        return fraction
    table = _chord_table(seg)
    total = table[-1]
    if total <= 0:
        return fraction
    target = fraction * total
    for k in range(1, len(table)):
        if table[k] >= target:
            span = table[k] - table[k - 1]
            local = (target - table[k - 1]) / span if span > 0 else 0.0
            return (k - 1 + local) / CURVE_SUBDIVISIONS
    return 1.0


def _locate(segments: Sequence[Segment], t: float) -> tuple[Segment, float] | None:
    """Find the segment holding arc-length fraction t and the local parameter.

    Returns:
        (segment, curve parameter) or None if the sequence has no length
    """
    lengths = [segment_length(s) for s in segments]
    total = sum(lengths)
    if total <= 0 or not math.isfinite(total):
        return None

    target = max(0.0, min(1.0, t)) * total
    accumulated = 0.0
    last: tuple[Segment, float] | None = None

    for seg, seg_len in zip(segments, lengths):
        if seg_len <= 0:
            continue
        last = (seg, 1.0)
        if accumulated + seg_len >= target:
            fraction = (target - accumulated) / seg_len
            return seg, _param_for_fraction(seg, fraction)
        accumulated += seg_len

    return last


def _fallback_point(segments: Sequence[Segment]) -> Point:
    if not segments:
        return Point(0.0, 0.0)
    return segments[-1].end


def point_at(segments: Sequence[Segment], t: float) -> Point:
    """Point at arc-length fraction t.

    Args:
        segments: Segment sequence
        t: Fraction of total length in [0, 1] (clamped)

    Returns:
        The point; the last endpoint when the sequence has no length
    """
    located = _locate(segments, t)
    if located is None:
        return _fallback_point(segments)
    seg, param = located
    return segment_point(seg, param)


def tangent_at(segments: Sequence[Segment], t: float) -> tuple[float, float]:
    """Unit tangent at arc-length fraction t.

    Falls back to the segment chord direction where the derivative
    vanishes, and to (1, 0) when nothing has length.
    """
    located = _locate(segments, t)
    if located is None:
        return _DEFAULT_TANGENT
    seg, param = located
    dx, dy = segment_derivative(seg, param)
    norm = math.hypot(dx, dy)
    if norm < 1e-12:
        dx = seg.end.x - seg.start.x
        dy = seg.end.y - seg.start.y
        norm = math.hypot(dx, dy)
        if norm < 1e-12:
            return _DEFAULT_TANGENT
    return (dx / norm, dy / norm)


def normal_at(segments: Sequence[Segment], t: float) -> tuple[float, float]:
    """Unit normal at arc-length fraction t (tangent rotated by 90 degrees)."""
    tx, ty = tangent_at(segments, t)
    return (-ty, tx)


def sample(segments: Sequence[Segment], n: int) -> list[Point]:
    """Sample n+1 arc-length-even points, both ends included.

    Args:
        segments: Segment sequence
        n: Number of intervals

    Returns:
        List of n + 1 points (a single point when n < 1)
    """
    if n < 1:
        return [point_at(segments, 0.0)]
    return [point_at(segments, i / n) for i in range(n + 1)]
