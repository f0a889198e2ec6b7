"""Composable path operations and handle smoothing.

A path operation is any callable taking a Path and returning a new Path.
Operations compose left to right, so external stages (such as an organic
smoothing service) plug into the same pipeline as the built-in engine
calls.

Key classes:
- PathOperation: Protocol for path-to-path callables
- IdentityOperation: Returns its input unchanged

Key functions:
- compose: Chain operations into one
- smooth_path: Blend curve handles towards tangent-aligned positions
"""

import logging
from typing import Protocol

from pathrefine.core._bezier import quadratic_to_cubic
from pathrefine.core.geometry import distance, lerp
from pathrefine.domain import Path, Point, Segment, SegmentType

logger = logging.getLogger(__name__)

# Handle length as a fraction of the chord for tangent-aligned handles
HANDLE_RATIO = 0.3
# Smoothness cap that keeps blended curves from collapsing into lines
MAX_SMOOTHNESS = 0.85


class PathOperation(Protocol):
    """A pure path-to-path transformation."""

    def __call__(self, path: Path) -> Path: ...


class IdentityOperation:
    """Operation returning its input unchanged."""

    def __call__(self, path: Path) -> Path:
        return path


class _Composed:
    def __init__(self, operations: tuple[PathOperation, ...]) -> None:
        self._operations = operations

    def __call__(self, path: Path) -> Path:
        for operation in self._operations:
            path = operation(path)
        return path


def compose(*operations: PathOperation) -> PathOperation:
    """Chain operations, applying them left to right.

    Returns:
        A single operation; IdentityOperation when none are given
    """
    if not operations:
        return IdentityOperation()
    if len(operations) == 1:
        return operations[0]
    return _Composed(operations)


def _unit(dx: float, dy: float) -> tuple[float, float]:
    norm = (dx * dx + dy * dy) ** 0.5
    if norm < 1e-12:
        return (0.0, 0.0)
    return (dx / norm, dy / norm)


def _tangent(before: Point, after: Point) -> tuple[float, float]:
    """Central-difference tangent through a point."""
    return _unit(after.x - before.x, after.y - before.y)


def _ideal_handles(
    seg: Segment, prev: Segment | None, nxt: Segment | None, scale: float
) -> tuple[Point, Point]:
    """Handles aligned with the tangents through both endpoints."""
    start, end = seg.start, seg.end
    chord = _unit(end.x - start.x, end.y - start.y)
    t_start = _tangent(prev.start, end) if prev is not None else chord
    t_end = _tangent(start, nxt.end) if nxt is not None else chord
    reach = distance(start, end) * HANDLE_RATIO * scale
    return (
        Point(start.x + t_start[0] * reach, start.y + t_start[1] * reach),
        Point(end.x - t_end[0] * reach, end.y - t_end[1] * reach),
    )


def _neighbour(segments: tuple[Segment, ...], index: int) -> Segment | None:
    if 0 <= index < len(segments) and segments[index].draws:
        return segments[index]
    return None


def smooth_path(path: Path, smoothness: float = 0.3, convert_lines: bool = False) -> Path:
    """Blend curve handles towards tangent-aligned positions.

    Cubic and quadratic curves move their handles part of the way towards
    handles aligned with the central-difference tangent at each endpoint.
    Lines become curves only when ``convert_lines`` is set. Anchors never
    move.

    Args:
        path: Path to smooth
        smoothness: Blend factor in [0, 1], capped at 0.85
        convert_lines: Turn lines into gently curved cubics

    Returns:
        Smoothed path with the same anchors
    """
    amount = max(0.0, min(MAX_SMOOTHNESS, smoothness))
    segments = path.segments
    if amount == 0 or len(segments) < 2:
        return path

    result = []
    for i, seg in enumerate(segments):
        prev = _neighbour(segments, i - 1)
        nxt = _neighbour(segments, i + 1)

        if seg.type is SegmentType.QUADRATIC:
            c1, c2 = quadratic_to_cubic(seg.start, seg.controls[0], seg.end)
            seg = Segment.cubic(seg.start, c1, c2, seg.end)

        if seg.type is SegmentType.CUBIC:
            ideal1, ideal2 = _ideal_handles(seg, prev, nxt, 1.0)
            c1 = lerp(seg.controls[0], ideal1, amount)
            c2 = lerp(seg.controls[1], ideal2, amount)
            result.append(Segment.cubic(seg.start, c1, c2, seg.end))
        elif seg.type is SegmentType.LINE_TO and convert_lines:
            c1, c2 = _ideal_handles(seg, prev, nxt, amount)
            result.append(Segment.cubic(seg.start, c1, c2, seg.end))
        else:
            result.append(seg)

    logger.debug("Smoothed %s with factor %.2f", path.id, amount)
    return path.with_segments(result)


class SmoothOperation:
    """smooth_path bound to fixed settings, usable as a PathOperation."""

    def __init__(self, smoothness: float = 0.3, convert_lines: bool = False) -> None:
        self.smoothness = smoothness
        self.convert_lines = convert_lines

    def __call__(self, path: Path) -> Path:
        return smooth_path(path, self.smoothness, self.convert_lines)
