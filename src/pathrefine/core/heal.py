"""Point-importance healing.

This module removes anchors that contribute little to a path's shape. Each
interior anchor gets an importance score from its turn angle and the length
of its adjacent chords; the least important anchor is removed and its two
segments are replaced with one bridging cubic curve.

Removing several anchors keeps candidates in a heap. Only the two anchors
next to a removed one are re-scored, so healing many anchors costs
O(n log n) rather than a full re-scan per removal.

Safety floors:
- An open sub-path keeps at least 2 anchors
- A closed sub-path keeps at least 3 anchors plus its ClosePath
- Open endpoints and a closed sub-path's start anchor are never removed
- Anchors next to a non-finite point are never removed
"""

import heapq
import logging
import math
from dataclasses import dataclass

from pathrefine.config import HealConfig
from pathrefine.core.curve_math import length
from pathrefine.core.geometry import distance, turn_angle, unit_vector
from pathrefine.domain import (
    Path,
    Point,
    PointAnalysis,
    Segment,
    SegmentType,
    count_anchors,
    split_subpaths,
)

logger = logging.getLogger(__name__)

# Anchors a sub-path must have before one can be removed
MIN_OPEN_ANCHORS = 3
MIN_CLOSED_ANCHORS = 4


@dataclass(frozen=True, slots=True)
class _Candidate:
    """A removable anchor: the end of ``segments[index]``."""

    index: int
    prev: Point
    current: Point
    next: Point


def _is_drawing(seg: Segment) -> bool:
    return seg.type in (SegmentType.LINE_TO, SegmentType.CUBIC, SegmentType.QUADRATIC)


class _HealBuffer:
    """Linked segment buffer that anchors can be removed from in place.

    Removed slots become None and are skipped through the ``after`` and
    ``before`` links, so indices of the surviving segments never shift.
    """

    def __init__(self, segments: tuple[Segment, ...]) -> None:
        n = len(segments)
        self.slots: list[Segment | None] = list(segments)
        self.before = list(range(-1, n - 1))
        self.after = list(range(1, n + 1))
        self.owner = [0] * n
        self.origins: list[Point] = []
        self.anchors: list[int] = []
        self.floors: list[int] = []

        for k, sp in enumerate(split_subpaths(segments)):
            subpath = sp.slice(segments)
            for i in range(sp.start, sp.stop):
                self.owner[i] = k
            self.origins.append(subpath[0].end)
            self.anchors.append(count_anchors(subpath))
            self.floors.append(MIN_CLOSED_ANCHORS if sp.closed else MIN_OPEN_ANCHORS)

    def __len__(self) -> int:
        return len(self.slots)

    def removable(self, index: int) -> bool:
        """Whether the owning sub-path is still above its anchor floor."""
        k = self.owner[index]
        return self.anchors[k] >= self.floors[k]

    def candidate(self, index: int) -> _Candidate | None:
        """The anchor ending ``slots[index]`` if it may be removed."""
        seg = self.slots[index]
        if seg is None or not _is_drawing(seg) or not self.removable(index):
            return None
        j = self.after[index]
        if j >= len(self.slots) or self.owner[j] != self.owner[index]:
            return None
        nxt = self.slots[j]
        if nxt.type is SegmentType.CLOSE:
            # An explicit closing segment ends on the start anchor
            if seg.end == self.origins[self.owner[index]]:
                return None
        elif not _is_drawing(nxt):
            return None
        if not (seg.start.is_finite() and seg.end.is_finite() and nxt.end.is_finite()):
            return None
        return _Candidate(index, seg.start, seg.end, nxt.end)

    def candidates(self) -> list[_Candidate]:
        """All removable anchors in path order."""
        found = (self.candidate(i) for i in range(len(self.slots)))
        return [c for c in found if c is not None]

    def remove(self, c: _Candidate, bridge: Segment) -> int:
        """Replace the two segments around an anchor with ``bridge``.

        Returns:
            Index of the slot that dropped out, -1 when none did
        """
        i = c.index
        j = self.after[i]
        self.slots[i] = bridge
        self.anchors[self.owner[i]] -= 1
        if self.slots[j].type is SegmentType.CLOSE:
            # The implicit closing line becomes the bridge; Z stays as terminator
            self.slots[j] = Segment.close(c.next, c.next)
            return -1
        self.slots[j] = None
        k = self.after[j]
        self.after[i] = k
        if k < len(self.slots):
            self.before[k] = i
        return j

    def segments(self) -> list[Segment]:
        return [s for s in self.slots if s is not None]

class PathHealer:
    """Removes low-importance anchors from paths.

    Example:
        healer = PathHealer()
        healed = healer.heal_multiple(path, healer.optimal_heal_count(path))
    """

    def __init__(self, config: HealConfig | None = None) -> None:
        """Initialize the healer.

        Args:
            config: Scoring weights and targets, defaults when None
        """
        self.config = config or HealConfig()

    def importance(self, prev: Point, current: Point, nxt: Point) -> float:
        """Score how much an anchor contributes to the shape.

        Args:
            prev: Previous anchor
            current: Anchor being scored
            nxt: Next anchor

        Returns:
            Importance in [0, 1]; 0 when either adjacent chord has no length
        """
        angle = turn_angle(prev, current, nxt)
        if angle is None:
            return 0.0
        avg_length = (distance(prev, current) + distance(current, nxt)) / 2
        if not math.isfinite(avg_length):
            return 0.0
        curvature = angle / math.pi
        length_score = min(1.0, avg_length / self.config.length_cap)
        return curvature * self.config.curvature_weight + length_score * self.config.length_weight

    def analyze_points(self, path: Path) -> list[PointAnalysis]:
        """Score every removable anchor of a path.

        Args:
            path: Path to analyze

        Returns:
            One PointAnalysis per candidate anchor, in path order
        """
        result = []
        for c in _HealBuffer(path.segments).candidates():
            angle = turn_angle(c.prev, c.current, c.next) or 0.0
            result.append(
                PointAnalysis(
                    segment_index=c.index,
                    point=c.current,
                    importance=self.importance(c.prev, c.current, c.next),
                    angle=angle,
                    curvature=angle / math.pi,
                )
            )
        return result

    @staticmethod
    def bridge(prev: Point, removed: Point, nxt: Point) -> tuple[Point, Point]:
        """Control points of the cubic replacing two segments.

        Handles sit one third of the new chord along the directions the
        path took into and out of the removed anchor.

        Returns:
            (control1, control2); the chord endpoints when the handles are
            not finite
        """
        chord = distance(prev, nxt) / 3
        d1 = unit_vector(prev, removed) or unit_vector(prev, nxt) or (0.0, 0.0)
        d2 = unit_vector(removed, nxt) or unit_vector(prev, nxt) or (0.0, 0.0)
        c1 = Point(prev.x + d1[0] * chord, prev.y + d1[1] * chord)
        c2 = Point(nxt.x - d2[0] * chord, nxt.y - d2[1] * chord)
        if not (c1.is_finite() and c2.is_finite()):
            logger.debug("Non-finite bridge handles near %s, using chord endpoints", removed)
            return prev, nxt
        return c1, c2

    def heal_once(self, path: Path) -> Path:
        """Remove the least important anchor of a path.

        Args:
            path: Path to heal

        Returns:
            Healed path, or the input itself when no anchor may be removed
        """
        return self.heal_multiple(path, 1)

    def heal_multiple(self, path: Path, count: int) -> Path:
        """Remove up to ``count`` anchors, least important first.

        Each removal re-scores only its two neighbouring anchors, so the
        result equals ``count`` successive heal_once calls. Healing stops
        early when no anchor may be removed.

        Args:
            path: Path to heal
            count: Maximum number of anchors to remove

        Returns:
            Healed path, or the input itself when nothing was removed
        """
        if count <= 0:
            return path

        buffer = _HealBuffer(path.segments)
        versions = [0] * len(buffer)
        heap: list[tuple[float, int, int, _Candidate]] = []

        def push(index: int) -> None:
            versions[index] += 1
            c = buffer.candidate(index)
            if c is not None:
                score = self.importance(c.prev, c.current, c.next)
                heapq.heappush(heap, (score, index, versions[index], c))

        for c in buffer.candidates():
            score = self.importance(c.prev, c.current, c.next)
            heap.append((score, c.index, 0, c))
        heapq.heapify(heap)

        removed = 0
        while removed < count and heap:
            _, index, version, c = heapq.heappop(heap)
            if version != versions[index] or not buffer.removable(index):
                continue

            c1, c2 = self.bridge(c.prev, c.current, c.next)
            dropped = buffer.remove(c, Segment.cubic(c.prev, c1, c2, c.next))
            if dropped >= 0:
                versions[dropped] += 1
            removed += 1

            push(index)
            if buffer.before[index] >= 0:
                push(buffer.before[index])

        if removed == 0:
            return path

        logger.debug("Healed %d anchors of %s", removed, path.id)
        return path.with_segments(buffer.segments())

    def optimal_heal_count(self, path: Path) -> int:
        """Number of anchors to remove to reach the target density.

        Returns:
            Anchors above the target density, capped at the configured
            fraction of the current count, never negative
        """
        anchors = path.anchor_count
        target = math.ceil(length(path.segments) / 100 * self.config.target_density)
        count = max(0, anchors - target)
        return min(count, math.floor(anchors * self.config.max_heal_fraction))


_default_healer = PathHealer()


def importance(prev: Point, current: Point, nxt: Point) -> float:
    """Importance of an anchor with default weights."""
    return _default_healer.importance(prev, current, nxt)


def analyze_points(path: Path) -> list[PointAnalysis]:
    """Score removable anchors with default weights."""
    return _default_healer.analyze_points(path)


def heal_once(path: Path) -> Path:
    """Remove the least important anchor with default weights."""
    return _default_healer.heal_once(path)


def heal_multiple(path: Path, count: int) -> Path:
    """Remove up to ``count`` anchors with default weights."""
    return _default_healer.heal_multiple(path, count)


def optimal_heal_count(path: Path) -> int:
    """Optimal number of anchors to heal with default targets."""
    return _default_healer.optimal_heal_count(path)
