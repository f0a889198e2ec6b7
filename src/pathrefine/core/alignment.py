"""Path alignment and tiling.

This module repeats one path's geometry along another path's arc length.
Copies are either moved and rotated rigidly onto the target ("preserve
shape") or bent so their x axis follows the target ("deform").

Both paths are baked to world coordinates first, so group and element
transforms are respected and the copies carry no transform.
"""

import logging
import math
import random

from pathrefine.config import AlignmentParams, Distribution
from pathrefine.core.curve_math import length, normal_at, point_at, tangent_at
from pathrefine.core.geometry import rotate_point
from pathrefine.core.transforms import bake_transform
from pathrefine.domain import Path, Point, Segment

logger = logging.getLogger(__name__)


def scale_path(path: Path, factor: float, center: Point | None = None) -> Path:
    """Scale every point of a path uniformly.

    Args:
        path: Path to scale
        factor: Scale factor
        center: Fixed point of the scaling, the origin when None

    Returns:
        Scaled path; the input itself for a factor of 1
    """
    if factor == 1:
        return path
    origin = center or Point(0.0, 0.0)

    def _scale(p: Point) -> Point:
        return Point(origin.x + (p.x - origin.x) * factor, origin.y + (p.y - origin.y) * factor)

    return path.with_segments([s.map_points(_scale) for s in path.segments])


def _normalize_position(t: float, closed: bool) -> float:
    """Wrap a position on a closed target, clamp it on an open one."""
    if 0.0 <= t <= 1.0:
        return t
    if closed:
        return t % 1.0
    return max(0.0, min(1.0, t))


class PathAligner:
    """Places copies of a source path along a target path.

    Example:
        aligner = PathAligner(AlignmentParams(repeat_count=5, random_seed=7))
        copies = aligner.align(leaf, stem)
    """

    def __init__(self, params: AlignmentParams | None = None) -> None:
        """Initialize the aligner.

        Args:
            params: Placement parameters, defaults when None
        """
        self.params = params or AlignmentParams()

    def _positions(self, rng: random.Random | None) -> list[float]:
        """Arc-length fractions of all copies before offset and wrapping."""
        p = self.params
        n = p.repeat_count
        span = p.range_end - p.range_start
        if p.distribution is Distribution.RANDOM:
            if rng is not None:
                return [p.range_start + rng.random() * span for _ in range(n)]
            logger.debug("Random distribution without a seed, spacing copies evenly")
        return [p.range_start + (0.0 if n == 1 else i / (n - 1)) * span for i in range(n)]

    def align(self, source: Path, target: Path) -> list[Path]:
        """Produce the aligned copies.

        Args:
            source: Path to repeat
            target: Path to follow

        Returns:
            ``repeat_count`` paths with ids ``"{source.id}-aligned-{i}"``;
            the source style is kept and no transform is set
        """
        p = self.params
        baked_source = bake_transform(source)
        baked_target = bake_transform(target)
        center = baked_source.center()
        scaled = scale_path(baked_source, p.scale, center)

        target_segments = baked_target.segments
        target_length = length(target_segments)
        closed = baked_target.is_closed

        rng = random.Random(p.random_seed) if p.random_seed is not None else None
        positions = self._positions(rng)

        copies = []
        for i, base in enumerate(positions):
            position = _normalize_position(base + p.offset, closed)
            rotation = p.rotation
            perp = p.perp_offset
            copy = scaled
            if rng is not None:
                rotation += rng.uniform(-p.random_rotation, p.random_rotation)
                variation = 1 + rng.uniform(-p.random_scale / 100, p.random_scale / 100)
                perp += rng.uniform(-p.random_offset, p.random_offset)
                copy = scale_path(copy, variation, center)

            if p.preserve_shape:
                placed = self._place_rigid(copy, center, target_segments, position, rotation, perp)
            else:
                placed = self._place_deformed(
                    copy, center, target_segments, target_length, closed, position, rotation, perp
                )
            copies.append(placed.with_id(f"{source.id}-aligned-{i}"))

        logger.debug(
            "Aligned %d copies of %s along %s",
            len(copies),
            source.id,
            target.id,
        )
        return copies

    @staticmethod
    def _place_rigid(
        source: Path,
        center: Point,
        target_segments: tuple[Segment, ...],
        position: float,
        rotation: float,
        perp: float,
    ) -> Path:
        """Rotate about the center by the tangent angle, then move onto the target."""
        anchor = point_at(target_segments, position)
        tx, ty = tangent_at(target_segments, position)
        angle = math.degrees(math.atan2(ty, tx)) + rotation
        dest = Point(anchor.x - ty * perp, anchor.y + tx * perp)
        dx = dest.x - center.x
        dy = dest.y - center.y

        def _place(pt: Point) -> Point:
            r = rotate_point(pt, center, angle)
            return Point(r.x + dx, r.y + dy)

        return source.with_segments([s.map_points(_place) for s in source.segments])

    @staticmethod
    def _place_deformed(
        source: Path,
        center: Point,
        target_segments: tuple[Segment, ...],
        target_length: float,
        closed: bool,
        position: float,
        rotation: float,
        perp: float,
    ) -> Path:
        """Map x to arc position and y to normal distance for every point."""
        if rotation:

            def _rotate(pt: Point) -> Point:
                return rotate_point(pt, center, rotation)

            source = source.with_segments([s.map_points(_rotate) for s in source.segments])
        min_x, _, max_x, _ = source.bounding_box()
        width = max_x - min_x
        width_on_target = width / target_length if target_length > 0 else 0.0

        def _bend(pt: Point) -> Point:
            rel_x = (pt.x - min_x) / width if width > 0 else 0.5
            rel_y = pt.y - center.y
            t = _normalize_position(position + (rel_x - 0.5) * width_on_target, closed)
            on_path = point_at(target_segments, t)
            nx, ny = normal_at(target_segments, t)
            return Point(on_path.x + nx * (perp + rel_y), on_path.y + ny * (perp + rel_y))

        return source.with_segments([s.map_points(_bend) for s in source.segments])


def align_to_path(source: Path, target: Path, params: AlignmentParams | None = None) -> list[Path]:
    """Repeat a path along another path.

    Args:
        source: Path to repeat
        target: Path to follow
        params: Placement parameters, defaults when None

    Returns:
        List of aligned copies in position order
    """
    return PathAligner(params).align(source, target)
