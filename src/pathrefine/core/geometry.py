"""Point-level geometric operations.

This module provides core mathematical utilities for:
- Distances between points and from points to lines/segments
- Rotation and translation of points
- Unit vectors and turn angles
- Bounding boxes of point sets

All functions are pure and stateless.
"""

import math
from collections.abc import Iterable

from fontTools.misc.arrayTools import calcBounds

from pathrefine.domain import Point


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points.

    Examples:
        >>> distance(Point(0.0, 0.0), Point(3.0, 4.0))
        5.0
    """
    return math.hypot(b.x - a.x, b.y - a.y)


def lerp(a: Point, b: Point, t: float) -> Point:
    """Linear interpolation between two points."""
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def translate_point(p: Point, dx: float, dy: float) -> Point:
    """Translate a point by (dx, dy)."""
    return Point(p.x + dx, p.y + dy)


def rotate_point(p: Point, center: Point, angle_degrees: float) -> Point:
    """Rotate a point around a center.

    Args:
        p: Point to rotate
        center: Center of rotation
        angle_degrees: Angle in degrees (positive turns +x towards +y)

    Returns:
        Rotated point

    Examples:
        >>> q = rotate_point(Point(1.0, 0.0), Point(0.0, 0.0), 90)
        >>> round(q.x, 9), round(q.y, 9)
        (0.0, 1.0)
    """
    rad = math.radians(angle_degrees)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = p.x - center.x
    dy = p.y - center.y
    return Point(
        center.x + dx * cos_a - dy * sin_a,
        center.y + dx * sin_a + dy * cos_a,
    )


def unit_vector(a: Point, b: Point) -> tuple[float, float] | None:
    """Unit direction from a to b.

    Returns:
        (ux, uy) or None when the points coincide
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return None
    return (dx / length, dy / length)


def turn_angle(prev: Point, current: Point, nxt: Point) -> float | None:
    """Direction change at ``current`` between incoming and outgoing chords.

    Returns:
        Angle in radians in [0, pi], or None if either chord is zero length
    """
    u = unit_vector(prev, current)
    v = unit_vector(current, nxt)
    if u is None or v is None:
        return None
    dot = max(-1.0, min(1.0, u[0] * v[0] + u[1] * v[1]))
    return math.acos(dot)


def point_line_distance(p: Point, a: Point, b: Point) -> float:
    """Perpendicular distance from p to the infinite line through a and b.

    Falls back to the distance to ``a`` when a and b coincide.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return distance(p, a)
    return abs(dy * p.x - dx * p.y + b.x * a.y - b.y * a.x) / length


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from p to the closed segment [a, b].

    Uses clamped projection, so points beyond the endpoints measure to the
    nearest endpoint.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq < 1e-24:
        return distance(p, a)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


def bounds_of(points: Iterable[Point]) -> tuple[float, float, float, float]:
    """Bounding box of a point set.

    Non-finite points are ignored.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y), zeros for an empty set
    """
    coords = [p.to_tuple() for p in points if p.is_finite()]
    if not coords:
        return (0.0, 0.0, 0.0, 0.0)
    return calcBounds(coords)
