"""Internal Bezier evaluation helpers.

This is an internal module containing helper functions for curve math
and curve fitting. Not intended for public use.
"""

from fontTools.misc.bezierTools import (
    cubicPointAtT,
    quadraticPointAtT,
    splitCubicAtT,
    splitQuadraticAtT,
)

from pathrefine.domain import Point


def cubic_point(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """Evaluate a cubic Bezier curve at parameter t."""
    x, y = cubicPointAtT(p0.to_tuple(), p1.to_tuple(), p2.to_tuple(), p3.to_tuple(), t)
    return Point(x, y)


def quadratic_point(p0: Point, p1: Point, p2: Point, t: float) -> Point:
    """Evaluate a quadratic Bezier curve at parameter t."""
    x, y = quadraticPointAtT(p0.to_tuple(), p1.to_tuple(), p2.to_tuple(), t)
    return Point(x, y)


def cubic_derivative(
    p0: Point, p1: Point, p2: Point, p3: Point, t: float
) -> tuple[float, float]:
    """First derivative of a cubic Bezier curve at parameter t."""
    mt = 1 - t
    a = 3 * mt * mt
    b = 6 * mt * t
    c = 3 * t * t
    return (
        a * (p1.x - p0.x) + b * (p2.x - p1.x) + c * (p3.x - p2.x),
        a * (p1.y - p0.y) + b * (p2.y - p1.y) + c * (p3.y - p2.y),
    )


def cubic_second_derivative(
    p0: Point, p1: Point, p2: Point, p3: Point, t: float
) -> tuple[float, float]:
    """Second derivative of a cubic Bezier curve at parameter t."""
    mt = 1 - t
    return (
        6 * mt * (p2.x - 2 * p1.x + p0.x) + 6 * t * (p3.x - 2 * p2.x + p1.x),
        6 * mt * (p2.y - 2 * p1.y + p0.y) + 6 * t * (p3.y - 2 * p2.y + p1.y),
    )


def quadratic_derivative(p0: Point, p1: Point, p2: Point, t: float) -> tuple[float, float]:
    """First derivative of a quadratic Bezier curve at parameter t."""
    mt = 1 - t
    return (
        2 * mt * (p1.x - p0.x) + 2 * t * (p2.x - p1.x),
        2 * mt * (p1.y - p0.y) + 2 * t * (p2.y - p1.y),
    )


def quadratic_to_cubic(p0: Point, p1: Point, p2: Point) -> tuple[Point, Point]:
    """Degree-elevate a quadratic curve.

    Returns:
        The two control points of the equivalent cubic
    """
    c1 = Point(p0.x + 2.0 / 3.0 * (p1.x - p0.x), p0.y + 2.0 / 3.0 * (p1.y - p0.y))
    c2 = Point(p2.x + 2.0 / 3.0 * (p1.x - p2.x), p2.y + 2.0 / 3.0 * (p1.y - p2.y))
    return c1, c2


def split_cubic(
    p0: Point, p1: Point, p2: Point, p3: Point, t: float
) -> tuple[tuple[Point, ...], tuple[Point, ...]]:
    """Split a cubic Bezier curve at parameter t.

    Returns:
        Point tuples (start, c1, c2, end) of the two halves
    """
    first, second = splitCubicAtT(p0.to_tuple(), p1.to_tuple(), p2.to_tuple(), p3.to_tuple(), t)
    return tuple(Point(*p) for p in first), tuple(Point(*p) for p in second)


def split_quadratic(
    p0: Point, p1: Point, p2: Point, t: float
) -> tuple[tuple[Point, ...], tuple[Point, ...]]:
    """Split a quadratic Bezier curve at parameter t.

    Returns:
        Point tuples (start, c, end) of the two halves
    """
    first, second = splitQuadraticAtT(p0.to_tuple(), p1.to_tuple(), p2.to_tuple(), t)
    return tuple(Point(*p) for p in first), tuple(Point(*p) for p in second)
