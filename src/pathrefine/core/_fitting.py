"""Internal least-squares cubic fitting (Schneider).

This is an internal module used by the simplification pipeline to refit
runs of smooth curves. Not intended for public use.

Tangent convention follows Graphics Gems "FitCurves": the left tangent
points from the first point into the curve, the right tangent points from
the last point back into the curve.
"""

import math

from pathrefine.core._bezier import cubic_derivative, cubic_point, cubic_second_derivative
from pathrefine.core.geometry import distance
from pathrefine.domain import Point

Vector = tuple[float, float]
Cubic = tuple[Point, Point, Point, Point]

# Maximum recursive splits of one run
MAX_SPLIT_DEPTH = 8


def _unit(dx: float, dy: float) -> Vector | None:
    norm = math.hypot(dx, dy)
    if norm < 1e-12:
        return None
    return (dx / norm, dy / norm)


def _offset(p: Point, v: Vector, scale: float) -> Point:
    return Point(p.x + v[0] * scale, p.y + v[1] * scale)


def _chord_parameters(points: list[Point]) -> list[float]:
    """Cumulative chord length parameters normalized to [0, 1]."""
    params = [0.0]
    for prev, cur in zip(points, points[1:]):
        params.append(params[-1] + distance(prev, cur))
    total = params[-1]
    if total <= 0:
        n = len(points) - 1
        return [i / n for i in range(len(points))] if n > 0 else [0.0]
    return [u / total for u in params]


def _center_tangent(points: list[Point], index: int) -> Vector:
    """Tangent at an interior split point, pointing backwards along the run."""
    before = points[index - 1]
    after = points[index + 1]
    tangent = _unit(before.x - after.x, before.y - after.y)
    if tangent is None:
        tangent = _unit(before.x - points[index].x, before.y - points[index].y)
    return tangent or (-1.0, 0.0)


def _heuristic_cubic(first: Point, last: Point, left: Vector, right: Vector) -> Cubic:
    """Wu/Barsky fallback: handles at one third of the chord."""
    dist = distance(first, last) / 3.0
    return (first, _offset(first, left, dist), _offset(last, right, dist), last)


def _generate_cubic(
    points: list[Point], params: list[float], left: Vector, right: Vector
) -> Cubic:
    """Solve the handle lengths minimizing squared deviation."""
    first = points[0]
    last = points[-1]

    c00 = c01 = c11 = 0.0
    x0 = x1 = 0.0
    for p, u in zip(points, params):
        mu = 1.0 - u
        b0 = mu * mu * mu
        b1 = 3.0 * mu * mu * u
        b2 = 3.0 * mu * u * u
        b3 = u * u * u
        a1 = (left[0] * b1, left[1] * b1)
        a2 = (right[0] * b2, right[1] * b2)

        c00 += a1[0] * a1[0] + a1[1] * a1[1]
        c01 += a1[0] * a2[0] + a1[1] * a2[1]
        c11 += a2[0] * a2[0] + a2[1] * a2[1]

        tx = p.x - (first.x * (b0 + b1) + last.x * (b2 + b3))
        ty = p.y - (first.y * (b0 + b1) + last.y * (b2 + b3))
        x0 += a1[0] * tx + a1[1] * ty
        x1 += a2[0] * tx + a2[1] * ty

    det = c00 * c11 - c01 * c01
    if abs(det) < 1e-12:
        return _heuristic_cubic(first, last, left, right)

    alpha_l = (x0 * c11 - x1 * c01) / det
    alpha_r = (c00 * x1 - c01 * x0) / det

    seg_len = distance(first, last)
    eps = 1e-6 * seg_len
    if alpha_l < eps or alpha_r < eps:
        return _heuristic_cubic(first, last, left, right)

    return (first, _offset(first, left, alpha_l), _offset(last, right, alpha_r), last)


def _max_error(points: list[Point], cubic: Cubic, params: list[float]) -> tuple[float, int]:
    """Largest point deviation from the curve and the index where it occurs."""
    worst = 0.0
    split = len(points) // 2
    for i in range(1, len(points) - 1):
        err = distance(cubic_point(*cubic, params[i]), points[i])
        if err > worst:
            worst = err
            split = i
    return worst, split


def _reparameterize(points: list[Point], cubic: Cubic, params: list[float]) -> list[float]:
    """One Newton-Raphson step per point towards its closest curve parameter."""
    result = []
    last = len(points) - 1
    for i, (p, u) in enumerate(zip(points, params)):
        if i == 0 or i == last:
            result.append(u)
            continue
        q = cubic_point(*cubic, u)
        d1 = cubic_derivative(*cubic, u)
        d2 = cubic_second_derivative(*cubic, u)
        diff = (q.x - p.x, q.y - p.y)
        numerator = diff[0] * d1[0] + diff[1] * d1[1]
        denominator = d1[0] * d1[0] + d1[1] * d1[1] + diff[0] * d2[0] + diff[1] * d2[1]
        if abs(denominator) < 1e-12:
            result.append(u)
        else:
            result.append(max(0.0, min(1.0, u - numerator / denominator)))
    return result


def _fit(
    points: list[Point],
    left: Vector,
    right: Vector,
    tolerance: float,
    iterations: int,
    depth: int,
) -> list[Cubic]:
    if len(points) == 2:
        return [_heuristic_cubic(points[0], points[1], left, right)]

    params = _chord_parameters(points)
    cubic = _generate_cubic(points, params, left, right)
    error, split = _max_error(points, cubic, params)
    if error <= tolerance:
        return [cubic]

    # Close misses are often fixed by better parameters alone
    if error <= tolerance * 4:
        for _ in range(iterations):
            params = _reparameterize(points, cubic, params)
            cubic = _generate_cubic(points, params, left, right)
            error, split = _max_error(points, cubic, params)
            if error <= tolerance:
                return [cubic]

    if depth >= MAX_SPLIT_DEPTH:
        return [cubic]

    center = _center_tangent(points, split)
    backwards = (-center[0], -center[1])
    return _fit(points[: split + 1], left, center, tolerance, iterations, depth + 1) + _fit(
        points[split:], backwards, right, tolerance, iterations, depth + 1
    )


def fit_cubics(
    points: list[Point],
    left_tangent: Vector,
    right_tangent: Vector,
    tolerance: float,
    iterations: int = 4,
) -> list[Cubic]:
    """Fit a chain of cubic curves through sampled points.

    Args:
        points: Ordered samples, first and last are kept exactly
        left_tangent: Unit tangent at the first point, into the curve
        right_tangent: Unit tangent at the last point, back into the curve
        tolerance: Maximum allowed point deviation
        iterations: Newton reparameterization rounds per attempt

    Returns:
        List of (start, control1, control2, end) tuples; consecutive curves
        share endpoints exactly
    """
    if len(points) < 2:
        return []
    return _fit(points, left_tangent, right_tangent, tolerance, iterations, 0)
