"""Elliptical arc conversion for path data parsing.

SVG arcs are given in endpoint form; the engine only knows lines and
Bezier curves, so arcs are converted to cubic pieces at parse time.
"""

import math

from pathrefine.domain import Point


def arc_to_cubics(
    start: Point,
    rx: float,
    ry: float,
    rotation: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
) -> list[tuple[Point, Point, Point]]:
    """Convert an SVG elliptical arc to cubic Bezier pieces.

    Follows the endpoint-to-center conversion of the SVG implementation
    notes: radii too small to span the chord are scaled up, and the sweep is
    split into pieces of at most 90 degrees.

    Args:
        start: Current point
        rx: X radius
        ry: Y radius
        rotation: X-axis rotation in degrees
        large_arc: Large-arc flag
        sweep: Sweep flag
        end: Arc endpoint

    Returns:
        List of (control1, control2, end) tuples; empty when the endpoint
        equals the start. A zero radius yields one straight cubic.
    """
    if start == end:
        return []
    if rx == 0 or ry == 0:
        return [(start, end, end)]

    rad = math.radians(rotation)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)

    dx = (start.x - end.x) / 2
    dy = (start.y - end.y) / 2
    x1p = cos_r * dx + sin_r * dy
    y1p = -sin_r * dx + cos_r * dy

    rx = abs(rx)
    ry = abs(ry)
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    sign = 1.0 if large_arc != sweep else -1.0
    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = sign * math.sqrt(max(0.0, num / den)) if den > 0 else 0.0
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    cx = cos_r * cxp - sin_r * cyp + (start.x + end.x) / 2
    cy = sin_r * cxp + cos_r * cyp + (start.y + end.y) / 2

    theta1 = math.atan2((y1p - cyp) / ry, (x1p - cxp) / rx)
    theta2 = math.atan2((-y1p - cyp) / ry, (-x1p - cxp) / rx)
    d_theta = theta2 - theta1
    if sweep and d_theta < 0:
        d_theta += 2 * math.pi
    elif not sweep and d_theta > 0:
        d_theta -= 2 * math.pi

    pieces = max(1, math.ceil(abs(d_theta) / (math.pi / 2) - 1e-9))
    delta = d_theta / pieces
    alpha = math.sin(delta) * (math.sqrt(4 + 3 * math.tan(delta / 2) ** 2) - 1) / 3

    def _on_ellipse(ux: float, uy: float) -> Point:
        return Point(
            cos_r * rx * ux - sin_r * ry * uy + cx,
            sin_r * rx * ux + cos_r * ry * uy + cy,
        )

    result: list[tuple[Point, Point, Point]] = []
    for i in range(pieces):
        theta = theta1 + delta * i
        theta_next = theta + delta
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cos_n, sin_n = math.cos(theta_next), math.sin(theta_next)

        c1 = _on_ellipse(cos_t - sin_t * alpha, sin_t + cos_t * alpha)
        c2 = _on_ellipse(cos_n + sin_n * alpha, sin_n - cos_n * alpha)
        piece_end = end if i == pieces - 1 else _on_ellipse(cos_n, sin_n)
        result.append((c1, c2, piece_end))

    return result
