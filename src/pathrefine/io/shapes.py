"""Lowering of SVG shape primitives to segment sequences.

Shapes are converted at parse time so the rest of the engine only ever
sees paths:

- rect (with optional rounded corners)
- circle and ellipse (four cubic quarter arcs)
- line
- polygon (closed) and polyline (open)

Degenerate shapes (non-positive size or radius) lower to no segments.
"""

import re

from pathrefine.domain import Point, Segment

# Cubic handle length ratio for a quarter circle
KAPPA = 0.5522847498

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_points(text: str | None) -> list[Point]:
    """Parse a polygon/polyline ``points`` attribute.

    An odd trailing coordinate is ignored.

    Examples:
        >>> parse_points("0,0 10,0 10,10")
        [Point(x=0.0, y=0.0), Point(x=10.0, y=0.0), Point(x=10.0, y=10.0)]
    """
    if not text:
        return []
    values = [float(v) for v in _NUMBER_RE.findall(text)]
    return [Point(values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)]


def _corner(start: Point, end: Point, corner: Point) -> Segment:
    """Elliptic quarter arc from start to end bulging towards ``corner``."""
    c1 = Point(start.x + (corner.x - start.x) * KAPPA, start.y + (corner.y - start.y) * KAPPA)
    c2 = Point(end.x + (corner.x - end.x) * KAPPA, end.y + (corner.y - end.y) * KAPPA)
    return Segment.cubic(start, c1, c2, end)


def rect_segments(
    x: float,
    y: float,
    width: float,
    height: float,
    rx: float | None = None,
    ry: float | None = None,
) -> list[Segment]:
    """Lower a rect to a closed segment sequence.

    Missing corner radii default to each other and are clamped to half the
    width/height.

    Args:
        x: Left edge
        y: Top edge
        width: Width
        height: Height
        rx: Horizontal corner radius
        ry: Vertical corner radius

    Returns:
        Closed sub-path, or an empty list for a non-positive size
    """
    if width <= 0 or height <= 0:
        return []

    if rx is None and ry is None:
        rx = ry = 0.0
    elif rx is None:
        rx = ry
    elif ry is None:
        ry = rx
    rx = max(0.0, min(float(rx), width / 2))  # type: ignore[arg-type]
    ry = max(0.0, min(float(ry), height / 2))  # type: ignore[arg-type]

    right = x + width
    bottom = y + height

    if rx == 0 or ry == 0:
        corners = [Point(x, y), Point(right, y), Point(right, bottom), Point(x, bottom)]
        segments = [Segment.move_to(corners[0])]
        for prev, nxt in zip(corners, corners[1:]):
            segments.append(Segment.line_to(prev, nxt))
        segments.append(Segment.close(corners[-1], corners[0]))
        return segments

    start = Point(x + rx, y)
    path_points = [
        # (edge end, corner, corner end)
        (Point(right - rx, y), Point(right, y), Point(right, y + ry)),
        (Point(right, bottom - ry), Point(right, bottom), Point(right - rx, bottom)),
        (Point(x + rx, bottom), Point(x, bottom), Point(x, bottom - ry)),
        (Point(x, y + ry), Point(x, y), start),
    ]

    segments = [Segment.move_to(start)]
    current = start
    for edge_end, corner, corner_end in path_points:
        if edge_end != current:
            segments.append(Segment.line_to(current, edge_end))
            current = edge_end
        segments.append(_corner(current, corner_end, corner))
        current = corner_end
    segments.append(Segment.close(current, start))
    return segments


def ellipse_segments(cx: float, cy: float, rx: float, ry: float) -> list[Segment]:
    """Lower an ellipse to four cubic quarter arcs.

    The outline starts at the rightmost point and runs through the bottom,
    left and top points (clockwise on screen).

    Returns:
        Closed sub-path, or an empty list for a non-positive radius
    """
    if rx <= 0 or ry <= 0:
        return []

    kx = rx * KAPPA
    ky = ry * KAPPA
    right = Point(cx + rx, cy)
    bottom = Point(cx, cy + ry)
    left = Point(cx - rx, cy)
    top = Point(cx, cy - ry)

    return [
        Segment.move_to(right),
        Segment.cubic(right, Point(cx + rx, cy + ky), Point(cx + kx, cy + ry), bottom),
        Segment.cubic(bottom, Point(cx - kx, cy + ry), Point(cx - rx, cy + ky), left),
        Segment.cubic(left, Point(cx - rx, cy - ky), Point(cx - kx, cy - ry), top),
        Segment.cubic(top, Point(cx + kx, cy - ry), Point(cx + rx, cy - ky), right),
        Segment.close(right, right),
    ]


def circle_segments(cx: float, cy: float, r: float) -> list[Segment]:
    """Lower a circle to four cubic quarter arcs."""
    return ellipse_segments(cx, cy, r, r)


def line_segments(x1: float, y1: float, x2: float, y2: float) -> list[Segment]:
    """Lower a line element to a MoveTo and a LineTo."""
    start = Point(x1, y1)
    return [Segment.move_to(start), Segment.line_to(start, Point(x2, y2))]


def poly_segments(points: list[Point], closed: bool) -> list[Segment]:
    """Lower a polygon (closed) or polyline (open).

    Returns:
        Segment sequence, empty when there are no points
    """
    if not points:
        return []
    segments = [Segment.move_to(points[0])]
    for prev, nxt in zip(points, points[1:]):
        segments.append(Segment.line_to(prev, nxt))
    if closed:
        segments.append(Segment.close(points[-1], points[0]))
    return segments
