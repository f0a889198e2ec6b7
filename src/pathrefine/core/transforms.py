"""SVG transform parsing and application.

Transform attributes are parsed into fontTools ``Transform`` objects and
stored on paths as plain (a, b, c, d, e, f) matrices. Functions are applied
left to right, as SVG specifies.

Key functions:
- parse_transform: Transform attribute text to a matrix
- compose: Concatenate an outer and an inner matrix
- format_transform: Matrix back to attribute text
- apply_transform / apply_inverse_transform: Map single points
- transform_path / bake_transform: Map whole paths
"""

import logging
import math
import re
from dataclasses import replace

from fontTools.misc.transform import Identity, Transform

from pathrefine.domain import Matrix, Path, Point
from pathrefine.utils.formatting import format_number

logger = logging.getLogger(__name__)

_FUNCTION_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def to_transform(matrix: Matrix | None) -> Transform:
    """Wrap a matrix tuple in a fontTools Transform (identity for None)."""
    if matrix is None:
        return Identity
    return Transform(*matrix)


def to_matrix(transform: Transform) -> Matrix:
    """Unwrap a fontTools Transform into a plain matrix tuple."""
    return tuple(float(v) for v in transform)  # type: ignore[return-value]


def parse_transform(text: str | None) -> Matrix | None:
    """Parse an SVG transform attribute.

    Supports matrix, translate, scale, rotate (with optional centre), skewX
    and skewY. Functions with the wrong number of arguments are ignored.

    Args:
        text: Attribute value

    Returns:
        The composed matrix, or None when the text yields identity

    Examples:
        >>> parse_transform("translate(10, 20) scale(2)")
        (2.0, 0.0, 0.0, 2.0, 10.0, 20.0)
        >>> parse_transform("") is None
        True
    """
    if not text:
        return None

    t = Identity
    for name, raw_args in _FUNCTION_RE.findall(text):
        args = [float(v) for v in _NUMBER_RE.findall(raw_args)]
        n = len(args)

        if name == "matrix" and n == 6:
            t = t.transform(args)
        elif name == "translate" and n in (1, 2):
            t = t.translate(args[0], args[1] if n == 2 else 0.0)
        elif name == "scale" and n in (1, 2):
            t = t.scale(args[0], args[1] if n == 2 else args[0])
        elif name == "rotate" and n in (1, 3):
            angle = math.radians(args[0])
            if n == 3:
                cx, cy = args[1], args[2]
                t = t.translate(cx, cy).rotate(angle).translate(-cx, -cy)
            else:
                t = t.rotate(angle)
        elif name == "skewX" and n == 1:
            t = t.skew(math.radians(args[0]), 0)
        elif name == "skewY" and n == 1:
            t = t.skew(0, math.radians(args[0]))
        else:
            logger.debug("Ignoring malformed transform function %s(%s)", name, raw_args)

    matrix = to_matrix(t)
    if matrix == _IDENTITY:
        return None
    return matrix


def compose(outer: Matrix | None, inner: Matrix | None) -> Matrix | None:
    """Concatenate two matrices: ``inner`` applies first, then ``outer``.

    Args:
        outer: Ancestor (group) matrix
        inner: Descendant matrix

    Returns:
        Combined matrix, None when both are None
    """
    if outer is None:
        return inner
    if inner is None:
        return outer
    return to_matrix(to_transform(outer).transform(inner))


def format_transform(matrix: Matrix | None, precision: int = 6) -> str | None:
    """Write a matrix as transform attribute text.

    Pure translations are written as ``translate(...)``, everything else as
    ``matrix(...)``.

    Returns:
        Attribute text, None for identity
    """
    if matrix is None or tuple(matrix) == _IDENTITY:
        return None
    a, b, c, d, e, f = matrix
    if (a, b, c, d) == (1.0, 0.0, 0.0, 1.0):
        return f"translate({format_number(e, precision)},{format_number(f, precision)})"
    values = " ".join(format_number(v, precision) for v in matrix)
    return f"matrix({values})"


def apply_transform(point: Point, matrix: Matrix | None) -> Point:
    """Map a point from local to world coordinates."""
    if matrix is None:
        return point
    x, y = to_transform(matrix).transformPoint(point.to_tuple())
    return Point(x, y)


def apply_inverse_transform(point: Point, matrix: Matrix | None) -> Point:
    """Map a point from world to local coordinates.

    A singular matrix cannot be inverted; the point is returned unchanged.
    """
    if matrix is None:
        return point
    a, b, c, d, _, _ = matrix
    if abs(a * d - b * c) < 1e-10:
        logger.debug("Singular transform, cannot invert: %s", matrix)
        return point
    x, y = to_transform(matrix).inverse().transformPoint(point.to_tuple())
    return Point(x, y)


def transform_path(path: Path, matrix: Matrix | None) -> Path:
    """Apply a matrix to every point of a path's geometry.

    The path's own transform attribute is left as is.
    """
    if matrix is None:
        return path
    t = to_transform(matrix)

    def _map(p: Point) -> Point:
        x, y = t.transformPoint(p.to_tuple())
        return Point(x, y)

    return path.with_segments([s.map_points(_map) for s in path.segments])


def bake_transform(path: Path) -> Path:
    """Bake a path's transform into its coordinates.

    Returns:
        A path in world coordinates with no transform attribute; the input
        itself when it has no transform
    """
    if path.transform is None:
        return path
    return replace(transform_path(path, path.transform), transform=None)
