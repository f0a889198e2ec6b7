"""Document-level bounds, transform baking and viewBox fitting."""

import logging
from dataclasses import replace

from pathrefine.core.geometry import bounds_of, translate_point
from pathrefine.core.transforms import apply_transform, bake_transform, transform_path
from pathrefine.domain import Document, Path, ViewBox

logger = logging.getLogger(__name__)


def calculate_bounding_box(document: Document) -> ViewBox | None:
    """Bounds of all path points in world coordinates.

    Control points count, so the box may be slightly larger than the ink.

    Returns:
        Bounds as a ViewBox rectangle, None for a document without points
    """
    points = [
        apply_transform(p, path.transform)
        for path in document.paths
        for seg in path.segments
        for p in seg.points
    ]
    points = [p for p in points if p.is_finite()]
    if not points:
        return None
    min_x, min_y, max_x, max_y = bounds_of(points)
    return ViewBox(min_x, min_y, max_x - min_x, max_y - min_y)


def bake_transforms(document: Document) -> Document:
    """Bake every path's transform into its coordinates."""
    return document.with_paths([bake_transform(p) for p in document.paths])


def _translate(path: Path, dx: float, dy: float) -> Path:
    return path.with_segments(
        [s.map_points(lambda p: translate_point(p, dx, dy)) for s in path.segments]
    )


def fit_to_content(document: Document, padding: float = 0.0) -> Document:
    """Crop the canvas to the artwork.

    Transforms are baked, coordinates are shifted so the content starts at
    ``(padding, padding)`` and the canvas and viewBox are resized to the
    content plus padding on every side.

    Args:
        document: Document to fit
        padding: Space kept around the content

    Returns:
        Fitted document; the input when there is no content with area
    """
    bbox = calculate_bounding_box(document)
    if bbox is None or bbox.width == 0 or bbox.height == 0:
        return document

    dx = padding - bbox.x
    dy = padding - bbox.y
    width = bbox.width + 2 * padding
    height = bbox.height + 2 * padding

    paths = [_translate(bake_transform(p), dx, dy) for p in document.paths]
    logger.debug("Fitted document to %.2f x %.2f", width, height)
    return replace(
        document,
        width=width,
        height=height,
        view_box=ViewBox(0.0, 0.0, width, height),
        paths=tuple(paths),
    )


def perfect_square(
    document: Document,
    target_size: float = 24.0,
    padding: float = 2.0,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
) -> Document:
    """Center the artwork on a square canvas, as icon sets expect.

    Content is scaled uniformly to fit ``target_size - 2 * padding`` and
    centered; the canvas and viewBox become ``target_size`` square. A
    manual offset shifts the content after centering.

    Args:
        document: Document to normalize
        target_size: Side length of the square canvas
        padding: Space kept around the content
        offset_x: Extra horizontal shift
        offset_y: Extra vertical shift

    Returns:
        Squared document; the input when there is no content
    """
    bbox = calculate_bounding_box(document)
    if bbox is None:
        return document

    content = target_size - 2 * padding
    if bbox.width > 0 and bbox.height > 0:
        scale = min(content / bbox.width, content / bbox.height)
    elif bbox.width > 0:
        scale = content / bbox.width
    elif bbox.height > 0:
        scale = content / bbox.height
    else:
        scale = 1.0

    dx = padding + (content - bbox.width * scale) / 2 - bbox.x * scale + offset_x
    dy = padding + (content - bbox.height * scale) / 2 - bbox.y * scale + offset_y
    matrix = (scale, 0.0, 0.0, scale, dx, dy)

    paths = [transform_path(bake_transform(p), matrix) for p in document.paths]
    logger.debug("Squared document to %.2f at scale %.4f", target_size, scale)
    return replace(
        document,
        width=target_size,
        height=target_size,
        view_box=ViewBox(0.0, 0.0, target_size, target_size),
        paths=tuple(paths),
    )
