"""Merging paths into compound paths.

Paths are grouped by similar fill color or by the proximity of their
centers, and each group is merged into one compound path. Transforms are
baked before merging, so merged paths carry none.

A merged path takes the place of the group's topmost member, which keeps
the z-order of everything outside the group.
"""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import replace

from pathrefine.core.geometry import distance
from pathrefine.core.simplify import simplify
from pathrefine.core.transforms import bake_transform
from pathrefine.domain import Document, Path, Segment, SegmentType
from pathrefine.exceptions import PathNotFoundError

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$")
_RGB_RE = re.compile(r"^rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)$")

# Distance between black and white in RGB space
MAX_COLOR_DISTANCE = math.sqrt(3 * 255**2)

DEFAULT_COLOR_THRESHOLD = 0.95


def parse_color(value: str) -> tuple[int, int, int] | None:
    """Parse a hex (#rgb, #rrggbb) or rgb() paint.

    Examples:
        >>> parse_color("#f80")
        (255, 136, 0)
        >>> parse_color("rgb(0, 128, 255)")
        (0, 128, 255)
        >>> parse_color("red") is None
        True
    """
    text = value.strip().lower()
    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    match = _RGB_RE.match(text)
    if match:
        r, g, b = (min(255, int(v)) for v in match.groups())
        return (r, g, b)
    return None


def color_similarity(a: str, b: str) -> float:
    """Similarity of two paints in [0, 1].

    Parsed colors are compared by RGB distance. Paints that do not parse
    (named colors, gradient references) are similar only when their text
    matches.
    """
    if a.strip().lower() == b.strip().lower():
        return 1.0
    rgb_a, rgb_b = parse_color(a), parse_color(b)
    if rgb_a is None or rgb_b is None:
        return 0.0
    return 1.0 - math.dist(rgb_a, rgb_b) / MAX_COLOR_DISTANCE


def close_path(path: Path) -> Path:
    """Close every open sub-path with a ClosePath back to its start."""
    segments = list(path.segments)
    changed = False
    for sp in reversed(path.subpaths()):
        if sp.closed or len(sp) < 2:
            continue
        first = segments[sp.start]
        origin = first.end if first.type is SegmentType.MOVE_TO else first.start
        segments.insert(sp.stop, Segment.close(segments[sp.stop - 1].end, origin))
        changed = True
    return path.with_segments(segments) if changed else path


def _is_filled(path: Path) -> bool:
    return path.fill is not None and path.fill.strip().lower() != "none"


def _color_groups(paths: Sequence[Path], threshold: float) -> list[list[int]]:
    used = [False] * len(paths)
    groups: list[list[int]] = []

    for i, path in enumerate(paths):
        if used[i] or not _is_filled(path):
            continue
        used[i] = True
        group = [i]
        for j in range(i + 1, len(paths)):
            if used[j] or not _is_filled(paths[j]):
                continue
            if color_similarity(path.fill, paths[j].fill) >= threshold:  # type: ignore[arg-type]
                used[j] = True
                group.append(j)
        if len(group) > 1:
            groups.append(group)

    return groups


def _proximity_groups(paths: Sequence[Path], threshold: float) -> list[list[int]]:
    centers = [bake_transform(p).center() for p in paths]
    assigned = [False] * len(paths)
    groups: list[list[int]] = []

    for i in range(len(paths)):
        if assigned[i]:
            continue
        assigned[i] = True
        members = [i]
        pending = [i]
        while pending:
            k = pending.pop()
            for j in range(len(paths)):
                if not assigned[j] and distance(centers[k], centers[j]) <= threshold:
                    assigned[j] = True
                    members.append(j)
                    pending.append(j)
        groups.append(sorted(members))

    return groups


def group_paths_by_color(
    paths: Sequence[Path], threshold: float = DEFAULT_COLOR_THRESHOLD
) -> list[list[Path]]:
    """Group filled paths whose fill is similar to the group's first path.

    Paths without a fill (or with fill ``none``) are never grouped.

    Args:
        paths: Paths in z-order
        threshold: Minimum color similarity in [0, 1]

    Returns:
        Groups with at least two members, members in z-order
    """
    return [[paths[i] for i in group] for group in _color_groups(paths, threshold)]


def group_paths_by_proximity(paths: Sequence[Path], threshold: float) -> list[list[Path]]:
    """Group paths whose centers are chained within a distance.

    Two paths share a group when a chain of paths connects them in which
    consecutive centers are at most ``threshold`` apart. Centers are taken
    in world coordinates.

    Args:
        paths: Paths in z-order
        threshold: Maximum center distance

    Returns:
        All groups, singletons included, members in z-order
    """
    return [[paths[i] for i in group] for group in _proximity_groups(paths, threshold)]


def merge_paths(
    paths: Sequence[Path],
    fill: str | None = None,
    close_paths: bool = False,
    simplify_tolerance: float = 0.0,
) -> Path:
    """Merge paths into one compound path.

    Style comes from the first path. The merged id is the first id with a
    ``-merged`` suffix; a single path keeps its id.

    Args:
        paths: Paths to merge, in z-order
        fill: Fill for the merged path (None = first path's fill)
        close_paths: Close open sub-paths before merging
        simplify_tolerance: Simplify the result at this tolerance percent (0 = off)

    Returns:
        Merged path in world coordinates

    Raises:
        ValueError: If paths is empty
    """
    if not paths:
        raise ValueError("Cannot merge an empty path list")

    baked = [bake_transform(p) for p in paths]
    if close_paths:
        baked = [close_path(p) for p in baked]

    base = baked[0]
    if len(baked) == 1:
        merged = base
    else:
        segments = [s for p in baked for s in p.segments]
        merged = base.with_segments(segments).with_id(f"{base.id}-merged")
    if fill is not None:
        merged = replace(merged, fill=fill)
    if simplify_tolerance > 0:
        merged = simplify(merged, simplify_tolerance)
    return merged


def _replace_groups(document: Document, groups: list[list[int]], fill: str | None) -> Document:
    """Swap each group for its merged path at the group's topmost position."""
    merged_at: dict[int, Path] = {}
    dropped: set[int] = set()
    for group in groups:
        dropped.update(group[:-1])
        merged_at[group[-1]] = merge_paths([document.paths[i] for i in group], fill)

    return document.with_paths(
        [merged_at.get(i, p) for i, p in enumerate(document.paths) if i not in dropped]
    )


def merge_selected_paths(
    document: Document, path_ids: Sequence[str], fill: str | None = None
) -> Document:
    """Merge the paths with the given ids into one compound path.

    Raises:
        ValueError: If fewer than two ids are given
        PathNotFoundError: If an id is not in the document
    """
    wanted = list(dict.fromkeys(path_ids))
    if len(wanted) < 2:
        raise ValueError("Need at least two paths to merge")
    for path_id in wanted:
        if document.get_path(path_id) is None:
            raise PathNotFoundError(path_id)

    group = [i for i, p in enumerate(document.paths) if p.id in wanted]
    logger.debug("Merging %d selected paths", len(group))
    return _replace_groups(document, [group], fill)


def merge_similar_paths(
    document: Document, threshold: float = DEFAULT_COLOR_THRESHOLD
) -> tuple[Document, int]:
    """Merge every group of paths with similar fill colors.

    Returns:
        Tuple of (merged document, number of paths merged away)
    """
    groups = _color_groups(document.paths, threshold)
    if not groups:
        return document, 0
    merged_count = sum(len(g) - 1 for g in groups)
    logger.debug("Merging %d color groups, %d paths merged away", len(groups), merged_count)
    return _replace_groups(document, groups, None), merged_count


def merge_nearby_paths(document: Document, threshold: float) -> tuple[Document, int]:
    """Merge every group of paths whose centers lie within a distance.

    Returns:
        Tuple of (merged document, number of paths merged away)
    """
    groups = [g for g in _proximity_groups(document.paths, threshold) if len(g) > 1]
    if not groups:
        return document, 0
    merged_count = sum(len(g) - 1 for g in groups)
    logger.debug("Merging %d proximity groups, %d paths merged away", len(groups), merged_count)
    return _replace_groups(document, groups, None), merged_count
