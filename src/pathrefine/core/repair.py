"""Preset-driven path repair.

Repair cleans up a path in two steps at one of four intensities:

1. Close every open sub-path whose end lies within a small gap of its
   start. The gap limit is the intensity's tolerance percent times its
   auto-close multiplier, relative to the sub-path's bounding-box diagonal.
2. Simplify with the intensity's tolerance and corner angle.

Unlike automatic healing, repair does not look at the health score.
"""

import logging

from pathrefine.config import INTENSITY_PRESETS, Intensity, SimplifyConfig
from pathrefine.core.geometry import bounds_of, distance
from pathrefine.core.simplify import PathSimplifier
from pathrefine.domain import Path, Segment, SegmentType, bbox_diagonal

logger = logging.getLogger(__name__)


def auto_close(path: Path, gap_percent: float) -> Path:
    """Close open sub-paths whose end-to-start gap is small.

    Args:
        path: Path to close
        gap_percent: Largest gap that closes, as percent of the sub-path diagonal

    Returns:
        Path with the qualifying sub-paths closed; the input when none qualify
    """
    segments = list(path.segments)
    closed = 0
    for sp in reversed(path.subpaths()):
        body = segments[sp.start : sp.stop]
        if sp.closed or len(body) < 3:
            continue
        first = body[0]
        origin = first.end if first.type is SegmentType.MOVE_TO else first.start
        gap = distance(body[-1].end, origin)
        diagonal = bbox_diagonal(bounds_of(p for s in body for p in s.points))
        if gap < gap_percent / 100.0 * diagonal:
            segments.insert(sp.stop, Segment.close(body[-1].end, origin))
            closed += 1

    if not closed:
        return path
    logger.debug("Auto-closed %d sub-paths of %s (gap < %.2f%%)", closed, path.id, gap_percent)
    return path.with_segments(segments)


def repair_path(
    path: Path,
    intensity: Intensity = Intensity.MEDIUM,
    config: SimplifyConfig | None = None,
) -> Path:
    """Auto-close small gaps, then simplify at a preset intensity.

    Args:
        path: Path to repair
        intensity: Preset strength
        config: Base simplification settings; the preset overrides its
            tolerance and corner angle

    Returns:
        Repaired path
    """
    preset = INTENSITY_PRESETS[intensity]
    closed = auto_close(path, preset.tolerance_percent * preset.auto_close_multiplier)
    simplifier = PathSimplifier((config or SimplifyConfig()).with_intensity(intensity))
    return simplifier.simplify(closed)
