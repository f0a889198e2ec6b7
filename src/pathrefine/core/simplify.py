"""Multi-stage path simplification.

Each sub-path is simplified on its own, in three stages:

1. Straightness: curves whose control points hug the chord become lines
2. Vertex reduction: Ramer-Douglas-Peucker over runs of lines
3. Curve refit: runs of smoothly joined curves are refit with fewer cubics

The stages run in rounds until a round leaves the sub-path unchanged, so a
simplified path is a fixed point: simplifying it again returns it as is.

Tolerance is relative: a percentage of the sub-path's bounding-box
diagonal, so results scale with shape size. Closed sub-paths end with an
explicit segment landing exactly on the start point, followed by ClosePath,
and get a G1 pass that lines up handles across smooth joins and the seam.

A simplified sub-path never has more drawing segments than its input, is
never empty and is never merged with another sub-path.
"""

import logging
import math

from pathrefine.config import SimplifyConfig
from pathrefine.core._bezier import quadratic_to_cubic
from pathrefine.core._fitting import fit_cubics
from pathrefine.core.curve_math import segment_derivative, segment_point
from pathrefine.core.geometry import bounds_of, distance, point_segment_distance
from pathrefine.domain import Path, Point, Segment, SegmentType, bbox_diagonal

logger = logging.getLogger(__name__)

# Upper bound on pipeline rounds per sub-path
MAX_ROUNDS = 32


def _edge_count(segments: list[Segment] | tuple[Segment, ...]) -> int:
    """Drawing segments that put ink down; a zero-length ClosePath is not an edge."""
    count = 0
    for seg in segments:
        if seg.type is SegmentType.MOVE_TO:
            continue
        if seg.type is SegmentType.CLOSE and seg.start == seg.end:
            continue
        count += 1
    return count


def _direction(seg: Segment, t: float) -> tuple[float, float] | None:
    """Unit derivative of a segment, falling back to its chord."""
    dx, dy = segment_derivative(seg, t)
    norm = math.hypot(dx, dy)
    if norm < 1e-12:
        dx = seg.end.x - seg.start.x
        dy = seg.end.y - seg.start.y
        norm = math.hypot(dx, dy)
        if norm < 1e-12:
            return None
    return (dx / norm, dy / norm)


def _rdp_keep(points: list[Point], tolerance: float) -> list[int]:
    """Indices kept by Ramer-Douglas-Peucker reduction.

    Iterative, so long runs cannot exhaust the recursion limit.
    """
    n = len(points)
    keep = [False] * n
    keep[0] = keep[-1] = True
    stack = [(0, n - 1)]

    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        worst = -1.0
        index = first
        for k in range(first + 1, last):
            d = point_segment_distance(points[k], points[first], points[last])
            if d > worst:
                worst = d
                index = k
        if worst > tolerance:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [i for i in range(n) if keep[i]]


class PathSimplifier:
    """Reduces segment count of paths within a relative tolerance.

    Example:
        simplifier = PathSimplifier()
        smaller = simplifier.simplify(path, tolerance_percent=0.5)
    """

    def __init__(self, config: SimplifyConfig | None = None) -> None:
        """Initialize the simplifier.

        Args:
            config: Pipeline settings, defaults when None
        """
        self.config = config or SimplifyConfig()

    def simplify(self, path: Path, tolerance_percent: float | None = None) -> Path:
        """Simplify every sub-path of a path.

        Args:
            path: Path to simplify
            tolerance_percent: Tolerance as percent of each sub-path's
                bounding-box diagonal, configured default when None

        Returns:
            Simplified path with the same style and sub-path count
        """
        if tolerance_percent is None:
            tolerance_percent = self.config.tolerance_percent

        segments: list[Segment] = []
        for sp in path.subpaths():
            segments.extend(self.simplify_subpath(sp.slice(path.segments), tolerance_percent))

        logger.debug(
            "Simplified %s: %d -> %d segments",
            path.id,
            len(path.segments),
            len(segments),
        )
        return path.with_segments(segments)

    def simplify_subpath(
        self, subpath: tuple[Segment, ...], tolerance_percent: float
    ) -> list[Segment]:
        """Simplify the segments of a single sub-path.

        Args:
            subpath: Segments from one MoveTo up to (and including) its ClosePath
            tolerance_percent: Tolerance as percent of the bounding-box diagonal

        Returns:
            Replacement segments; the input when nothing can be improved
        """
        original = list(subpath)
        if not original:
            return original
        if original[0].type is not SegmentType.MOVE_TO:
            original.insert(0, Segment.move_to(original[0].start))

        origin = original[0].end
        closed = original[-1].type is SegmentType.CLOSE
        body = [s for s in original[1:] if s.type is not SegmentType.CLOSE]
        if not body:
            return original
        if not all(p.is_finite() for s in original for p in s.points):
            logger.debug("Skipping sub-path with non-finite coordinates")
            return original

        if closed:
            body = self._close_exactly(body, origin)

        for _ in range(MAX_ROUNDS):
            refined = self._run_stages(body, closed, tolerance_percent)
            if refined == body:
                break
            body = refined
        else:
            logger.debug("Simplification did not settle after %d rounds", MAX_ROUNDS)

        result = [Segment.move_to(origin), *body]
        if closed:
            result.append(Segment.close(origin, origin))

        if _edge_count(result) > _edge_count(original):
            return original
        return result

    def _run_stages(
        self, body: list[Segment], closed: bool, tolerance_percent: float
    ) -> list[Segment]:
        """One round of straightening, vertex reduction, refit and G1 alignment."""
        diagonal = bbox_diagonal(bounds_of(p for s in body for p in s.points))
        tolerance = tolerance_percent / 100.0 * (diagonal if diagonal > 0 else 1.0)

        body = [self._straighten(s, tolerance) for s in body]
        body = self._reduce_lines(body, tolerance)
        if self.config.refit_curves:
            body = self._refit_curves(body, tolerance)
        body = self._enforce_g1(body, closed)

        non_degenerate = [
            s for s in body if not (s.type is SegmentType.LINE_TO and s.start == s.end)
        ]
        return non_degenerate or body

    def _close_exactly(self, body: list[Segment], origin: Point) -> list[Segment]:
        """Make the last segment end bit-exactly on the sub-path start."""
        last = body[-1]
        if last.end == origin:
            return body
        if distance(last.end, origin) <= self.config.closure_epsilon:
            return [*body[:-1], last.with_end(origin)]
        return [*body, Segment.line_to(last.end, origin)]

    def _straighten(self, seg: Segment, tolerance: float) -> Segment:
        """Demote a curve to a line when its control points hug the chord."""
        if not seg.is_curve:
            return seg
        deviation = max(point_segment_distance(c, seg.start, seg.end) for c in seg.controls)
        if deviation <= self.config.straightness_factor * tolerance:
            return Segment.line_to(seg.start, seg.end)
        return seg

    def _reduce_lines(self, body: list[Segment], tolerance: float) -> list[Segment]:
        """Run vertex reduction over every maximal run of lines."""
        result: list[Segment] = []
        run: list[Segment] = []

        def flush() -> None:
            if len(run) < 2:
                result.extend(run)
            else:
                points = [run[0].start, *(s.end for s in run)]
                kept = [points[i] for i in _rdp_keep(points, tolerance)]
                result.extend(Segment.line_to(a, b) for a, b in zip(kept, kept[1:]))
            run.clear()

        for seg in body:
            if seg.type is SegmentType.LINE_TO:
                run.append(seg)
            else:
                flush()
                result.append(seg)
        flush()
        return result

    def _is_smooth_join(self, a: Segment, b: Segment) -> bool:
        out_dir = _direction(a, 1.0)
        in_dir = _direction(b, 0.0)
        if out_dir is None or in_dir is None:
            return False
        dot = max(-1.0, min(1.0, out_dir[0] * in_dir[0] + out_dir[1] * in_dir[1]))
        return math.degrees(math.acos(dot)) <= self.config.corner_angle

    def _refit_curves(self, body: list[Segment], tolerance: float) -> list[Segment]:
        """Refit runs of smoothly joined curves with fewer cubics."""
        result: list[Segment] = []
        run: list[Segment] = []

        def flush() -> None:
            if len(run) >= 2:
                result.extend(self._refit_run(run, tolerance))
            else:
                result.extend(run)
            run.clear()

        for seg in body:
            if seg.is_curve:
                if run and not self._is_smooth_join(run[-1], seg):
                    flush()
                run.append(seg)
            else:
                flush()
                result.append(seg)
        flush()
        return result

    def _refit_run(self, run: list[Segment], tolerance: float) -> list[Segment]:
        left = _direction(run[0], 0.0)
        end_dir = _direction(run[-1], 1.0)
        if left is None or end_dir is None:
            return run
        right = (-end_dir[0], -end_dir[1])

        samples = self.config.fit_samples
        points = [run[0].start]
        for seg in run:
            points.extend(segment_point(seg, k / samples) for k in range(1, samples))
            points.append(seg.end)

        cubics = fit_cubics(points, left, right, tolerance, self.config.fit_iterations)
        if not cubics or len(cubics) >= len(run):
            return run
        if not all(p.is_finite() for cubic in cubics for p in cubic):
            return run

        # Endpoints are pinned so the run stays connected to its neighbours
        refit = [Segment.cubic(*cubic) for cubic in cubics]
        refit[0] = refit[0].with_start(run[0].start)
        refit[-1] = refit[-1].with_end(run[-1].end)
        return refit

    def _align_handles(self, a: Segment, b: Segment) -> tuple[Segment, Segment]:
        """Make the handles around the join of ``a`` and ``b`` collinear."""
        joint = a.end
        h_in = a.controls[-1]
        h_out = b.controls[0]
        len_in = distance(h_in, joint)
        len_out = distance(joint, h_out)
        if len_in < self.config.min_handle_length or len_out < self.config.min_handle_length:
            return a, b

        u_in = ((joint.x - h_in.x) / len_in, (joint.y - h_in.y) / len_in)
        u_out = ((h_out.x - joint.x) / len_out, (h_out.y - joint.y) / len_out)
        dot = max(-1.0, min(1.0, u_in[0] * u_out[0] + u_in[1] * u_out[1]))
        if dot >= 1.0 - 1e-12:
            return a, b
        if math.degrees(math.acos(dot)) > self.config.g1_max_angle:
            return a, b

        ax = u_in[0] + u_out[0]
        ay = u_in[1] + u_out[1]
        norm = math.hypot(ax, ay)
        if norm < 1e-12:
            return a, b
        ax /= norm
        ay /= norm

        new_in = Point(joint.x - ax * len_in, joint.y - ay * len_in)
        new_out = Point(joint.x + ax * len_out, joint.y + ay * len_out)
        return (
            Segment(a.type, a.start, a.end, (*a.controls[:-1], new_in)),
            Segment(b.type, b.start, b.end, (new_out, *b.controls[1:])),
        )

    def _enforce_g1(self, body: list[Segment], closed: bool) -> list[Segment]:
        """Line up handles across smooth cubic joins, including the closing seam."""
        body = [self._as_cubic(s) for s in body]
        joins = [(i, i + 1) for i in range(len(body) - 1)]
        if closed and len(body) >= 2:
            joins.append((len(body) - 1, 0))

        for i, j in joins:
            a, b = body[i], body[j]
            if a.type is SegmentType.CUBIC and b.type is SegmentType.CUBIC:
                body[i], body[j] = self._align_handles(a, b)
        return body

    @staticmethod
    def _as_cubic(seg: Segment) -> Segment:
        """Quadratics are raised to cubics so the G1 pass can move their handles."""
        if seg.type is not SegmentType.QUADRATIC:
            return seg
        c1, c2 = quadratic_to_cubic(seg.start, seg.controls[0], seg.end)
        return Segment.cubic(seg.start, c1, c2, seg.end)


def simplify(
    path: Path, tolerance_percent: float, config: SimplifyConfig | None = None
) -> Path:
    """Simplify a path.

    Args:
        path: Path to simplify
        tolerance_percent: Tolerance as percent of each sub-path's bounding-box diagonal
        config: Pipeline settings, defaults when None

    Returns:
        Simplified path

    Examples:
        >>> from pathrefine.io import parse_path_data
        >>> line = " ".join(f"L {i} 0" for i in range(1, 101))
        >>> p = Path(id="p", segments=tuple(parse_path_data("M 0 0 " + line)))
        >>> [s.type.value for s in simplify(p, 0.1).segments]
        ['M', 'L']
    """
    return PathSimplifier(config).simplify(path, tolerance_percent)
