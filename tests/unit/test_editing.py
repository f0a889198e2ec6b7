"""Unit tests for point editing."""

import pytest

from pathrefine.core.curve_math import segment_point
from pathrefine.core.editing import (
    add_point_to_segment,
    find_closest_point_on_segment,
    join_points,
    remove_point,
)
from pathrefine.domain import Path, Point, Segment, SegmentType
from pathrefine.exceptions import PathProcessingError
from pathrefine.io import parse_path_data


def make_path(d: str, path_id: str = "p") -> Path:
    """Path from path data text."""
    return Path(id=path_id, segments=tuple(parse_path_data(d)))


def types(path: Path) -> list[str]:
    """Command letters of a path."""
    return [s.type.value for s in path.segments]


def close_to(p: Point, x: float, y: float, tol: float = 1e-9) -> bool:
    """Whether p is within tol of (x, y)."""
    return abs(p.x - x) <= tol and abs(p.y - y) <= tol


@pytest.fixture
def polyline() -> Path:
    """Open polyline with four anchors."""
    return make_path("M 0 0 L 10 0 L 20 10 L 30 0")


@pytest.fixture
def square() -> Path:
    """Closed square with an implicit closing edge."""
    return make_path("M 0 0 L 100 0 L 100 100 L 0 100 Z")


class TestAddPoint:
    """Tests for splitting a segment at a new anchor."""

    def test_split_line(self, polyline: Path) -> None:
        """Test a line splits into two lines at t."""
        result = add_point_to_segment(polyline, 1, 0.25)

        assert types(result) == ["M", "L", "L", "L", "L"]
        assert result.segments[1].end == Point(2.5, 0)
        assert result.segments[2].start == Point(2.5, 0)
        assert result.segments[2].end == Point(10, 0)

    def test_split_cubic_keeps_shape(self) -> None:
        """Test both halves of a split cubic trace the original curve."""
        path = make_path("M 0 0 C 0 50 100 50 100 0")
        original = path.segments[1]
        result = add_point_to_segment(path, 1, 0.5)

        first, second = result.segments[1], result.segments[2]
        assert (first.type, second.type) == (SegmentType.CUBIC, SegmentType.CUBIC)
        assert first.start == original.start
        assert second.end == original.end
        assert first.end == second.start
        mid = segment_point(original, 0.5)
        assert close_to(first.end, mid.x, mid.y)
        quarter = segment_point(original, 0.25)
        half_of_first = segment_point(first, 0.5)
        assert close_to(half_of_first, quarter.x, quarter.y)

    def test_split_quadratic(self) -> None:
        """Test a quadratic splits into two quadratics."""
        path = make_path("M 0 0 Q 50 100 100 0")
        result = add_point_to_segment(path, 1)
        assert types(result) == ["M", "Q", "Q"]
        assert close_to(result.segments[1].end, 50, 50)

    def test_split_close_stays_closed(self, square: Path) -> None:
        """Test splitting the closing edge keeps the sub-path closed."""
        result = add_point_to_segment(square, 4)

        assert types(result) == ["M", "L", "L", "L", "L", "Z"]
        assert result.segments[4].end == Point(0, 50)
        assert result.segments[5].end == Point(0, 0)
        assert result.is_closed
        assert result.anchor_count == square.anchor_count + 1

    def test_noop_cases(self, polyline: Path) -> None:
        """Test MoveTo and out-of-range t leave the path unchanged."""
        assert add_point_to_segment(polyline, 0) is polyline
        assert add_point_to_segment(polyline, 1, 0.0) is polyline
        assert add_point_to_segment(polyline, 1, 1.0) is polyline

    def test_bad_index(self, polyline: Path) -> None:
        """Test an index past the end raises."""
        with pytest.raises(PathProcessingError):
            add_point_to_segment(polyline, 9)


class TestRemovePoint:
    """Tests for removing an anchor."""

    def test_lines_merge_into_line(self, polyline: Path) -> None:
        """Test removing an interior anchor between lines draws one line."""
        result = remove_point(polyline, 2)

        assert types(result) == ["M", "L", "L"]
        assert result.segments[2] == Segment.line_to(Point(10, 0), Point(30, 0))

    def test_curves_keep_outer_handles(self) -> None:
        """Test two curves merge into a cubic with the outer handles."""
        path = make_path("M 0 0 C 0 10 10 20 20 20 C 30 20 40 10 40 0")
        result = remove_point(path, 1)

        assert types(result) == ["M", "C"]
        merged = result.segments[1]
        assert merged.controls == (Point(0, 10), Point(40, 10))
        assert merged.end == Point(40, 0)

    def test_last_anchor_of_open_path(self, polyline: Path) -> None:
        """Test removing the final anchor drops its segment."""
        result = remove_point(polyline, 3)
        assert [s.end for s in result.segments] == [Point(0, 0), Point(10, 0), Point(20, 10)]

    def test_first_anchor_of_open_path(self, polyline: Path) -> None:
        """Test removing the MoveTo starts at the next anchor."""
        result = remove_point(polyline, 0)
        assert types(result) == ["M", "L", "L"]
        assert result.segments[0].end == Point(10, 0)

    def test_anchor_before_close(self, square: Path) -> None:
        """Test the ClosePath reaches back from the previous anchor."""
        result = remove_point(square, 3)

        assert types(result) == ["M", "L", "L", "Z"]
        assert result.segments[3].start == Point(100, 100)
        assert result.segments[3].end == Point(0, 0)

    def test_floor(self) -> None:
        """Test a triangle and a two-anchor line are left alone."""
        triangle = make_path("M 0 0 L 10 0 L 5 5 Z")
        line = make_path("M 0 0 L 10 0")
        assert remove_point(triangle, 1) is triangle
        assert remove_point(line, 1) is line

    def test_rejects_fixed_anchors(self, square: Path) -> None:
        """Test ClosePaths and closed start anchors cannot be removed."""
        with pytest.raises(PathProcessingError):
            remove_point(square, 4)
        with pytest.raises(PathProcessingError):
            remove_point(square, 0)

    def test_compound_only_touches_one_subpath(self) -> None:
        """Test the other sub-path is unchanged."""
        path = make_path("M 0 0 L 100 0 L 100 100 L 0 100 Z M 200 0 L 210 0 L 220 5 L 230 0")
        result = remove_point(path, 7)
        assert result.segments[:5] == path.segments[:5]
        assert len(result.subpaths()) == 2


class TestJoinPoints:
    """Tests for joining anchors with a straight line."""

    def test_drops_anchors_between(self) -> None:
        """Test the anchors between the first and last selection go."""
        path = make_path("M 0 0 L 10 10 L 20 0 L 30 10 L 40 0 L 50 10")
        result = join_points(path, [4, 1])

        assert [s.end for s in result.segments] == [
            Point(0, 0),
            Point(10, 10),
            Point(40, 0),
            Point(50, 10),
        ]
        assert result.segments[2] == Segment.line_to(Point(10, 10), Point(40, 0))

    def test_curves_between_become_line(self) -> None:
        """Test a curved stretch is replaced by a line."""
        path = make_path("M 0 0 C 0 10 10 10 10 0 C 10 -10 20 -10 20 0 L 30 0")
        result = join_points(path, [0, 2])
        assert types(result) == ["M", "L", "L"]

    def test_closed_path_keeps_close(self) -> None:
        """Test joining inside a closed sub-path keeps it closed."""
        path = make_path("M 0 0 L 50 -5 L 100 0 L 100 100 L 0 100 Z")
        result = join_points(path, [0, 2])
        assert types(result) == ["M", "L", "L", "L", "Z"]
        assert result.is_closed

    def test_needs_two_anchors(self, polyline: Path) -> None:
        """Test one anchor, or only ClosePaths, change nothing."""
        assert join_points(polyline, [2]) is polyline
        square = make_path("M 0 0 L 10 0 L 10 10 Z")
        assert join_points(square, [3, 1]) is square

    def test_floor(self) -> None:
        """Test a join that would leave a closed sub-path too small is refused."""
        path = make_path("M 0 0 L 10 0 L 10 10 L 0 10 Z")
        assert join_points(path, [0, 3]) is path

    def test_different_subpaths(self) -> None:
        """Test anchors of different sub-paths cannot be joined."""
        path = make_path("M 0 0 L 10 0 M 20 0 L 30 0")
        with pytest.raises(PathProcessingError):
            join_points(path, [1, 3])


class TestFindClosestPoint:
    """Tests for nearest-point lookup on a segment."""

    def test_line(self) -> None:
        """Test the nearest sample on a line."""
        seg = Segment.line_to(Point(0, 0), Point(100, 0))
        point, t = find_closest_point_on_segment(seg, Point(26, 40))
        assert t == 0.25
        assert point == Point(25, 0)

    def test_cubic_apex(self) -> None:
        """Test a symmetric arch is nearest at its middle."""
        seg = Segment.cubic(Point(0, 0), Point(0, 40), Point(100, 40), Point(100, 0))
        point, t = find_closest_point_on_segment(seg, Point(50, 100))
        assert t == 0.5
        assert close_to(point, 50, 30)

    def test_samples(self) -> None:
        """Test the sample count sets the resolution."""
        seg = Segment.line_to(Point(0, 0), Point(100, 0))
        _, t = find_closest_point_on_segment(seg, Point(33, 0), samples=3)
        assert t == pytest.approx(1 / 3)
