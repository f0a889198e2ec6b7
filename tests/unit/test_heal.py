"""Unit tests for point-importance healing."""

import math
from unittest.mock import patch

import pytest

from pathrefine.config import HealConfig
from pathrefine.core.heal import (
    PathHealer,
    analyze_points,
    heal_multiple,
    heal_once,
    importance,
    optimal_heal_count,
)
from pathrefine.domain import Path, Point, Segment, SegmentType
from pathrefine.io import parse_path_data


def make_path(d: str, path_id: str = "p") -> Path:
    """Path from path data text."""
    return Path(id=path_id, segments=tuple(parse_path_data(d)))


def types(path: Path) -> list[str]:
    """Command letters of a path."""
    return [s.type.value for s in path.segments]


@pytest.fixture
def polyline() -> Path:
    """Open polyline with five anchors; (60, 0.5) is nearly straight."""
    return make_path("M 0 0 L 20 20 L 40 0 L 60 0.5 L 80 0")


@pytest.fixture
def square() -> Path:
    """Closed 100x100 square with an implicit closing edge."""
    return make_path("M 0 0 L 100 0 L 100 100 L 0 100 Z")


class TestImportance:
    """Tests for anchor importance scoring."""

    def test_straight_anchor_only_scores_length(self) -> None:
        """Test a collinear anchor has no curvature term."""
        score = importance(Point(0, 0), Point(20, 0), Point(40, 0))
        assert score == pytest.approx(0.3)

    def test_right_angle(self) -> None:
        """Test a 90 degree turn with long chords."""
        score = importance(Point(0, 0), Point(100, 0), Point(100, 100))
        assert score == pytest.approx(0.5 * 0.7 + 0.3)

    def test_short_chords_reduce_score(self) -> None:
        """Test the length term grows until the cap."""
        short = importance(Point(0, 0), Point(1, 0), Point(2, 0))
        assert short == pytest.approx(0.1 * 0.3)

    def test_zero_chord(self) -> None:
        """Test coincident anchors score zero."""
        assert importance(Point(0, 0), Point(0, 0), Point(5, 5)) == 0.0

    def test_custom_weights(self) -> None:
        """Test weights come from the configuration."""
        healer = PathHealer(HealConfig(curvature_weight=1.0, length_weight=0.0))
        score = healer.importance(Point(0, 0), Point(10, 0), Point(10, 10))
        assert score == pytest.approx(0.5)


class TestAnalyzePoints:
    """Tests for candidate analysis."""

    def test_open_endpoints_excluded(self, polyline: Path) -> None:
        """Test only interior anchors are candidates."""
        points = analyze_points(polyline)
        assert [a.point for a in points] == [Point(20, 20), Point(40, 0), Point(60, 0.5)]
        assert [a.segment_index for a in points] == [1, 2, 3]

    def test_closed_start_excluded(self, square: Path) -> None:
        """Test the start anchor of a closed sub-path is not a candidate."""
        points = analyze_points(square)
        assert Point(0, 0) not in [a.point for a in points]
        assert len(points) == 3
        assert all(a.angle == pytest.approx(math.pi / 2) for a in points)
        assert all(a.curvature == pytest.approx(0.5) for a in points)

    def test_below_floor_has_no_candidates(self) -> None:
        """Test a triangle cannot lose anchors."""
        assert analyze_points(make_path("M 0 0 L 10 0 L 10 10 Z")) == []
        assert analyze_points(make_path("M 0 0 L 10 0")) == []


class TestHealOnce:
    """Tests for single anchor removal."""

    def test_removes_near_straight_anchor(self, polyline: Path) -> None:
        """Test the least important anchor goes and neighbours stay exact."""
        healed = heal_once(polyline)

        assert healed.anchor_count == 4
        assert types(healed) == ["M", "L", "L", "C"]
        bridge = healed.segments[3]
        assert bridge.start == Point(40, 0)
        assert bridge.end == Point(80, 0)
        anchors = [s.end for s in healed.segments]
        assert Point(60, 0.5) not in anchors

    def test_bridge_handles_follow_original_directions(self, polyline: Path) -> None:
        """Test handles sit a third of the chord along the old directions."""
        bridge = heal_once(polyline).segments[3]
        c1, c2 = bridge.controls
        assert math.hypot(c1.x - 40, c1.y) == pytest.approx(40 / 3)
        assert math.hypot(c2.x - 80, c2.y) == pytest.approx(40 / 3)
        assert c1.y > 0
        assert c2.y > 0

    def test_first_candidate_wins_ties(self, square: Path) -> None:
        """Test equal importances remove the earliest anchor."""
        healed = heal_once(square)
        assert types(healed) == ["M", "C", "L", "Z"]
        assert healed.segments[1].start == Point(0, 0)
        assert healed.segments[1].end == Point(100, 100)

    def test_last_anchor_before_close(self) -> None:
        """Test removing the anchor before an implicit closing edge."""
        path = make_path("M 0 0 L 100 0 L 100 100 L 0 100 L 0 50 Z")
        healed = heal_once(path)

        assert types(healed) == ["M", "L", "L", "L", "C", "Z"]
        bridge = healed.segments[4]
        assert bridge.start == Point(0, 100)
        assert bridge.end == Point(0, 0)
        assert healed.segments[5].start == healed.segments[5].end == Point(0, 0)
        assert healed.anchor_count == 4

    def test_noop_returns_input(self) -> None:
        """Test a path at its floor is returned unchanged."""
        path = make_path("M 0 0 L 10 10")
        assert heal_once(path) is path

    def test_keeps_style_and_id(self, polyline: Path) -> None:
        """Test healing only replaces geometry."""
        styled = Path(id="styled", segments=polyline.segments, fill="red", stroke_width=2.0)
        healed = heal_once(styled)
        assert healed.id == "styled"
        assert healed.fill == "red"
        assert healed.stroke_width == 2.0

    def test_non_finite_handles_fall_back(self) -> None:
        """Test bridge handles are always finite."""
        c1, c2 = PathHealer.bridge(Point(0, 0), Point(0, 0), Point(0, 0))
        assert c1.is_finite()
        assert c2.is_finite()


class TestHealMultiple:
    """Tests for repeated healing and its safety floors."""

    def test_open_floor(self, polyline: Path) -> None:
        """Test an open path keeps two anchors."""
        healed = heal_multiple(polyline, 100)
        assert healed.anchor_count == 2
        assert healed.segments[0].end == Point(0, 0)
        assert healed.segments[-1].end == Point(80, 0)

    def test_closed_floor(self, square: Path) -> None:
        """Test a closed path keeps three anchors plus ClosePath."""
        healed = heal_multiple(square, 100)
        assert healed.anchor_count == 3
        assert healed.segments[-1].type is SegmentType.CLOSE

    def test_compound_floors_per_subpath(self, square: Path) -> None:
        """Test each sub-path keeps its own floor."""
        second = make_path("M 200 0 L 300 0 L 300 100 L 250 150 L 200 100 Z")
        compound = square.with_segments([*square.segments, *second.segments])

        healed = heal_multiple(compound, 100)

        assert [sp.closed for sp in healed.subpaths()] == [True, True]
        assert types(healed).count("M") == 2
        assert types(healed).count("Z") == 2
        assert healed.anchor_count == 6

    def test_count_limits_removals(self, polyline: Path) -> None:
        """Test at most count anchors are removed."""
        assert heal_multiple(polyline, 1).anchor_count == 4
        assert heal_multiple(polyline, 0) is polyline
        assert heal_multiple(polyline, -3) is polyline

    def test_matches_repeated_single_heals(self) -> None:
        """Test removing many anchors at once equals removing them one by one."""
        d = "M 0 0 " + " ".join(f"L {i * 3} {20 * math.sin(i / 7):.3f}" for i in range(1, 120))
        path = make_path(d)

        stepwise = path
        for _ in range(60):
            stepwise = heal_once(stepwise)

        assert heal_multiple(path, 60).segments == stepwise.segments

    def test_rescores_only_neighbours(self) -> None:
        """Test each removal re-scores a bounded number of anchors."""
        d = "M 0 0 " + " ".join(f"L {i} {10 * math.sin(i / 9):.3f}" for i in range(1, 500))
        path = make_path(d)
        healer = PathHealer()

        with patch.object(healer, "importance", wraps=healer.importance) as scored:
            healed = healer.heal_multiple(path, 300)

        assert healed.anchor_count == path.anchor_count - 300
        assert scored.call_count <= path.anchor_count + 2 * 300


class TestNonFiniteInput:
    """Tests that healing never spreads NaN into new control points."""

    @pytest.fixture
    def broken(self) -> Path:
        """Open polyline whose third anchor has a NaN coordinate."""
        points = [Point(0, 0), Point(10, 0), Point(math.nan, 5), Point(30, 0)]
        points += [Point(40, 2), Point(50, 0), Point(60, 1)]
        segments = [Segment.move_to(points[0])]
        segments += [Segment.line_to(a, b) for a, b in zip(points, points[1:])]
        return Path(id="broken", segments=tuple(segments))

    def test_neighbours_of_nan_are_kept(self, broken: Path) -> None:
        """Test anchors touching the NaN point are not candidates."""
        assert [a.point for a in analyze_points(broken)] == [Point(40, 2), Point(50, 0)]

    def test_bridges_stay_finite(self, broken: Path) -> None:
        """Test healing as far as possible only creates finite handles."""
        healed = heal_multiple(broken, 10)

        assert healed.anchor_count == broken.anchor_count - 2
        curves = [s for s in healed.segments if s.type is SegmentType.CUBIC]
        assert curves
        assert all(c.is_finite() for s in curves for c in s.controls)
        assert sum(1 for s in healed.segments if math.isnan(s.end.x)) == 1

    def test_overflowing_handles_use_chord_endpoints(self) -> None:
        """Test handles that overflow fall back to the bridge endpoints."""
        prev, nxt = Point(-1e308, 0), Point(1e308, 0)
        assert PathHealer.bridge(prev, Point(0, 1), nxt) == (prev, nxt)


class TestOptimalHealCount:
    """Tests for the automatic heal count."""

    def test_sparse_path_needs_nothing(self) -> None:
        """Test paths below the target density are left alone."""
        d = "M 0 0 " + " ".join(f"L {i * 100} 0" for i in range(1, 11))
        assert optimal_heal_count(make_path(d)) == 0

    def test_dense_path_capped(self) -> None:
        """Test the count never exceeds the configured fraction."""
        d = "M 0 0 " + " ".join(f"L {i} 0" for i in range(1, 101))
        # 101 anchors over 100 units; cap is 70 percent of the anchors
        assert optimal_heal_count(make_path(d)) == 70

    def test_empty_path(self) -> None:
        """Test an empty path needs no healing."""
        assert optimal_heal_count(Path(id="empty")) == 0
