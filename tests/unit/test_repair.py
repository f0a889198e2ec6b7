"""Unit tests for preset-driven repair."""

import math

import pytest

from pathrefine.config import INTENSITY_PRESETS, Intensity, SimplifyConfig
from pathrefine.core.repair import auto_close, repair_path
from pathrefine.domain import Path, Point, SegmentType
from pathrefine.io import parse_path_data


def make_path(d: str, path_id: str = "p") -> Path:
    """Path from path data text."""
    return Path(id=path_id, segments=tuple(parse_path_data(d)))


def nearly_closed(gap: float) -> Path:
    """Open 100x100 square whose end stops ``gap`` short of its start."""
    return make_path(f"M 0 0 L 100 0 L 100 100 L 0 100 L 0 {gap}")


class TestPresets:
    """Tests for the intensity preset table."""

    def test_every_intensity_has_a_preset(self) -> None:
        """Test the table covers all intensities."""
        assert set(INTENSITY_PRESETS) == set(Intensity)

    def test_presets_grow_stronger(self) -> None:
        """Test tolerance, corner angle and gap multiplier rise with intensity."""
        order = [Intensity.LIGHT, Intensity.MEDIUM, Intensity.STRONG, Intensity.EXTREME]
        presets = [INTENSITY_PRESETS[i] for i in order]
        for weaker, stronger in zip(presets, presets[1:], strict=False):
            assert weaker.tolerance_percent < stronger.tolerance_percent
            assert weaker.corner_angle < stronger.corner_angle
            assert weaker.auto_close_multiplier < stronger.auto_close_multiplier

    def test_with_intensity_keeps_other_settings(self) -> None:
        """Test a preset only overrides tolerance and corner angle."""
        base = SimplifyConfig(refit_curves=False, g1_max_angle=10.0)
        config = base.with_intensity(Intensity.STRONG)

        assert config.tolerance_percent == 0.5
        assert config.corner_angle == 45.0
        assert config.refit_curves is False
        assert config.g1_max_angle == 10.0
        assert base.tolerance_percent == 0.5 and base.corner_angle == 30.0


class TestAutoClose:
    """Tests for closing small end-to-start gaps."""

    def test_small_gap_closes(self) -> None:
        """Test a gap under the limit gets a ClosePath."""
        # Diagonal is about 141, so 0.3% allows a gap of about 0.42
        closed = auto_close(nearly_closed(0.3), 0.3)

        assert closed.is_closed
        assert closed.segments[-1].type is SegmentType.CLOSE
        assert closed.segments[-1].end == Point(0, 0)

    def test_large_gap_stays_open(self) -> None:
        """Test a visible gap is left alone."""
        path = nearly_closed(5.0)
        assert auto_close(path, 0.3) is path

    def test_per_subpath(self) -> None:
        """Test each sub-path is judged by its own gap and size."""
        path = make_path(
            "M 0 0 L 100 0 L 100 100 L 0 100 L 0 0.2 M 200 0 L 210 0 L 210 10 L 200 10 L 200 2"
        )
        closed = auto_close(path, 0.3)

        first, second = closed.subpaths()
        assert first.closed
        assert not second.closed


class TestRepairPath:
    """Tests for the full repair pipeline."""

    def test_closes_then_simplifies(self) -> None:
        """Test a traced square with a tiny gap comes out closed and lean."""
        along = " ".join(f"L {i * 10} {0.01 * (i % 2)}" for i in range(1, 11))
        down = " ".join(f"L 100 {i * 10}" for i in range(1, 11))
        back = " ".join(f"L {100 - i * 10} 100" for i in range(1, 11))
        up = " ".join(f"L 0 {100 - i * 10}" for i in range(1, 10))
        path = make_path(f"M 0 0 {along} {down} {back} {up} L 0 0.2")

        repaired = repair_path(path, Intensity.MEDIUM)

        assert repaired.is_closed
        assert repaired.anchor_count == 4

    @pytest.mark.parametrize("intensity", list(Intensity))
    def test_never_adds_anchors(self, intensity: Intensity) -> None:
        """Test every intensity leaves at most the input's anchors."""
        wave = " ".join(f"L {i} {10 * math.sin(i / 4):.4f}" for i in range(1, 80))
        path = make_path(f"M 0 0 {wave}")
        assert repair_path(path, intensity).anchor_count <= path.anchor_count

    def test_stronger_removes_more(self) -> None:
        """Test extreme repair is at least as lean as light repair."""
        wave = " ".join(f"L {i} {10 * math.sin(i / 4):.4f}" for i in range(1, 80))
        path = make_path(f"M 0 0 {wave}")
        light = repair_path(path, Intensity.LIGHT)
        extreme = repair_path(path, Intensity.EXTREME)
        assert len(extreme.segments) <= len(light.segments)

    def test_keeps_id_and_style(self) -> None:
        """Test repair only replaces geometry."""
        path = Path(
            id="logo",
            segments=tuple(parse_path_data("M 0 0 L 5 0 L 10 0 L 10 10")),
            fill="red",
        )
        repaired = repair_path(path)
        assert (repaired.id, repaired.fill) == ("logo", "red")
