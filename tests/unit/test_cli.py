"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pathrefine import __version__
from pathrefine.cli.app import app
from pathrefine.io import load_document

runner = CliRunner()


def dense_line_d(count: int = 200) -> str:
    """Over-sampled straight line along y = 0."""
    return "M 0 0 " + " ".join(f"L {i * 100 / count:.4f} 0" for i in range(1, count + 1))


@pytest.fixture
def drawing(tmp_path: Path) -> Path:
    """SVG file with a clean square and a bloated line."""
    svg = tmp_path / "art.svg"
    svg.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200">'
        '<path id="sq" d="M 0 0 L 10 0 L 10 10 L 0 10 Z" fill="red"/>'
        f'<path id="line" d="{dense_line_d()}" stroke="black"/>'
        "</svg>",
        encoding="utf-8",
    )
    return svg


@pytest.fixture
def small_drawing(tmp_path: Path) -> Path:
    """SVG file with a rectangle far from the origin."""
    svg = tmp_path / "icon.svg"
    svg.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="500" height="500">'
        '<path id="box" d="M 10 10 L 60 10 L 60 40 L 10 40 Z"/>'
        "</svg>",
        encoding="utf-8",
    )
    return svg


@pytest.fixture
def palette(tmp_path: Path) -> Path:
    """SVG file with two nearly identical reds around a blue square."""
    svg = tmp_path / "palette.svg"
    svg.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'
        '<path id="a" d="M 0 0 L 10 0 L 10 10 Z" fill="#ff0000"/>'
        '<path id="b" d="M 40 40 L 60 40 L 60 60 L 40 60 Z" fill="blue"/>'
        '<path id="c" d="M 80 80 L 90 80 L 90 90 Z" fill="#fe0101"/>'
        "</svg>",
        encoding="utf-8",
    )
    return svg


class TestCommon:
    """Tests for behavior shared by all commands."""

    def test_version(self, drawing: Path) -> None:
        """Test the version option."""
        result = runner.invoke(app, ["fit", str(drawing), "--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_input(self, tmp_path: Path) -> None:
        """Test a missing input file fails."""
        result = runner.invoke(app, ["simplify", str(tmp_path / "nope.svg")])
        assert result.exit_code == 1

    def test_directory_input(self, tmp_path: Path) -> None:
        """Test a directory is rejected."""
        result = runner.invoke(app, ["analyze", str(tmp_path)])
        assert result.exit_code == 1

    def test_invalid_svg(self, tmp_path: Path) -> None:
        """Test malformed XML fails with exit code 1."""
        svg = tmp_path / "bad.svg"
        svg.write_text("<svg><path", encoding="utf-8")
        result = runner.invoke(app, ["fit", str(svg), "--quiet"])
        assert result.exit_code == 1


class TestSimplifyCommand:
    """Tests for the simplify command."""

    def test_default_output(self, drawing: Path) -> None:
        """Test the simplified file is written next to the input."""
        result = runner.invoke(app, ["simplify", str(drawing), "--quiet"])

        assert result.exit_code == 0
        output = drawing.with_name("art-simplified.svg")
        assert output.exists()
        doc = load_document(output)
        assert [p.id for p in doc.paths] == ["sq", "line"]
        assert doc.paths[1].anchor_count == 2

    def test_custom_output(self, drawing: Path, tmp_path: Path) -> None:
        """Test an explicit output path."""
        output = tmp_path / "out.svg"
        result = runner.invoke(
            app, ["simplify", str(drawing), "-o", str(output), "-t", "1.0", "--quiet"]
        )
        assert result.exit_code == 0
        assert output.exists()

    def test_report(self, drawing: Path) -> None:
        """Test the summary is printed without --quiet."""
        result = runner.invoke(app, ["simplify", str(drawing)])
        assert result.exit_code == 0
        assert "pathrefine" in result.output


class TestHealCommand:
    """Tests for the heal command."""

    def test_auto_and_count_conflict(self, drawing: Path) -> None:
        """Test --auto and --count cannot be combined."""
        result = runner.invoke(app, ["heal", str(drawing), "--auto", "--count", "3"])
        assert result.exit_code == 1

    def test_auto(self, drawing: Path) -> None:
        """Test auto heal only touches flagged paths."""
        result = runner.invoke(app, ["heal", str(drawing), "--auto", "--quiet"])

        assert result.exit_code == 0
        doc = load_document(drawing.with_name("art-healed.svg"))
        assert doc.paths[0].anchor_count == 4
        assert doc.paths[1].anchor_count == 80

    def test_count(self, drawing: Path) -> None:
        """Test a fixed count per path."""
        result = runner.invoke(app, ["heal", str(drawing), "-n", "1", "--quiet"])

        assert result.exit_code == 0
        doc = load_document(drawing.with_name("art-healed.svg"))
        assert doc.paths[0].anchor_count == 3
        assert doc.paths[1].anchor_count == 200


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_quiet_prints_health(self, drawing: Path) -> None:
        """Test quiet mode prints only the document health."""
        result = runner.invoke(app, ["analyze", str(drawing), "--quiet"])
        assert result.exit_code == 0
        assert result.output.strip() == "50.0"

    def test_json_report(self, drawing: Path, tmp_path: Path) -> None:
        """Test the report can be written as JSON."""
        report_path = tmp_path / "report.json"
        result = runner.invoke(
            app, ["analyze", str(drawing), "-o", str(report_path), "--quiet"]
        )

        assert result.exit_code == 0
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["path_count"] == 2
        assert [p["path_id"] for p in report["paths"]] == ["sq", "line"]
        assert report["paths"][1]["tier"] == "disaster"

    def test_verbose(self, drawing: Path) -> None:
        """Test the full report mentions every path."""
        result = runner.invoke(app, ["analyze", str(drawing), "--verbose"])
        assert result.exit_code == 0
        assert "sq" in result.output
        assert "disaster" in result.output


class TestAlignCommand:
    """Tests for the align command."""

    def test_copies_follow_target(self, drawing: Path) -> None:
        """Test copies are inserted right after the target."""
        result = runner.invoke(
            app,
            ["align", str(drawing), "-s", "sq", "-t", "line", "-n", "3", "--quiet"],
        )

        assert result.exit_code == 0
        doc = load_document(drawing.with_name("art-aligned.svg"))
        assert [p.id for p in doc.paths] == [
            "sq",
            "line",
            "sq-aligned-0",
            "sq-aligned-1",
            "sq-aligned-2",
        ]
        assert doc.paths[2].fill == "red"

    def test_remove_source(self, drawing: Path) -> None:
        """Test the source can be dropped."""
        result = runner.invoke(
            app,
            ["align", str(drawing), "-s", "sq", "-t", "line", "--remove-source", "--quiet"],
        )

        assert result.exit_code == 0
        doc = load_document(drawing.with_name("art-aligned.svg"))
        assert [p.id for p in doc.paths] == ["line", "sq-aligned-0"]

    def test_unknown_path(self, drawing: Path) -> None:
        """Test an unknown id fails."""
        result = runner.invoke(app, ["align", str(drawing), "-s", "nope", "-t", "line"])
        assert result.exit_code == 1


class TestFitCommand:
    """Tests for the fit command."""

    def test_fit_with_padding(self, small_drawing: Path) -> None:
        """Test the canvas is cropped to the content."""
        result = runner.invoke(app, ["fit", str(small_drawing), "--padding", "2", "--quiet"])

        assert result.exit_code == 0
        doc = load_document(small_drawing.with_name("icon-fitted.svg"))
        assert (doc.width, doc.height) == (54.0, 34.0)
        assert doc.paths[0].bounding_box() == (2.0, 2.0, 52.0, 32.0)


class TestRepairCommand:
    """Tests for the repair command."""

    def test_default_intensity(self, drawing: Path) -> None:
        """Test repair collapses the bloated line and keeps the square."""
        result = runner.invoke(app, ["repair", str(drawing), "--quiet"])

        assert result.exit_code == 0
        doc = load_document(drawing.with_name("art-repaired.svg"))
        assert doc.paths[0].anchor_count == 4
        assert doc.paths[1].anchor_count == 2

    def test_intensity_shown(self, drawing: Path) -> None:
        """Test the chosen preset is named in the report."""
        result = runner.invoke(app, ["repair", str(drawing), "--intensity", "strong"])
        assert result.exit_code == 0
        assert "Strong" in result.output

    def test_unknown_intensity(self, drawing: Path) -> None:
        """Test an unknown preset is rejected."""
        result = runner.invoke(app, ["repair", str(drawing), "--intensity", "brutal"])
        assert result.exit_code != 0


class TestMergeCommand:
    """Tests for the merge command."""

    def test_similar_colors(self, palette: Path) -> None:
        """Test the two reds merge at the position of the upper one."""
        result = runner.invoke(app, ["merge", str(palette), "--similar", "0.95", "--quiet"])

        assert result.exit_code == 0
        doc = load_document(palette.with_name("palette-merged.svg"))
        assert [p.id for p in doc.paths] == ["b", "a-merged"]
        assert doc.paths[1].fill == "#ff0000"
        assert len(doc.paths[1].subpaths()) == 2

    def test_selected_with_fill(self, palette: Path) -> None:
        """Test merging by id with an explicit fill."""
        result = runner.invoke(
            app,
            ["merge", str(palette), "-i", "a", "-i", "b", "--fill", "#333333", "--quiet"],
        )

        assert result.exit_code == 0
        doc = load_document(palette.with_name("palette-merged.svg"))
        assert [p.id for p in doc.paths] == ["a-merged", "c"]
        assert doc.paths[0].fill == "#333333"

    def test_by_distance(self, palette: Path) -> None:
        """Test a large distance chains every path into one group."""
        result = runner.invoke(app, ["merge", str(palette), "--distance", "70", "--quiet"])

        assert result.exit_code == 0
        doc = load_document(palette.with_name("palette-merged.svg"))
        assert [p.id for p in doc.paths] == ["a-merged"]

    def test_needs_one_mode(self, palette: Path) -> None:
        """Test no mode or two modes fail."""
        assert runner.invoke(app, ["merge", str(palette)]).exit_code == 1
        result = runner.invoke(app, ["merge", str(palette), "--similar", "0.9", "--distance", "5"])
        assert result.exit_code == 1

    def test_single_id(self, palette: Path) -> None:
        """Test merging by id needs two paths."""
        assert runner.invoke(app, ["merge", str(palette), "-i", "a"]).exit_code == 1

    def test_unknown_id(self, palette: Path) -> None:
        """Test an unknown id fails."""
        result = runner.invoke(app, ["merge", str(palette), "-i", "a", "-i", "zzz"])
        assert result.exit_code == 1


class TestSquareCommand:
    """Tests for the square command."""

    def test_icon_canvas(self, small_drawing: Path) -> None:
        """Test the content is scaled and centered on a 24 unit canvas."""
        result = runner.invoke(app, ["square", str(small_drawing), "--quiet"])

        assert result.exit_code == 0
        doc = load_document(small_drawing.with_name("icon-square.svg"))
        assert (doc.width, doc.height) == (24.0, 24.0)
        assert doc.paths[0].bounding_box() == pytest.approx((2.0, 6.0, 22.0, 18.0))

    def test_padding_too_large(self, small_drawing: Path) -> None:
        """Test padding that leaves no room for content fails."""
        args = ["square", str(small_drawing), "--size", "10", "--padding", "5"]
        result = runner.invoke(app, args)
        assert result.exit_code == 1
