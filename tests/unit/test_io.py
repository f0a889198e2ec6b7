"""Unit tests for the SVG I/O layer.

Tests for parse, SVGReader, serialize, SVGWriter and the shape lowering.
"""

from pathlib import Path

import pytest

from pathrefine.domain import Document, Point, SegmentType, ViewBox
from pathrefine.domain import Path as SvgPath
from pathrefine.exceptions import DocumentLoadError, DocumentSaveError, ParseError
from pathrefine.io import (
    SVGReader,
    SVGWriter,
    load_document,
    parse,
    parse_path_data,
    save_document,
    serialize,
)
from pathrefine.io.shapes import (
    circle_segments,
    line_segments,
    parse_points,
    poly_segments,
    rect_segments,
)

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def svg(body: str, attrs: str = 'width="200" height="100"') -> str:
    """Wrap markup in an svg root element."""
    return f"<svg {SVG_NS} {attrs}>{body}</svg>"


def types(path: SvgPath) -> list[str]:
    """Command letters of a path."""
    return [s.type.value for s in path.segments]


class TestParse:
    """Tests for parsing SVG markup."""

    def test_canvas_size(self) -> None:
        """Test width, height and viewBox are read."""
        doc = parse(svg("", 'width="200px" height="100" viewBox="0 0 20 10"'))
        assert doc.width == 200.0
        assert doc.height == 100.0
        assert doc.view_box == ViewBox(0.0, 0.0, 20.0, 10.0)

    def test_size_falls_back_to_view_box(self) -> None:
        """Test a missing width uses the viewBox size."""
        doc = parse(svg("", 'viewBox="0 0 64 32"'))
        assert (doc.width, doc.height) == (64.0, 32.0)

    def test_size_default(self) -> None:
        """Test the default canvas without size information."""
        doc = parse(svg("", ""))
        assert (doc.width, doc.height) == (400.0, 400.0)
        assert doc.view_box is None

    def test_paths_in_document_order(self) -> None:
        """Test every shape becomes a path in z-order."""
        doc = parse(
            svg(
                '<path id="a" d="M 0 0 L 10 0 L 10 10 Z"/>'
                '<rect x="0" y="0" width="10" height="5"/>'
                '<circle cx="5" cy="5" r="5"/>'
            )
        )
        assert [p.id for p in doc.paths] == ["a", "rect-1", "circle-2"]
        assert types(doc.paths[0]) == ["M", "L", "L", "Z"]
        assert types(doc.paths[1]) == ["M", "L", "L", "L", "Z"]
        assert types(doc.paths[2]) == ["M", "C", "C", "C", "C", "Z"]

    def test_degenerate_shape_skipped(self) -> None:
        """Test a zero-size rect produces no path."""
        doc = parse(svg('<rect width="0" height="10"/><line x1="0" y1="0" x2="5" y2="5"/>'))
        assert [p.id for p in doc.paths] == ["line-1"]

    def test_polygon_and_polyline(self) -> None:
        """Test polygon closes while polyline stays open."""
        doc = parse(
            svg('<polygon points="0,0 10,0 10,10"/><polyline points="0 0 10 0 10 10"/>')
        )
        assert doc.paths[0].is_closed
        assert not doc.paths[1].is_closed

    def test_group_transforms_compose(self) -> None:
        """Test group and element transforms combine outer first."""
        doc = parse(
            svg('<g transform="translate(10, 0)"><path transform="scale(2)" d="M 0 0 L 1 1"/></g>')
        )
        assert doc.paths[0].transform == (2.0, 0.0, 0.0, 2.0, 10.0, 0.0)

    def test_identity_transform_dropped(self) -> None:
        """Test an identity transform is stored as None."""
        doc = parse(svg('<path transform="translate(0,0)" d="M 0 0 L 1 1"/>'))
        assert doc.paths[0].transform is None

    def test_inherited_presentation(self) -> None:
        """Test fill and stroke inherit from groups and can be overridden."""
        doc = parse(
            svg(
                '<g fill="red" stroke="black" stroke-width="3">'
                '<path id="inherits" d="M 0 0 L 1 1"/>'
                '<path id="own" fill="blue" d="M 0 0 L 1 1"/>'
                "</g>"
            )
        )
        inherits, own = doc.paths
        assert inherits.fill == "red"
        assert inherits.stroke == "black"
        assert inherits.stroke_width == 3.0
        assert own.fill == "blue"

    def test_inline_style_wins(self) -> None:
        """Test style declarations override attributes."""
        doc = parse(svg('<path fill="red" style="fill: blue; opacity:0.5" d="M 0 0 L 1 1"/>'))
        assert doc.paths[0].fill == "blue"
        assert doc.paths[0].opacity == 0.5

    def test_hidden_paths(self) -> None:
        """Test display and visibility mark paths hidden."""
        doc = parse(
            svg(
                '<g style="display:none"><path id="a" d="M 0 0 L 1 1"/></g>'
                '<path id="b" visibility="hidden" d="M 0 0 L 1 1"/>'
                '<path id="c" d="M 0 0 L 1 1"/>'
            )
        )
        assert [p.visible for p in doc.paths] == [False, False, True]

    def test_defs_skipped(self) -> None:
        """Test shapes inside defs are not rendered paths."""
        doc = parse(svg('<defs><path id="hidden" d="M 0 0 L 1 1"/></defs>'))
        assert doc.path_count == 0

    def test_malformed_xml(self) -> None:
        """Test broken markup raises ParseError."""
        with pytest.raises(ParseError) as exc_info:
            parse("<svg><path></svg>", source="broken.svg")
        assert exc_info.value.source == "broken.svg"

    def test_no_svg_root(self) -> None:
        """Test markup without an svg element raises ParseError."""
        with pytest.raises(ParseError, match="no <svg> root"):
            parse("<html><body/></html>")

    def test_accepts_bytes(self) -> None:
        """Test bytes input with an XML declaration."""
        data = b'<?xml version="1.0" encoding="UTF-8"?>' + svg(
            '<path d="M 0 0 L 1 1"/>'
        ).encode("utf-8")
        assert parse(data).path_count == 1


class TestSVGReader:
    """Tests for SVGReader class."""

    def test_load_nonexistent_file(self) -> None:
        """Test loading a nonexistent file raises FileNotFoundError."""
        reader = SVGReader(Path("nonexistent.svg"))
        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_document_before_load(self) -> None:
        """Test accessing document before loading raises RuntimeError."""
        reader = SVGReader(Path("drawing.svg"))
        with pytest.raises(RuntimeError, match="Document not loaded"):
            _ = reader.document

    def test_load(self, tmp_path: Path) -> None:
        """Test loading a file from disk."""
        svg_file = tmp_path / "drawing.svg"
        svg_file.write_text(svg('<path id="p" d="M 0 0 L 10 10"/>'), encoding="utf-8")

        reader = SVGReader(svg_file)
        reader.load()

        assert reader.document.get_path("p") is not None
        assert reader.file_size == svg_file.stat().st_size

    def test_load_document_wraps_os_errors(self, tmp_path: Path) -> None:
        """Test unreadable input raises DocumentLoadError."""
        with pytest.raises(DocumentLoadError) as exc_info:
            load_document(tmp_path / "missing.svg")
        assert "missing.svg" in exc_info.value.path

    def test_load_document_parse_error(self, tmp_path: Path) -> None:
        """Test invalid content propagates ParseError."""
        svg_file = tmp_path / "bad.svg"
        svg_file.write_text("not xml at all", encoding="utf-8")
        with pytest.raises(ParseError):
            load_document(svg_file)


class TestSerialize:
    """Tests for serialize and SVGWriter."""

    @pytest.fixture
    def document(self) -> Document:
        """Document with a curve, style attributes and a transform."""
        return Document(
            width=200,
            height=100,
            view_box=ViewBox(0, 0, 200, 100),
            paths=(
                SvgPath(
                    id="curve",
                    segments=tuple(parse_path_data("M 10 10 C 20 0 40 0 50.123456 10 Z")),
                    fill="#ff0000",
                    stroke="black",
                    stroke_width=1.5,
                    opacity=0.8,
                    transform=(1.0, 0.0, 0.0, 1.0, 5.0, 6.0),
                ),
                SvgPath(
                    id="hidden",
                    segments=tuple(parse_path_data("M 0 0 L 5 5")),
                    visible=False,
                ),
            ),
        )

    def test_round_trip(self, document: Document) -> None:
        """Test serialized output parses back to the same document."""
        restored = parse(serialize(document, precision=3))

        assert (restored.width, restored.height) == (200.0, 100.0)
        assert restored.view_box == document.view_box
        assert [p.id for p in restored.paths] == ["curve", "hidden"]

        curve = restored.paths[0]
        assert curve.fill == "#ff0000"
        assert curve.stroke == "black"
        assert curve.stroke_width == 1.5
        assert curve.opacity == 0.8
        assert curve.transform == (1.0, 0.0, 0.0, 1.0, 5.0, 6.0)
        assert not restored.paths[1].visible

        for original, again in zip(document.paths[0].segments, curve.segments):
            assert again.type is original.type
            for p, q in zip(original.points, again.points):
                assert abs(p.x - q.x) <= 0.1
                assert abs(p.y - q.y) <= 0.1

    def test_precision(self, document: Document) -> None:
        """Test coordinates are rounded to the requested precision."""
        text = serialize(document, precision=1)
        assert "50.1 10" in text
        assert "50.123" not in text

    def test_transform_written_as_translate(self, document: Document) -> None:
        """Test a pure translation keeps its short form."""
        assert 'transform="translate(5,6)"' in serialize(document)

    def test_empty_document(self) -> None:
        """Test a document without paths is still a valid svg."""
        restored = parse(serialize(Document(width=10, height=20)))
        assert restored.path_count == 0
        assert (restored.width, restored.height) == (10.0, 20.0)

    def test_writer_save(self, document: Document, tmp_path: Path) -> None:
        """Test SVGWriter writes a readable file."""
        output = tmp_path / "out.svg"
        SVGWriter(document, precision=2).save(output)
        assert load_document(output).path_count == 2

    def test_save_document_wraps_os_errors(self, document: Document, tmp_path: Path) -> None:
        """Test an unwritable destination raises DocumentSaveError."""
        with pytest.raises(DocumentSaveError):
            save_document(document, tmp_path / "missing-dir" / "out.svg")

    def test_get_output_path(self) -> None:
        """Test output naming convention."""
        output = SVGWriter.get_output_path(Path("/tmp/art/logo.svg"), "simplified")
        assert output == Path("/tmp/art/logo-simplified.svg")


class TestShapes:
    """Tests for shape lowering."""

    def test_rect_without_radius(self) -> None:
        """Test a plain rect is four corners."""
        segments = rect_segments(0, 0, 10, 5)
        assert [s.end for s in segments[:4]] == [
            Point(0, 0),
            Point(10, 0),
            Point(10, 5),
            Point(0, 5),
        ]
        assert segments[-1].type is SegmentType.CLOSE

    def test_rounded_rect(self) -> None:
        """Test rounded corners are cubic arcs and radii are clamped."""
        segments = rect_segments(0, 0, 10, 10, rx=20)
        curves = [s for s in segments if s.type is SegmentType.CUBIC]
        assert len(curves) == 4
        # Radius clamped to half the size so no straight edges remain
        assert not any(s.type is SegmentType.LINE_TO for s in segments)

    def test_negative_size(self) -> None:
        """Test a non-positive size gives nothing."""
        assert rect_segments(0, 0, -1, 10) == []
        assert circle_segments(0, 0, 0) == []

    def test_circle_starts_at_rightmost_point(self) -> None:
        """Test circle orientation and closure."""
        segments = circle_segments(50, 50, 10)
        assert segments[0].end == Point(60, 50)
        assert segments[1].end == Point(50, 60)
        assert segments[-2].end == Point(60, 50)

    def test_line(self) -> None:
        """Test a line element is an open two-point path."""
        segments = line_segments(0, 0, 3, 4)
        assert [s.type for s in segments] == [SegmentType.MOVE_TO, SegmentType.LINE_TO]

    def test_parse_points_ignores_odd_coordinate(self) -> None:
        """Test trailing coordinates without a partner are dropped."""
        assert parse_points("0,0 1,1 2") == [Point(0, 0), Point(1, 1)]

    def test_poly_without_points(self) -> None:
        """Test empty points attribute."""
        assert poly_segments([], closed=True) == []
