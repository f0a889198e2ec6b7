"""Unit tests for document bounds and viewBox fitting."""

import pytest

from pathrefine.core.viewbox import (
    bake_transforms,
    calculate_bounding_box,
    fit_to_content,
    perfect_square,
)
from pathrefine.domain import Document, Path, ViewBox
from pathrefine.io import parse_path_data


def make_path(d: str, path_id: str = "p", **kwargs) -> Path:
    """Path from path data text."""
    return Path(id=path_id, segments=tuple(parse_path_data(d)), **kwargs)


@pytest.fixture
def document() -> Document:
    """Large canvas with two small shapes, one of them transformed."""
    return Document(
        width=1000,
        height=1000,
        view_box=ViewBox(0, 0, 1000, 1000),
        paths=(
            make_path("M 100 100 L 150 100 L 150 150 Z", "a"),
            make_path(
                "M 0 0 L 10 0 L 10 10 Z",
                "b",
                transform=(1.0, 0.0, 0.0, 1.0, 190.0, 140.0),
            ),
        ),
    )


class TestCalculateBoundingBox:
    """Tests for world-space bounds."""

    def test_transforms_applied(self, document: Document) -> None:
        """Test transformed paths count in world coordinates."""
        assert calculate_bounding_box(document) == ViewBox(100, 100, 100, 50)

    def test_empty_document(self) -> None:
        """Test a document without points has no bounds."""
        assert calculate_bounding_box(Document(width=10, height=10)) is None


class TestBakeTransforms:
    """Tests for document-wide transform baking."""

    def test_all_transforms_removed(self, document: Document) -> None:
        """Test every path ends up in world coordinates."""
        baked = bake_transforms(document)
        assert all(p.transform is None for p in baked.paths)
        assert baked.paths[1].bounding_box() == (190.0, 140.0, 200.0, 150.0)
        assert calculate_bounding_box(baked) == calculate_bounding_box(document)


class TestFitToContent:
    """Tests for cropping the canvas to the artwork."""

    def test_fit_with_padding(self, document: Document) -> None:
        """Test content moves to the padding origin and the canvas shrinks."""
        fitted = fit_to_content(document, padding=5)

        assert (fitted.width, fitted.height) == (110.0, 60.0)
        assert fitted.view_box == ViewBox(0.0, 0.0, 110.0, 60.0)
        assert calculate_bounding_box(fitted) == ViewBox(5.0, 5.0, 100.0, 50.0)
        assert all(p.transform is None for p in fitted.paths)

    def test_fit_without_padding(self, document: Document) -> None:
        """Test content starts at the origin."""
        fitted = fit_to_content(document)
        assert fitted.paths[0].segments[0].end.x == 0.0
        assert fitted.paths[0].segments[0].end.y == 0.0

    def test_keeps_ids_and_order(self, document: Document) -> None:
        """Test fitting only moves geometry."""
        assert [p.id for p in fit_to_content(document).paths] == ["a", "b"]

    def test_no_area_is_noop(self) -> None:
        """Test flat content leaves the document unchanged."""
        doc = Document(width=50, height=50, paths=(make_path("M 0 10 L 40 10"),))
        assert fit_to_content(doc, padding=2) is doc


class TestPerfectSquare:
    """Tests for centering artwork on a square icon canvas."""

    def test_fits_and_centers(self, document: Document) -> None:
        """Test the wide content fills the padded width and is centered vertically."""
        squared = perfect_square(document)

        assert (squared.width, squared.height) == (24.0, 24.0)
        assert squared.view_box == ViewBox(0.0, 0.0, 24.0, 24.0)
        bbox = calculate_bounding_box(squared)
        assert bbox is not None
        assert bbox.x == pytest.approx(2.0)
        assert bbox.y == pytest.approx(7.0)
        assert bbox.width == pytest.approx(20.0)
        assert bbox.height == pytest.approx(10.0)
        assert all(p.transform is None for p in squared.paths)

    def test_custom_size_and_offset(self, document: Document) -> None:
        """Test size, padding and manual offset are applied."""
        squared = perfect_square(document, target_size=100, padding=0, offset_x=5, offset_y=-5)
        bbox = calculate_bounding_box(squared)
        assert bbox is not None
        assert bbox.x == pytest.approx(5.0)
        assert bbox.y == pytest.approx(20.0)
        assert bbox.width == pytest.approx(100.0)

    def test_flat_content_scales_by_its_extent(self) -> None:
        """Test a horizontal line is scaled by its width alone."""
        doc = Document(width=50, height=50, paths=(make_path("M 0 10 L 40 10"),))
        squared = perfect_square(doc, target_size=24, padding=2)
        line = squared.paths[0].segments
        assert line[0].end.x == pytest.approx(2.0)
        assert line[1].end.x == pytest.approx(22.0)
        assert line[1].end.y == pytest.approx(12.0)

    def test_empty_document_unchanged(self) -> None:
        """Test a document without points is returned as is."""
        doc = Document(width=10, height=10)
        assert perfect_square(doc) is doc
