"""SVG document reader.

This module parses SVG markup into the Document model using lxml. Shapes are
lowered to paths, group transforms are composed into one matrix per path
and presentation attributes are collected from attributes, inline styles
and ancestor groups.

Key functions:
- parse: SVG text to Document
- load_document: SVG file to Document

Key classes:
- SVGReader: Loads SVG files from disk
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path as FilePath

from lxml import etree

from pathrefine.core.transforms import compose, parse_transform
from pathrefine.domain import Document, Matrix, Path, Segment, ViewBox
from pathrefine.exceptions import DocumentLoadError, ParseError
from pathrefine.io.path_data import parse_path_data
from pathrefine.io.shapes import (
    circle_segments,
    ellipse_segments,
    line_segments,
    parse_points,
    poly_segments,
    rect_segments,
)

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_SIZE = 400.0

SHAPE_TAGS = frozenset({"path", "rect", "circle", "ellipse", "line", "polygon", "polyline"})
CONTAINER_TAGS = frozenset({"g", "svg", "a", "switch"})
# Subtrees that are not rendered in place
SKIPPED_TAGS = frozenset(
    {
        "defs",
        "clipPath",
        "mask",
        "symbol",
        "marker",
        "pattern",
        "style",
        "metadata",
        "title",
        "desc",
    }
)

# Presentation attributes inherited from ancestor groups
INHERITED_ATTRS = ("fill", "stroke", "stroke-width")

_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _local_name(node: etree._Element) -> str | None:
    """Tag name without namespace, None for comments and processing instructions."""
    if not isinstance(node.tag, str):
        return None
    if node.tag.startswith("{"):
        return node.tag.split("}", 1)[1]
    return node.tag


def _parse_length(value: str | None) -> float | None:
    """Leading number of a length attribute; percentages are ignored."""
    if value is None or value.strip().endswith("%"):
        return None
    match = _NUMBER_RE.match(value)
    if match is None:
        return None
    return float(match.group(1))


def _parse_style(style: str | None) -> dict[str, str]:
    """Split an inline ``style`` attribute into property/value pairs."""
    result: dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        result[name.strip()] = value.strip()
    return result


@dataclass
class _Context:
    """State inherited from ancestor elements during the tree walk."""

    matrix: Matrix | None = None
    hidden: bool = False
    inherited: dict[str, str] = field(default_factory=dict)


def _element_properties(node: etree._Element) -> dict[str, str]:
    """Presentation attributes of an element, inline style taking precedence."""
    props = {
        name: node.get(name)
        for name in (
            "fill",
            "stroke",
            "stroke-width",
            "opacity",
            "fill-opacity",
            "stroke-opacity",
            "visibility",
            "display",
        )
        if node.get(name) is not None
    }
    props.update(_parse_style(node.get("style")))
    return props


def _is_hidden(props: dict[str, str]) -> bool:
    return props.get("display") == "none" or props.get("visibility") in ("hidden", "collapse")


def _shape_segments(tag: str, node: etree._Element) -> list[Segment]:
    """Lower one shape element to segments."""

    def num(name: str, default: float = 0.0) -> float:
        value = _parse_length(node.get(name))
        return default if value is None else value

    if tag == "path":
        return parse_path_data(node.get("d"))
    if tag == "rect":
        return rect_segments(
            num("x"),
            num("y"),
            num("width"),
            num("height"),
            _parse_length(node.get("rx")),
            _parse_length(node.get("ry")),
        )
    if tag == "circle":
        return circle_segments(num("cx"), num("cy"), num("r"))
    if tag == "ellipse":
        return ellipse_segments(num("cx"), num("cy"), num("rx"), num("ry"))
    if tag == "line":
        return line_segments(num("x1"), num("y1"), num("x2"), num("y2"))
    return poly_segments(parse_points(node.get("points")), closed=(tag == "polygon"))


class _DocumentBuilder:
    """Walks an SVG element tree collecting paths in document order."""

    def __init__(self) -> None:
        self.paths: list[Path] = []
        self._shape_index = 0

    def walk(self, node: etree._Element, context: _Context) -> None:
        for child in node:
            tag = _local_name(child)
            if tag is None or tag in SKIPPED_TAGS:
                continue

            props = _element_properties(child)

            if tag in CONTAINER_TAGS:
                inherited = dict(context.inherited)
                inherited.update({k: props[k] for k in INHERITED_ATTRS if k in props})
                self.walk(
                    child,
                    _Context(
                        matrix=compose(context.matrix, parse_transform(child.get("transform"))),
                        hidden=context.hidden or _is_hidden(props),
                        inherited=inherited,
                    ),
                )
            elif tag in SHAPE_TAGS:
                self._add_shape(tag, child, props, context)

    def _add_shape(
        self,
        tag: str,
        node: etree._Element,
        props: dict[str, str],
        context: _Context,
    ) -> None:
        index = self._shape_index
        self._shape_index += 1

        segments = _shape_segments(tag, node)
        if not segments:
            logger.debug("Skipping degenerate %s element", tag)
            return

        merged = dict(context.inherited)
        merged.update(props)

        self.paths.append(
            Path(
                id=node.get("id") or f"{tag}-{index}",
                segments=tuple(segments),
                fill=merged.get("fill"),
                stroke=merged.get("stroke"),
                stroke_width=_parse_length(merged.get("stroke-width")),
                opacity=_parse_length(merged.get("opacity")),
                fill_opacity=_parse_length(merged.get("fill-opacity")),
                stroke_opacity=_parse_length(merged.get("stroke-opacity")),
                transform=compose(context.matrix, parse_transform(node.get("transform"))),
                visible=not (context.hidden or _is_hidden(props)),
            )
        )


def _find_svg_root(root: etree._Element) -> etree._Element | None:
    if _local_name(root) == "svg":
        return root
    for node in root.iter():
        if _local_name(node) == "svg":
            return node
    return None


def _parse_view_box(value: str | None) -> ViewBox | None:
    if not value:
        return None
    parts = [p for p in re.split(r"[\s,]+", value.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    return ViewBox(x, y, w, h)


def parse(text: str | bytes, source: str = "<string>") -> Document:
    """Parse SVG markup into a Document.

    Args:
        text: SVG markup
        source: Name of the input used in error messages

    Returns:
        Document with paths in z-order

    Raises:
        ParseError: If the markup is not well-formed XML or has no <svg> root
    """
    data = text.encode("utf-8") if isinstance(text, str) else text
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)

    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(source, str(e)) from e

    if root is None:
        raise ParseError(source, "empty document")

    svg = _find_svg_root(root)
    if svg is None:
        raise ParseError(source, "no <svg> root element found")

    view_box = _parse_view_box(svg.get("viewBox"))
    width = _parse_length(svg.get("width"))
    height = _parse_length(svg.get("height"))
    if width is None:
        width = view_box.width if view_box else DEFAULT_CANVAS_SIZE
    if height is None:
        height = view_box.height if view_box else DEFAULT_CANVAS_SIZE

    builder = _DocumentBuilder()
    root_props = _element_properties(svg)
    builder.walk(
        svg,
        _Context(
            matrix=parse_transform(svg.get("transform")),
            hidden=_is_hidden(root_props),
            inherited={k: root_props[k] for k in INHERITED_ATTRS if k in root_props},
        ),
    )

    logger.debug("Parsed %s: %d paths", source, len(builder.paths))
    return Document(width=width, height=height, view_box=view_box, paths=tuple(builder.paths))


class SVGReader:
    """Loads SVG files and parses them into Documents.

    Example:
        reader = SVGReader(Path("drawing.svg"))
        reader.load()
        for path in reader.document.paths:
            print(path.id)
    """

    def __init__(self, svg_path: FilePath) -> None:
        """Initialize the reader.

        Args:
            svg_path: Path to the SVG file
        """
        self._svg_path = svg_path
        self._document: Document | None = None

    def load(self) -> None:
        """Load and parse the file.

        Raises:
            FileNotFoundError: If the file does not exist
            ParseError: If the file is not a valid SVG document
        """
        if not self._svg_path.exists():
            raise FileNotFoundError(f"SVG file not found: {self._svg_path}")

        self._document = parse(self._svg_path.read_bytes(), source=str(self._svg_path))

    @property
    def document(self) -> Document:
        """Return the parsed document.

        Raises:
            RuntimeError: If the file has not been loaded yet
        """
        if self._document is None:
            raise RuntimeError("Document not loaded. Call load() first.")
        return self._document

    @property
    def file_size(self) -> int:
        """Size of the input file in bytes."""
        return self._svg_path.stat().st_size


def load_document(svg_path: FilePath) -> Document:
    """Load an SVG file.

    Args:
        svg_path: Path to the SVG file

    Returns:
        Parsed document

    Raises:
        DocumentLoadError: If the file cannot be read
        ParseError: If the file is not a valid SVG document
    """
    reader = SVGReader(svg_path)
    try:
        reader.load()
    except OSError as e:
        raise DocumentLoadError(str(svg_path), str(e)) from e
    return reader.document
