"""Code view generation with source mappings.

The code view is a display-oriented serialization of a Document: one
attribute per line, two-decimal coordinates and ``x,y`` point pairs. While
writing, it records where each path, attribute and path command lands in
the text so an editor can map a click in the code back to a path or point.

Key classes:
- CodePosition / CodeRange: Locations in the generated text
- PointCodeMapping: Command range holding one point of a path
- PathCodeMapping: Element and attribute ranges of one path
- CodeView: Generated text plus mappings

Key functions:
- generate_code_view: Build the code view of a document
- find_path_at_line / find_path_at_offset: Map a location back to a path
- attribute_at_offset: Which attribute of a path holds an offset
"""

from dataclasses import dataclass, field

from pathrefine.core.transforms import format_transform
from pathrefine.domain import Document, Path, SegmentType
from pathrefine.io.path_data import format_segment
from pathrefine.utils.formatting import format_number

CODE_VIEW_PRECISION = 2
EMPTY_DOCUMENT_CODE = "<!-- No SVG loaded -->"


@dataclass(frozen=True, slots=True)
class CodePosition:
    """A location in generated code.

    Attributes:
        line: 1-based line number
        column: 1-based column number
        offset: 0-based character offset from the start of the text
    """

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class CodeRange:
    """Text range between two positions; a cursor on either end counts as inside."""

    start: CodePosition
    end: CodePosition

    def contains_offset(self, offset: int) -> bool:
        """True if the offset lies inside the range (end inclusive)."""
        return self.start.offset <= offset <= self.end.offset

    def contains_line(self, line: int) -> bool:
        """True if the line lies inside the range."""
        return self.start.line <= line <= self.end.line


@dataclass(frozen=True, slots=True)
class PointCodeMapping:
    """Location of the command holding one point of a path.

    Attributes:
        point_index: Index of the point in path order (controls, then end
            point, segment by segment)
        command_type: Command letter of the holding segment
        command_range: Text range of the whole command
        is_anchor: False for off-curve control points
    """

    point_index: int
    command_type: str
    command_range: CodeRange
    is_anchor: bool


@dataclass
class PathCodeMapping:
    """Text ranges belonging to one path element."""

    path_id: str
    element_range: CodeRange
    id_range: CodeRange | None = None
    d_range: CodeRange | None = None
    fill_range: CodeRange | None = None
    stroke_range: CodeRange | None = None
    point_mappings: list[PointCodeMapping] = field(default_factory=list)


@dataclass
class CodeView:
    """Generated code and its mappings.

    Attributes:
        code: The generated SVG text
        mappings: Path id to mapping, in document order
        total_lines: Line count of the text
    """

    code: str
    mappings: dict[str, PathCodeMapping]
    total_lines: int


class _CodeBuilder:
    """Accumulates text while tracking line, column and offset."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self.line = 1
        self.column = 1
        self.offset = 0

    def add(self, text: str) -> None:
        self._parts.append(text)
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(text) - text.rfind("\n")
        else:
            self.column += len(text)
        self.offset += len(text)

    def position(self) -> CodePosition:
        return CodePosition(self.line, self.column, self.offset)

    def add_tracked(self, text: str) -> CodeRange:
        """Add text and return the range it occupies."""
        start = self.position()
        self.add(text)
        return CodeRange(start, self.position())

    @property
    def text(self) -> str:
        return "".join(self._parts)


def _write_path(builder: _CodeBuilder, path: Path, precision: int) -> PathCodeMapping:
    element_start = builder.position()
    builder.add("  <path\n")

    builder.add('    id="')
    id_range = builder.add_tracked(path.id)
    builder.add('"\n')

    builder.add('    d="')
    d_start = builder.position()
    point_mappings: list[PointCodeMapping] = []
    point_index = 0
    for i, seg in enumerate(path.segments):
        if i > 0:
            builder.add(" ")
        command_range = builder.add_tracked(format_segment(seg, precision, separator=","))
        if seg.type is SegmentType.CLOSE:
            continue
        for _ in seg.controls:
            point_mappings.append(
                PointCodeMapping(point_index, seg.type.value, command_range, is_anchor=False)
            )
            point_index += 1
        point_mappings.append(
            PointCodeMapping(point_index, seg.type.value, command_range, is_anchor=True)
        )
        point_index += 1
    d_range = CodeRange(d_start, builder.position())
    builder.add('"\n')

    fill_range = None
    if path.fill:
        builder.add('    fill="')
        fill_range = builder.add_tracked(path.fill)
        builder.add('"\n')

    stroke_range = None
    if path.stroke:
        builder.add('    stroke="')
        stroke_range = builder.add_tracked(path.stroke)
        builder.add('"\n')

    if path.stroke_width:
        builder.add(f'    stroke-width="{format_number(path.stroke_width, precision)}"\n')

    transform = format_transform(path.transform)
    if transform:
        builder.add(f'    transform="{transform}"\n')

    builder.add("  />")
    element_end = builder.position()
    builder.add("\n")

    return PathCodeMapping(
        path_id=path.id,
        element_range=CodeRange(element_start, element_end),
        id_range=id_range,
        d_range=d_range,
        fill_range=fill_range,
        stroke_range=stroke_range,
        point_mappings=point_mappings,
    )


def generate_code_view(
    document: Document | None, precision: int = CODE_VIEW_PRECISION
) -> CodeView:
    """Generate display code for a document with path and point mappings.

    Hidden paths are left out.

    Args:
        document: Document to display, None when nothing is loaded
        precision: Decimal digits for coordinates

    Returns:
        CodeView with text and mappings
    """
    if document is None:
        return CodeView(code=EMPTY_DOCUMENT_CODE, mappings={}, total_lines=1)

    builder = _CodeBuilder()
    view_box = ""
    if document.view_box is not None:
        vb = document.view_box
        values = " ".join(format_number(v, precision) for v in (vb.x, vb.y, vb.width, vb.height))
        view_box = f' viewBox="{values}"'
    builder.add(
        f'<svg width="{format_number(document.width, precision)}" '
        f'height="{format_number(document.height, precision)}"{view_box} '
        'xmlns="http://www.w3.org/2000/svg">\n'
    )

    mappings: dict[str, PathCodeMapping] = {}
    for path in document.paths:
        if not path.visible:
            continue
        mappings[path.id] = _write_path(builder, path, precision)

    builder.add("</svg>")
    return CodeView(code=builder.text, mappings=mappings, total_lines=builder.line)


def find_path_at_line(view: CodeView, line: int) -> PathCodeMapping | None:
    """Find the path whose element spans a 1-based line number."""
    for mapping in view.mappings.values():
        if mapping.element_range.contains_line(line):
            return mapping
    return None


def find_path_at_offset(view: CodeView, offset: int) -> PathCodeMapping | None:
    """Find the path whose element spans a 0-based character offset."""
    for mapping in view.mappings.values():
        if mapping.element_range.contains_offset(offset):
            return mapping
    return None


def attribute_at_offset(mapping: PathCodeMapping, offset: int) -> str | None:
    """Name of the mapped attribute value holding an offset.

    Returns:
        One of ``"id"``, ``"d"``, ``"fill"``, ``"stroke"`` or None
    """
    candidates = (
        ("id", mapping.id_range),
        ("d", mapping.d_range),
        ("fill", mapping.fill_range),
        ("stroke", mapping.stroke_range),
    )
    for name, code_range in candidates:
        if code_range is not None and code_range.contains_offset(offset):
            return name
    return None


def find_point_at_offset(mapping: PathCodeMapping, offset: int) -> PointCodeMapping | None:
    """Anchor point whose command spans an offset inside the ``d`` attribute."""
    for point in mapping.point_mappings:
        if point.is_anchor and point.command_range.contains_offset(offset):
            return point
    return None
