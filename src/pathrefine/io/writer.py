"""SVG document writer.

This module serializes Documents back to SVG markup with lxml and saves
them with the output naming convention.

Key functions:
- serialize: Document to SVG text
- save_document: Document to SVG file

Key classes:
- SVGWriter: Writes documents to disk
"""

from pathlib import Path as FilePath

from lxml import etree

from pathrefine.core.transforms import format_transform
from pathrefine.domain import Document, Path
from pathrefine.exceptions import DocumentSaveError
from pathrefine.io.path_data import format_path_data
from pathrefine.utils.formatting import format_number

SVG_NS = "http://www.w3.org/2000/svg"


def _path_attributes(path: Path, precision: int) -> dict[str, str]:
    """Attribute map of one path element; absent attributes are omitted."""
    attrs: dict[str, str] = {
        "id": path.id,
        "d": format_path_data(path.segments, precision),
    }
    if path.fill is not None:
        attrs["fill"] = path.fill
    if path.stroke is not None:
        attrs["stroke"] = path.stroke
    if path.stroke_width is not None:
        attrs["stroke-width"] = format_number(path.stroke_width, precision)
    if path.opacity is not None:
        attrs["opacity"] = format_number(path.opacity, precision)
    if path.fill_opacity is not None:
        attrs["fill-opacity"] = format_number(path.fill_opacity, precision)
    if path.stroke_opacity is not None:
        attrs["stroke-opacity"] = format_number(path.stroke_opacity, precision)
    transform = format_transform(path.transform)
    if transform is not None:
        attrs["transform"] = transform
    if not path.visible:
        attrs["visibility"] = "hidden"
    return attrs


def serialize(document: Document, precision: int = 3) -> str:
    """Serialize a Document to SVG markup.

    Paths keep their order; every shape is written as a <path> element.

    Args:
        document: Document to serialize
        precision: Decimal digits for coordinates

    Returns:
        SVG markup text
    """
    root = etree.Element(f"{{{SVG_NS}}}svg", nsmap={None: SVG_NS})
    root.set("width", format_number(document.width, precision))
    root.set("height", format_number(document.height, precision))
    if document.view_box is not None:
        vb = document.view_box
        root.set(
            "viewBox",
            " ".join(format_number(v, precision) for v in (vb.x, vb.y, vb.width, vb.height)),
        )

    for path in document.paths:
        element = etree.SubElement(root, f"{{{SVG_NS}}}path")
        for name, value in _path_attributes(path, precision).items():
            element.set(name, value)

    return etree.tostring(root, pretty_print=True, encoding="unicode")


class SVGWriter:
    """Writes Documents to SVG files.

    Example:
        writer = SVGWriter(document)
        writer.save(Path("drawing-simplified.svg"))
    """

    def __init__(self, document: Document, precision: int = 3) -> None:
        """Initialize the writer.

        Args:
            document: Document to write
            precision: Decimal digits for coordinates
        """
        self._document = document
        self._precision = precision

    def save(self, output_path: FilePath) -> None:
        """Write the document.

        Args:
            output_path: Destination file
        """
        output_path.write_text(serialize(self._document, self._precision), encoding="utf-8")

    @staticmethod
    def get_output_path(input_path: FilePath, suffix: str = "refined") -> FilePath:
        """Generate an output path next to the input.

        Args:
            input_path: Original SVG file
            suffix: Suffix appended to the stem

        Returns:
            Path such as ``logo-simplified.svg``

        Examples:
            >>> SVGWriter.get_output_path(FilePath("art/logo.svg"), "simplified").as_posix()
            'art/logo-simplified.svg'
        """
        return input_path.with_name(f"{input_path.stem}-{suffix}{input_path.suffix or '.svg'}")


def save_document(document: Document, output_path: FilePath, precision: int = 3) -> None:
    """Save a document to disk.

    Raises:
        DocumentSaveError: If the file cannot be written
    """
    try:
        SVGWriter(document, precision).save(output_path)
    except OSError as e:
        raise DocumentSaveError(str(output_path), str(e)) from e
