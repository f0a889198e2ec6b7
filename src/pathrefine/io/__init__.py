"""SVG I/O layer for pathrefine.

This module handles reading and writing SVG documents using lxml. It
provides a clean abstraction layer between SVG markup and the domain
models.

Key responsibilities:
- Parse path data strings into absolute segments
- Load SVG files, flattening groups and converting basic shapes to paths
- Serialize documents back to SVG markup
- Generate a formatted code view with source ranges per path and point

Key classes:
- SVGReader: Load SVG files into Documents
- SVGWriter: Save Documents as SVG files
- CodeView: Formatted markup with path and point mappings
"""

# path_data has no core dependencies and must load before reader and writer
from pathrefine.io.path_data import format_path_data, format_segment, parse_path_data
from pathrefine.io.code_view import (
    CodePosition,
    CodeRange,
    CodeView,
    PathCodeMapping,
    PointCodeMapping,
    attribute_at_offset,
    find_path_at_line,
    find_path_at_offset,
    find_point_at_offset,
    generate_code_view,
)
from pathrefine.io.reader import SVGReader, load_document, parse
from pathrefine.io.writer import SVGWriter, save_document, serialize

__all__ = [
    "CodePosition",
    "CodeRange",
    "CodeView",
    "PathCodeMapping",
    "PointCodeMapping",
    "SVGReader",
    "SVGWriter",
    "attribute_at_offset",
    "find_path_at_line",
    "find_path_at_offset",
    "find_point_at_offset",
    "format_path_data",
    "format_segment",
    "generate_code_view",
    "load_document",
    "parse",
    "parse_path_data",
    "save_document",
    "serialize",
]
