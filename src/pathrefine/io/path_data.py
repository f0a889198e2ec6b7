"""Path data parsing and formatting.

This module converts the SVG path mini-language to and from the segment
model. Parsing supports absolute and relative M, L, H, V, C, S, Q, T, A
and Z; the output uses only M, L, C, Q and Z in absolute form.

Key functions:
- parse_path_data: Path data text to a segment list
- format_path_data: Segment list to path data text
"""

import logging

from pathrefine.domain import Point, Segment, SegmentType
from pathrefine.io.arcs import arc_to_cubics
from pathrefine.utils.formatting import format_number

logger = logging.getLogger(__name__)

# Parameters consumed per command letter
_PARAM_COUNTS: dict[str, int] = {
    "M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0,
}

_COMMANDS = frozenset("MmLlHhVvCcSsQqTtAaZz")
_SEPARATORS = frozenset(" \t\r\n\f,")


class _Scanner:
    """Cursor over path data text reading numbers, flags and command letters."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def skip_separators(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos] in _SEPARATORS:
            self._pos += 1

    def at_end(self) -> bool:
        self.skip_separators()
        return self._pos >= len(self._text)

    def peek_command(self) -> str | None:
        self.skip_separators()
        if self._pos < len(self._text) and self._text[self._pos] in _COMMANDS:
            return self._text[self._pos]
        return None

    def take_command(self) -> str:
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def read_number(self) -> float | None:
        """Read one number; sign and a second decimal point act as separators."""
        self.skip_separators()
        text = self._text
        start = self._pos
        i = start
        if i < len(text) and text[i] in "+-":
            i += 1
        digits = False
        while i < len(text) and text[i].isdigit():
            i += 1
            digits = True
        if i < len(text) and text[i] == ".":
            i += 1
            while i < len(text) and text[i].isdigit():
                i += 1
                digits = True
        if not digits:
            return None
        if i < len(text) and text[i] in "eE":
            j = i + 1
            if j < len(text) and text[j] in "+-":
                j += 1
            if j < len(text) and text[j].isdigit():
                while j < len(text) and text[j].isdigit():
                    j += 1
                i = j
        self._pos = i
        return float(text[start:i])

    def read_flag(self) -> bool | None:
        """Read a single-character arc flag ('0' or '1')."""
        self.skip_separators()
        if self._pos < len(self._text) and self._text[self._pos] in "01":
            flag = self._text[self._pos] == "1"
            self._pos += 1
            return flag
        return None

    def read_params(self, command: str) -> list[float] | None:
        """Read one full parameter group for a command, None if incomplete."""
        params: list[float] = []
        for i in range(_PARAM_COUNTS[command]):
            if command == "A" and i in (3, 4):
                flag = self.read_flag()
                if flag is None:
                    return None
                params.append(1.0 if flag else 0.0)
                continue
            value = self.read_number()
            if value is None:
                return None
            params.append(value)
        return params


def _resolve(current: Point, relative: bool, x: float, y: float) -> Point:
    if relative:
        return Point(current.x + x, current.y + y)
    return Point(x, y)


def parse_path_data(d: str | None) -> list[Segment]:
    """Parse path data into segments.

    H and V expand to LineTo. Smooth curves (S, T) reflect the previous
    control point of the same family through the current point, or use the
    current point when the previous command was of another family. Arcs
    become one or more cubic curves. Parsing stops at the first malformed
    parameter group, keeping everything before it.

    Args:
        d: Path data text

    Returns:
        List of segments, always starting with a MoveTo when non-empty

    Examples:
        >>> [s.type.value for s in parse_path_data("M 0 0 L 100 0 L 100 100 Z")]
        ['M', 'L', 'L', 'Z']
        >>> parse_path_data("M10 10h5")[-1].end
        Point(x=15.0, y=10.0)
    """
    if not d:
        return []

    scanner = _Scanner(d)
    segments: list[Segment] = []
    current = Point(0.0, 0.0)
    subpath_start = Point(0.0, 0.0)
    # Reflection state for S/T: last control point and the family it belongs to
    last_control: Point | None = None
    last_family: str | None = None
    command: str | None = None
    needs_move = True

    while not scanner.at_end():
        letter = scanner.peek_command()
        if letter is not None:
            command = scanner.take_command()
        elif command is None or command in "Zz":
            logger.debug("Path data has parameters without a command: %r", d[:40])
            break

        upper = command.upper()
        relative = command.islower()

        if upper == "Z":
            if not needs_move:
                segments.append(Segment.close(current, subpath_start))
            current = subpath_start
            last_control = None
            last_family = None
            needs_move = True
            continue

        params = scanner.read_params(upper)
        if params is None:
            logger.debug("Malformed path data near command %s", command)
            break

        if upper != "M" and needs_move:
            # Drawing after Z (or without any M) starts at the current point
            segments.append(Segment.move_to(current))
            subpath_start = current
            needs_move = False

        if upper == "M":
            current = _resolve(current, relative, params[0], params[1])
            subpath_start = current
            segments.append(Segment.move_to(current))
            needs_move = False
            last_control = None
            last_family = None
            # Further coordinate pairs are implicit LineTo commands
            command = "l" if relative else "L"

        elif upper == "L":
            end = _resolve(current, relative, params[0], params[1])
            segments.append(Segment.line_to(current, end))
            current = end
            last_control = None
            last_family = None

        elif upper == "H":
            end = Point(current.x + params[0] if relative else params[0], current.y)
            segments.append(Segment.line_to(current, end))
            current = end
            last_control = None
            last_family = None

        elif upper == "V":
            end = Point(current.x, current.y + params[0] if relative else params[0])
            segments.append(Segment.line_to(current, end))
            current = end
            last_control = None
            last_family = None

        elif upper in ("C", "S"):
            if upper == "C":
                c1 = _resolve(current, relative, params[0], params[1])
                c2 = _resolve(current, relative, params[2], params[3])
                end = _resolve(current, relative, params[4], params[5])
            else:
                if last_family == "C" and last_control is not None:
                    c1 = Point(2 * current.x - last_control.x, 2 * current.y - last_control.y)
                else:
                    c1 = current
                c2 = _resolve(current, relative, params[0], params[1])
                end = _resolve(current, relative, params[2], params[3])
            segments.append(Segment.cubic(current, c1, c2, end))
            current = end
            last_control = c2
            last_family = "C"

        elif upper in ("Q", "T"):
            if upper == "Q":
                c = _resolve(current, relative, params[0], params[1])
                end = _resolve(current, relative, params[2], params[3])
            else:
                if last_family == "Q" and last_control is not None:
                    c = Point(2 * current.x - last_control.x, 2 * current.y - last_control.y)
                else:
                    c = current
                end = _resolve(current, relative, params[0], params[1])
            segments.append(Segment.quadratic(current, c, end))
            current = end
            last_control = c
            last_family = "Q"

        elif upper == "A":
            end = _resolve(current, relative, params[5], params[6])
            pieces = arc_to_cubics(
                current,
                params[0],
                params[1],
                params[2],
                params[3] != 0.0,
                params[4] != 0.0,
                end,
            )
            for c1, c2, piece_end in pieces:
                if c1 == current and c2 == piece_end:
                    segments.append(Segment.line_to(current, piece_end))
                else:
                    segments.append(Segment.cubic(current, c1, c2, piece_end))
                current = piece_end
            last_control = None
            last_family = None

    return segments


def _format_point(p: Point, precision: int, separator: str) -> str:
    return f"{format_number(p.x, precision)}{separator}{format_number(p.y, precision)}"


def format_segment(seg: Segment, precision: int = 3, separator: str = " ") -> str:
    """Format one segment as an absolute path command.

    Args:
        seg: Segment to format
        precision: Decimal digits for coordinates
        separator: Text between the x and y of one point

    Returns:
        Command text such as ``"C 1 2 3 4 5 6"``
    """
    if seg.type is SegmentType.CLOSE:
        return "Z"
    coords = [*seg.controls, seg.end]
    body = " ".join(_format_point(p, precision, separator) for p in coords)
    return f"{seg.type.value} {body}"


def format_path_data(segments: list[Segment] | tuple[Segment, ...], precision: int = 3) -> str:
    """Format a segment list as path data.

    Every segment is written as one absolute command, so parsing the result
    reproduces the same segment types.

    Args:
        segments: Segments to format
        precision: Decimal digits for coordinates

    Returns:
        Path data text, empty for no segments

    Examples:
        >>> format_path_data(parse_path_data("m0 0 l100 0 0 100z"))
        'M 0 0 L 100 0 L 100 100 Z'
    """
    return " ".join(format_segment(s, precision) for s in segments)
