"""Core geometric types for path representation.

This module defines the fundamental geometric types used throughout pathrefine:
- Point: A 2D point value
- SegmentType: Enum for the drawing command a segment represents
- Segment: One drawing command with its start, end and control points
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SegmentType(Enum):
    """Drawing command kind of a segment.

    Values are the absolute SVG command letters, so a segment type can be
    written straight into path data.

    - MOVE_TO: Starts a new sub-path, draws nothing
    - LINE_TO: Straight line
    - CUBIC: Cubic Bezier curve (two control points)
    - QUADRATIC: Quadratic Bezier curve (one control point)
    - CLOSE: Straight line back to the sub-path start, closes the sub-path
    """

    MOVE_TO = "M"
    LINE_TO = "L"
    CUBIC = "C"
    QUADRATIC = "Q"
    CLOSE = "Z"


# Number of control points each segment type carries
CONTROL_COUNTS: dict[SegmentType, int] = {
    SegmentType.MOVE_TO: 0,
    SegmentType.LINE_TO: 0,
    SegmentType.CUBIC: 2,
    SegmentType.QUADRATIC: 1,
    SegmentType.CLOSE: 0,
}


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in user units
        y: Y coordinate in user units
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def is_finite(self) -> bool:
        """Check that both coordinates are real numbers (not NaN or infinite)."""
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class Segment:
    """A single drawing command of a path.

    A segment's start always equals the previous segment's end. For a
    MoveTo the start equals its own end; for a ClosePath the end equals the
    MoveTo point of the enclosing sub-path.

    Attributes:
        type: Drawing command kind
        start: Current point before the command
        end: Current point after the command
        controls: Off-curve control points (2 for cubic, 1 for quadratic)
    """

    type: SegmentType
    start: Point
    end: Point
    controls: tuple[Point, ...] = ()

    def __post_init__(self) -> None:
        expected = CONTROL_COUNTS[self.type]
        if len(self.controls) != expected:
            raise ValueError(
                f"{self.type.name} segment needs {expected} control points, "
                f"got {len(self.controls)}"
            )

    @classmethod
    def move_to(cls, end: Point) -> "Segment":
        """Create a MoveTo segment."""
        return cls(SegmentType.MOVE_TO, end, end)

    @classmethod
    def line_to(cls, start: Point, end: Point) -> "Segment":
        """Create a LineTo segment."""
        return cls(SegmentType.LINE_TO, start, end)

    @classmethod
    def cubic(cls, start: Point, c1: Point, c2: Point, end: Point) -> "Segment":
        """Create a cubic Bezier segment."""
        return cls(SegmentType.CUBIC, start, end, (c1, c2))

    @classmethod
    def quadratic(cls, start: Point, c: Point, end: Point) -> "Segment":
        """Create a quadratic Bezier segment."""
        return cls(SegmentType.QUADRATIC, start, end, (c,))

    @classmethod
    def close(cls, start: Point, subpath_start: Point) -> "Segment":
        """Create a ClosePath segment returning to the sub-path start."""
        return cls(SegmentType.CLOSE, start, subpath_start)

    @property
    def is_curve(self) -> bool:
        """True for cubic and quadratic segments."""
        return self.type in (SegmentType.CUBIC, SegmentType.QUADRATIC)

    @property
    def draws(self) -> bool:
        """True for segments that put ink on the canvas (everything except MoveTo)."""
        return self.type is not SegmentType.MOVE_TO

    @property
    def points(self) -> tuple[Point, ...]:
        """All points of the segment: start, controls, end."""
        return (self.start, *self.controls, self.end)

    def with_start(self, start: Point) -> "Segment":
        """Return a copy with a different start point."""
        if self.type is SegmentType.MOVE_TO:
            return self
        return Segment(self.type, start, self.end, self.controls)

    def with_end(self, end: Point) -> "Segment":
        """Return a copy with a different end point."""
        if self.type is SegmentType.MOVE_TO:
            return Segment.move_to(end)
        return Segment(self.type, self.start, end, self.controls)

    def map_points(self, fn: Callable[[Point], Point]) -> "Segment":
        """Apply a point function to every point of the segment.

        Args:
            fn: Function mapping a point to its image

        Returns:
            New segment with all points mapped
        """
        return Segment(
            self.type,
            fn(self.start),
            fn(self.end),
            tuple(fn(c) for c in self.controls),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with type, start, end and controls fields
        """
        return {
            "type": self.type.value,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "controls": [c.to_dict() for c in self.controls],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Segment":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with type, start, end and controls fields

        Returns:
            Segment instance
        """
        return cls(
            type=SegmentType(data["type"]),
            start=Point.from_dict(data["start"]),
            end=Point.from_dict(data["end"]),
            controls=tuple(Point.from_dict(c) for c in data.get("controls", [])),
        )
