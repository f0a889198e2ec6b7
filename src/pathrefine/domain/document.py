"""Document model: ordered paths plus canvas geometry.

This module defines:
- ViewBox: The SVG viewBox rectangle
- Document: An ordered Path sequence (z-order) with canvas size
"""

from dataclasses import dataclass, replace
from typing import Any

from pathrefine.domain.path import Path


@dataclass(frozen=True, slots=True)
class ViewBox:
    """SVG viewBox rectangle.

    Attributes:
        x: Minimum x of the visible user-space area
        y: Minimum y of the visible user-space area
        width: Width of the visible area
        height: Height of the visible area
    """

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViewBox":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"], width=data["width"], height=data["height"])


@dataclass(frozen=True)
class Document:
    """An SVG document reduced to its paths.

    Path order is z-order and survives parse/serialize round trips.

    Attributes:
        width: Canvas width
        height: Canvas height
        view_box: Optional viewBox
        paths: Ordered paths, bottom-most first
    """

    width: float
    height: float
    view_box: ViewBox | None = None
    paths: tuple[Path, ...] = ()

    @property
    def path_count(self) -> int:
        """Number of paths in the document."""
        return len(self.paths)

    def is_empty(self) -> bool:
        """Check if document has no paths."""
        return not self.paths

    def get_path(self, path_id: str) -> Path | None:
        """Find a path by id.

        Args:
            path_id: Id to look up

        Returns:
            The first path with that id, or None
        """
        for path in self.paths:
            if path.id == path_id:
                return path
        return None

    def with_paths(self, paths: list[Path] | tuple[Path, ...]) -> "Document":
        """Return a copy with a new path sequence."""
        return replace(self, paths=tuple(paths))

    def replace_path(self, path: Path) -> "Document":
        """Return a copy with the path of the same id swapped for ``path``."""
        return self.with_paths([path if p.id == path.id else p for p in self.paths])

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the document
        """
        return {
            "width": self.width,
            "height": self.height,
            "view_box": self.view_box.to_dict() if self.view_box else None,
            "paths": [p.to_dict() for p in self.paths],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of the document

        Returns:
            Document instance
        """
        view_box = data.get("view_box")
        return cls(
            width=data["width"],
            height=data["height"],
            view_box=ViewBox.from_dict(view_box) if view_box else None,
            paths=tuple(Path.from_dict(p) for p in data.get("paths", [])),
        )
