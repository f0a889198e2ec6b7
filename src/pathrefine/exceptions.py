"""Exception hierarchy for pathrefine."""


class PathRefineError(Exception):
    """Base exception for all pathrefine errors."""

    pass


class DocumentError(PathRefineError):
    """Errors related to SVG document loading, parsing or saving."""

    pass


class ParseError(DocumentError):
    """Malformed SVG text or missing <svg> root element."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to parse '{source}': {reason}")


class DocumentLoadError(DocumentError):
    """Error reading an SVG file from disk."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load document '{path}': {reason}")


class DocumentSaveError(DocumentError):
    """Error writing an SVG file to disk."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save document '{path}': {reason}")


class PathError(PathRefineError):
    """Errors related to individual paths."""

    pass


class PathNotFoundError(PathError):
    """Requested path id not present in the document."""

    def __init__(self, path_id: str) -> None:
        self.path_id = path_id
        super().__init__(f"Path '{path_id}' not found in document")


class PathProcessingError(PathError):
    """Error running an operation on a specific path."""

    def __init__(self, path_id: str, reason: str) -> None:
        self.path_id = path_id
        self.reason = reason
        super().__init__(f"Error processing path '{path_id}': {reason}")
