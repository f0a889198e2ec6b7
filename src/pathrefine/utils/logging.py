"""Logging utilities for pathrefine."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_HANDLER_NAME = "pathrefine"


@dataclass
class ProcessingStats:
    """Statistics from processing run."""

    processed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    points_before: int = 0
    points_after: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    path_times_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_path_time_ms(self) -> float | None:
        """Average per-path processing time."""
        if not self.path_times_ms:
            return None
        return sum(self.path_times_ms) / len(self.path_times_ms)

    @property
    def min_path_time_ms(self) -> float | None:
        """Fastest per-path processing time."""
        return min(self.path_times_ms) if self.path_times_ms else None

    @property
    def max_path_time_ms(self) -> float | None:
        """Slowest per-path processing time."""
        return max(self.path_times_ms) if self.path_times_ms else None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Drop handlers installed by an earlier call
    for handler in list(root_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.set_name(_HANDLER_NAME)
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("pathrefine")
    logger.debug(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class ProcessingLogger:
    """Logger for tracking processing progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ProcessingStats()

    def log_path_start(self, path_id: str, operation: str) -> None:
        """Log start of path processing."""
        self._logger.debug("Processing path", path=path_id, operation=operation)

    def log_path_complete(
        self,
        path_id: str,
        points_before: int,
        points_after: int,
        duration_ms: float,
    ) -> None:
        """Log successful path processing."""
        self._logger.info(
            "Path processed",
            path=path_id,
            points_before=points_before,
            points_after=points_after,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.points_before += points_before
        self._stats.points_after += points_after
        self._stats.path_times_ms.append(duration_ms)

    def log_path_skipped(self, path_id: str, reason: str) -> None:
        """Log skipped path."""
        self._logger.debug("Path skipped", path=path_id, reason=reason)
        self._stats.skipped_count += 1

    def log_path_error(
        self,
        path_id: str,
        error: Exception | str,
        traceback: str | None = None,
    ) -> None:
        """Log path processing error."""
        self._logger.error(
            "Path processing failed",
            path=path_id,
            error=str(error),
            error_type=type(error).__name__ if isinstance(error, Exception) else "error",
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((path_id, str(error)))

    def log_document_analysis(
        self,
        source: str,
        path_count: int,
        total_points: int,
        health: float,
    ) -> None:
        """Log document health analysis results."""
        self._logger.debug(
            "Document analysis",
            source=source,
            paths=path_count,
            points=total_points,
            health=round(health, 1),
        )

    @property
    def stats(self) -> ProcessingStats:
        """Get current processing statistics."""
        return self._stats
