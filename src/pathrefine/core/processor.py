"""Document-wide processing orchestration.

This module runs one engine operation over every path of a document,
either in-process or across worker processes with ProcessPoolExecutor.

Key components:
- process_path: Top-level picklable function for parallel execution
- DocumentProcessor: Main orchestrator class for document processing
"""

import os
import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path as FilePath
from typing import Any

from pathrefine.config import Operation, PathRefineSettings
from pathrefine.core.analysis import PathAnalyzer
from pathrefine.core.heal import PathHealer
from pathrefine.core.repair import repair_path
from pathrefine.core.simplify import PathSimplifier
from pathrefine.domain import Document, Path, RecommendationKind
from pathrefine.utils import ProcessingLogger, ProcessingStats, configure_logging


def _auto_heal_count(path: Path, settings: PathRefineSettings) -> int:
    """Anchors to remove so the path reaches the suggested heal target."""
    analysis = PathAnalyzer(settings.scoring).analyze_path(path)
    for rec in analysis.recommendations:
        if rec.kind is RecommendationKind.HEAL and rec.target_points is not None:
            return max(0, analysis.point_count - rec.target_points)
    return 0


def apply_operation(path: Path, operation: Operation, settings: PathRefineSettings) -> Path:
    """Run one engine operation on a single path.

    Args:
        path: Path to process
        operation: Operation to apply
        settings: Settings holding the per-operation configuration

    Returns:
        Processed path
    """
    if operation is Operation.SIMPLIFY:
        return PathSimplifier(settings.simplify).simplify(path)
    if operation is Operation.REPAIR:
        return repair_path(path, settings.processing.intensity, settings.simplify)

    healer = PathHealer(settings.heal)
    if operation is Operation.HEAL:
        count = settings.processing.heal_count
        if count is None:
            count = healer.optimal_heal_count(path)
        return healer.heal_multiple(path, count)

    return healer.heal_multiple(path, _auto_heal_count(path, settings))


def process_path(
    path_dict: dict[str, Any],
    operation: str,
    config_dict: dict[str, Any],
) -> dict[str, Any]:
    """Process a single path.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes the path, applies the operation, and returns the result.

    Args:
        path_dict: Serialized path (from Path.to_dict())
        operation: Operation value ("simplify", "heal", "auto_heal" or "repair")
        config_dict: Serialized settings (from PathRefineSettings.model_dump())

    Returns:
        Dictionary containing either:
        - Success: {"path": path_dict, "points_before": int, "points_after": int,
          "duration_ms": float}
        - Error: {"error": str, "path_id": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        path = Path.from_dict(path_dict)
        settings = PathRefineSettings(**config_dict)

        processed = apply_operation(path, Operation(operation), settings)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "path": processed.to_dict(),
            "points_before": path.anchor_count,
            "points_after": processed.anchor_count,
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "path_id": path_dict.get("id", "unknown"),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class DocumentProcessor:
    """Orchestrates document-wide path processing.

    Manages the workflow:
    1. Filter paths requiring processing (visible, non-empty)
    2. Process paths serially or in worker processes
    3. Collect results and update statistics
    4. Rebuild the document, keeping originals of failed paths

    Example:
        settings = PathRefineSettings()
        processor = DocumentProcessor(settings)
        document, stats = processor.process(document, Operation.SIMPLIFY)
    """

    def __init__(self, config: PathRefineSettings, quiet: bool = False) -> None:
        """Initialize document processor with configuration.

        Args:
            config: Settings containing operation and processing config
            quiet: Suppress console log output except errors
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=quiet,
        )
        self.processing_logger = ProcessingLogger(self.logger)

    def process(
        self,
        document: Document,
        operation: Operation,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> tuple[Document, ProcessingStats]:
        """Apply an operation to every eligible path of a document.

        Args:
            document: Document to process
            operation: Operation to apply
            max_workers: Worker processes, configured default when None;
                1 processes in-process
            progress_callback: Optional callback(completed, total, path_id, success)
                for progress updates

        Returns:
            Tuple of (processed document, statistics)

        Raises:
            KeyboardInterrupt: If processing is cancelled by user
        """
        stats = ProcessingStats()
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        self.logger.info(
            "Starting document processing",
            operation=operation.value,
            paths=document.path_count,
            max_workers=max_workers,
        )

        eligible: list[int] = []
        for doc_index, path in enumerate(document.paths):
            if path.is_empty():
                stats.skipped_count += 1
                self.processing_logger.log_path_skipped(path.id, "empty path")
                continue
            if self.config.processing.skip_hidden and not path.visible:
                stats.skipped_count += 1
                self.processing_logger.log_path_skipped(path.id, "hidden path")
                continue
            eligible.append(doc_index)

        to_process = [document.paths[i] for i in eligible]

        processed: dict[int, Path] = {}
        if to_process:
            if max_workers == 1:
                processed = self._process_serial(to_process, operation, stats, progress_callback)
            else:
                processed = self._process_parallel(
                    to_process, operation, max_workers, stats, progress_callback
                )
        else:
            self.logger.info("No paths to process")

        # Results are keyed by position so duplicate ids stay distinct
        paths = list(document.paths)
        for position, result in processed.items():
            paths[eligible[position]] = result

        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            points_before=stats.points_before,
            points_after=stats.points_after,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return document.with_paths(paths), stats

    def process_file(
        self,
        input_path: FilePath,
        operation: Operation,
        output_path: FilePath | None = None,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> ProcessingStats:
        """Load an SVG file, process it and save the result.

        Args:
            input_path: SVG file to read
            operation: Operation to apply
            output_path: Destination (``{stem}-{operation}.svg`` if None)
            max_workers: Worker processes, configured default when None
            progress_callback: Optional progress callback, see process()

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            DocumentLoadError: If the input cannot be read
            ParseError: If the input is not a valid SVG document
            DocumentSaveError: If the output cannot be written
        """
        from pathrefine.io import SVGWriter, load_document, save_document

        if output_path is None:
            output_path = SVGWriter.get_output_path(input_path, OUTPUT_SUFFIXES[operation])

        document = load_document(input_path)
        result, stats = self.process(document, operation, max_workers, progress_callback)
        save_document(result, output_path, self.config.serializer.precision)

        self.logger.info("Document saved", output=str(output_path))
        return stats

    def _record_success(
        self, path_id: str, result: dict[str, Any], stats: ProcessingStats
    ) -> Path:
        points_before = result["points_before"]
        points_after = result["points_after"]
        duration_ms = result.get("duration_ms", 0.0)

        stats.processed_count += 1
        stats.points_before += points_before
        stats.points_after += points_after
        stats.path_times_ms.append(duration_ms)
        self.processing_logger.log_path_complete(
            path_id=path_id,
            points_before=points_before,
            points_after=points_after,
            duration_ms=duration_ms,
        )
        return Path.from_dict(result["path"])

    def _record_error(
        self,
        path_id: str,
        error: Exception | str,
        tb: str | None,
        stats: ProcessingStats,
    ) -> None:
        stats.error_count += 1
        stats.errors.append((path_id, str(error)))
        self.processing_logger.log_path_error(path_id=path_id, error=error, traceback=tb)

    def _process_serial(
        self,
        paths: list[Path],
        operation: Operation,
        stats: ProcessingStats,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> dict[int, Path]:
        """Process paths one after another in this process.

        Returns:
            Dictionary mapping input positions to processed paths
        """
        processed: dict[int, Path] = {}
        total = len(paths)

        for index, path in enumerate(paths):
            self.processing_logger.log_path_start(path.id, operation.value)
            start_time = time.time()
            success = False
            try:
                result = apply_operation(path, operation, self.config)
            except Exception as e:
                self._record_error(path.id, e, traceback.format_exc(), stats)
            else:
                success = True
                processed[index] = self._record_success(
                    path.id,
                    {
                        "path": result.to_dict(),
                        "points_before": path.anchor_count,
                        "points_after": result.anchor_count,
                        "duration_ms": (time.time() - start_time) * 1000,
                    },
                    stats,
                )

            if progress_callback is not None:
                progress_callback(index + 1, total, path.id, success)

        return processed

    def _process_parallel(
        self,
        paths: list[Path],
        operation: Operation,
        max_workers: int | None,
        stats: ProcessingStats,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> dict[int, Path]:
        """Process paths in parallel using ProcessPoolExecutor.

        Args:
            paths: Paths to process
            operation: Operation to apply
            max_workers: Maximum worker processes (None = CPU count)
            stats: Statistics object to update
            progress_callback: Optional callback(completed, total, path_id, success)

        Returns:
            Dictionary mapping input positions to processed paths
        """
        processed: dict[int, Path] = {}
        config_dict = self.config.model_dump()

        self.logger.info(
            "Starting parallel processing",
            path_count=len(paths),
            max_workers=max_workers or os.cpu_count(),
        )

        total = len(paths)
        completed = 0
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for index, path in enumerate(paths):
                future = executor.submit(process_path, path.to_dict(), operation.value, config_dict)
                pending_futures[future] = index

            try:
                for future in as_completed(pending_futures):
                    index = pending_futures.pop(future)
                    path_id = paths[index].id
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            self._record_error(
                                path_id, result["error"], result.get("traceback"), stats
                            )
                        else:
                            success = True
                            processed[index] = self._record_success(path_id, result, stats)

                    except Exception as e:
                        # Executor-level error
                        self._record_error(path_id, e, traceback.format_exc(), stats)

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, path_id, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return processed


# File name suffix of each operation's default output
OUTPUT_SUFFIXES = {
    Operation.SIMPLIFY: "simplified",
    Operation.HEAL: "healed",
    Operation.AUTO_HEAL: "healed",
    Operation.REPAIR: "repaired",
}
