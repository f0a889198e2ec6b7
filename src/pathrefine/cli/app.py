"""CLI application entry point for pathrefine.

This module provides the main CLI interface using Typer.
"""

import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from pathrefine import __version__
from pathrefine.cli.output import (
    console,
    create_progress,
    print_analysis,
    print_cancellation_notice,
    print_cancellation_summary,
    print_document_info,
    print_error,
    print_header,
    print_processing_info,
    print_saved,
    print_step,
    print_success,
)
from pathrefine.config import (
    INTENSITY_PRESETS,
    AlignmentParams,
    Distribution,
    Intensity,
    LoggingConfig,
    Operation,
    PathRefineSettings,
    ProcessingConfig,
    SerializerConfig,
    SimplifyConfig,
)
from pathrefine.core import (
    OUTPUT_SUFFIXES,
    DocumentProcessor,
    PathAnalyzer,
    align_to_path,
    fit_to_content,
    format_file_size,
    length,
    merge_nearby_paths,
    merge_selected_paths,
    merge_similar_paths,
    perfect_square,
)
from pathrefine.domain import Document
from pathrefine.exceptions import (
    DocumentLoadError,
    DocumentSaveError,
    ParseError,
    PathNotFoundError,
    PathProcessingError,
    PathRefineError,
)
from pathrefine.io import SVGReader, SVGWriter, save_document
from pathrefine.utils import ProcessingLogger, configure_logging

# Create the Typer app
app = typer.Typer(
    name="pathrefine",
    help="Simplify, heal, repair, merge, analyze and tile SVG paths.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]pathrefine[/bold blue] v{__version__}")
        raise typer.Exit()


# Options shared by every command
InputArg = Annotated[
    Path,
    typer.Argument(
        help="Path to input SVG file",
        show_default=False,
    ),
]
OutputOpt = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output path (default: {name}-{operation}.svg)",
    ),
]
LogFileOpt = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write detailed logs to file",
    ),
]
LogLevelOpt = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Logging level (DEBUG|INFO|WARNING|ERROR)",
    ),
]
QuietOpt = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Minimal console output",
    ),
]
VersionOpt = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
]
PrecisionOpt = Annotated[
    int,
    typer.Option(
        "--precision",
        "-p",
        help="Decimal digits for coordinates in the output",
        min=0,
        max=8,
    ),
]
WorkersOpt = Annotated[
    int | None,
    typer.Option(
        "--workers",
        "-j",
        help="Number of parallel workers (default: 1, 0 = auto)",
        min=0,
    ),
]


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Map pathrefine errors to error messages and exit code 1."""
    try:
        yield
    except typer.Exit:
        raise
    except DocumentLoadError as e:
        print_error(f"Could not load SVG: {e.reason}")
        raise typer.Exit(code=1)
    except ParseError as e:
        print_error(f"Could not parse SVG: {e.reason}", details=e.source)
        raise typer.Exit(code=1)
    except DocumentSaveError as e:
        print_error(f"Could not save SVG: {e.reason}")
        raise typer.Exit(code=1)
    except PathRefineError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _validate_input(input_svg: Path) -> None:
    if not input_svg.exists():
        print_error(
            f"Input file not found: {input_svg}",
            details=f"The file '{input_svg}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_svg.is_file():
        print_error(
            f"Input path is not a file: {input_svg}",
            details="Please provide a path to an SVG file.",
        )
        raise typer.Exit(code=1)


def _logging_config(log_file: Path | None, log_level: str, quiet: bool) -> LoggingConfig:
    return LoggingConfig(log_file=log_file, log_level=log_level if not quiet else "WARNING")


def _setup_logging(log_file: Path | None, log_level: str, quiet: bool) -> ProcessingLogger:
    """Configure logging for commands that do not run the processor."""
    config = _logging_config(log_file, log_level, quiet)
    logger = configure_logging(
        log_file=config.log_file,
        console_level=config.log_level,
        file_level=config.file_log_level,
        quiet=quiet,
    )
    return ProcessingLogger(logger)


def _load(input_svg: Path, quiet: bool) -> tuple[Document, int]:
    """Load a document, printing its summary unless quiet.

    Returns:
        Tuple of (document, file size in bytes)
    """
    if not quiet:
        print_step("Loading SVG")

    reader = SVGReader(input_svg)
    try:
        reader.load()
    except OSError as e:
        raise DocumentLoadError(str(input_svg), str(e)) from e
    document = reader.document
    size = reader.file_size

    if not quiet:
        print_document_info(str(input_svg), document, format_file_size(size))
    return document, size


def _file_size(path: Path) -> str:
    try:
        return format_file_size(path.stat().st_size)
    except OSError:
        return "unknown"


def _run_processor(
    input_svg: Path,
    output: Path | None,
    operation: Operation,
    settings: PathRefineSettings,
    quiet: bool,
) -> None:
    """Load, process and save a document with progress output."""
    if not quiet:
        print_header(__version__)

    document, _ = _load(input_svg, quiet)
    output_path = output or SVGWriter.get_output_path(input_svg, OUTPUT_SUFFIXES[operation])

    max_workers = settings.processing.max_workers
    if not quiet:
        print_step("Processing")
        print_processing_info(max_workers or os.cpu_count() or 1, is_auto=max_workers is None)

    processor = DocumentProcessor(settings, quiet=quiet)
    stats = None

    try:
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task(
                    f"Processing {document.path_count} paths",
                    total=document.path_count,
                )

                def update_progress(completed: int, *_: object) -> None:
                    progress.update(task_id, completed=completed)

                result, stats = processor.process(
                    document, operation, progress_callback=update_progress
                )
                progress.update(task_id, completed=document.path_count)
        else:
            result, stats = processor.process(document, operation)
    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            print_cancellation_summary(
                processed=stats.processed_count if stats else 0,
                cancelled=stats.cancelled_count if stats else 0,
            )
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

    save_document(result, output_path, settings.serializer.precision)

    if not quiet:
        print_success(
            output_path=str(output_path),
            file_size=_file_size(output_path),
            total_time_s=stats.duration_seconds,
            processed=stats.processed_count,
            points_before=stats.points_before,
            points_after=stats.points_after,
            errors=stats.error_count,
            avg_time_ms=stats.avg_path_time_ms,
            min_time_ms=stats.min_path_time_ms,
            max_time_ms=stats.max_path_time_ms,
        )


@app.command()
def analyze(
    input_svg: InputArg,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the report as JSON to this path",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="List every path, not only those with suggestions",
        ),
    ] = False,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Report document health and suggest optimizations.

    Example:
        pathrefine analyze logo.svg --verbose
    """
    _validate_input(input_svg)
    processing_logger = _setup_logging(log_file, log_level, quiet)

    with _cli_errors():
        if not quiet:
            print_header(__version__)
        document, size = _load(input_svg, quiet)

        report = PathAnalyzer().analyze_document(document, actual_bytes=size)
        processing_logger.log_document_analysis(
            str(input_svg), report.path_count, report.total_points, report.health
        )

        if not quiet:
            print_step("Analysis")
            print_analysis(
                report,
                size=format_file_size(report.estimated_bytes),
                savings=format_file_size(report.estimated_savings),
                verbose=verbose,
            )
        else:
            console.print(f"{report.health:.1f}")

        if output is not None:
            try:
                output.write_text(json.dumps(asdict(report), indent=2), encoding="utf-8")
            except OSError as e:
                raise DocumentSaveError(str(output), str(e)) from e
            if not quiet:
                print_saved(str(output), _file_size(output), "analysis report")


@app.command()
def simplify(
    input_svg: InputArg,
    output: OutputOpt = None,
    tolerance: Annotated[
        float,
        typer.Option(
            "--tolerance",
            "-t",
            help="Tolerance as percent of each sub-path's bounding-box diagonal",
            min=0.0,
            max=100.0,
        ),
    ] = 0.5,
    no_refit: Annotated[
        bool,
        typer.Option(
            "--no-refit",
            help="Skip the curve refit stage",
        ),
    ] = False,
    precision: PrecisionOpt = 3,
    workers: WorkersOpt = None,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Reduce segment count of every path within a relative tolerance.

    Example:
        pathrefine simplify logo.svg --tolerance 0.5

    This will create logo-simplified.svg.
    """
    _validate_input(input_svg)

    settings = PathRefineSettings(
        simplify=SimplifyConfig(tolerance_percent=tolerance, refit_curves=not no_refit),
        processing=ProcessingConfig(max_workers=_max_workers(workers)),
        serializer=SerializerConfig(precision=precision),
        logging=_logging_config(log_file, log_level, quiet),
    )

    with _cli_errors():
        _run_processor(input_svg, output, Operation.SIMPLIFY, settings, quiet)


@app.command()
def heal(
    input_svg: InputArg,
    output: OutputOpt = None,
    count: Annotated[
        int | None,
        typer.Option(
            "--count",
            "-n",
            help="Anchors to remove per path (default: optimal count)",
            min=0,
        ),
    ] = None,
    auto: Annotated[
        bool,
        typer.Option(
            "--auto",
            help="Only heal paths the health analysis flags, down to its target",
        ),
    ] = False,
    precision: PrecisionOpt = 3,
    workers: WorkersOpt = None,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Remove the least important anchors, bridging each gap with a cubic.

    Example:
        pathrefine heal logo.svg --count 5

    This will create logo-healed.svg.
    """
    _validate_input(input_svg)

    if auto and count is not None:
        print_error("Cannot use --auto and --count together")
        raise typer.Exit(code=1)

    settings = PathRefineSettings(
        processing=ProcessingConfig(max_workers=_max_workers(workers), heal_count=count),
        serializer=SerializerConfig(precision=precision),
        logging=_logging_config(log_file, log_level, quiet),
    )
    operation = Operation.AUTO_HEAL if auto else Operation.HEAL

    with _cli_errors():
        _run_processor(input_svg, output, operation, settings, quiet)


@app.command()
def align(
    input_svg: InputArg,
    source: Annotated[
        str,
        typer.Option(
            "--source",
            "-s",
            help="Id of the path to repeat",
            show_default=False,
        ),
    ],
    target: Annotated[
        str,
        typer.Option(
            "--target",
            "-t",
            help="Id of the path to follow",
            show_default=False,
        ),
    ],
    output: OutputOpt = None,
    repeat: Annotated[
        int,
        typer.Option(
            "--repeat",
            "-n",
            help="Number of copies",
            min=1,
            max=10000,
        ),
    ] = 1,
    offset: Annotated[
        float,
        typer.Option("--offset", help="Position shift as a fraction of the target length"),
    ] = 0.0,
    perp_offset: Annotated[
        float,
        typer.Option("--perp-offset", help="Distance from the target along its normal"),
    ] = 0.0,
    rotation: Annotated[
        float,
        typer.Option("--rotation", help="Extra rotation in degrees"),
    ] = 0.0,
    scale: Annotated[
        float,
        typer.Option("--scale", help="Uniform scale of the source", min=0.001),
    ] = 1.0,
    deform: Annotated[
        bool,
        typer.Option("--deform", help="Bend copies along the target instead of moving them"),
    ] = False,
    range_start: Annotated[
        float,
        typer.Option(
            "--range-start",
            help="Start of the covered part of the target",
            min=0.0,
            max=1.0,
        ),
    ] = 0.0,
    range_end: Annotated[
        float,
        typer.Option(
            "--range-end",
            help="End of the covered part of the target",
            min=0.0,
            max=1.0,
        ),
    ] = 1.0,
    random_positions: Annotated[
        bool,
        typer.Option("--random", help="Random positions instead of even spacing (needs --seed)"),
    ] = False,
    random_rotation: Annotated[
        float,
        typer.Option(
            "--random-rotation",
            help="Maximum random rotation in degrees",
            min=0.0,
            max=180.0,
        ),
    ] = 0.0,
    random_scale: Annotated[
        float,
        typer.Option(
            "--random-scale",
            help="Maximum random scale change in percent",
            min=0.0,
            max=100.0,
        ),
    ] = 0.0,
    random_offset: Annotated[
        float,
        typer.Option("--random-offset", help="Maximum random normal offset", min=0.0),
    ] = 0.0,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for reproducible variation"),
    ] = None,
    remove_source: Annotated[
        bool,
        typer.Option("--remove-source", help="Drop the source path from the output"),
    ] = False,
    precision: PrecisionOpt = 3,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Repeat one path along another path.

    Copies are inserted right after the target path.

    Example:
        pathrefine align border.svg --source leaf --target vine --repeat 12
    """
    _validate_input(input_svg)
    _setup_logging(log_file, log_level, quiet)

    params = AlignmentParams(
        offset=offset,
        perp_offset=perp_offset,
        rotation=rotation,
        preserve_shape=not deform,
        repeat_count=repeat,
        scale=scale,
        range_start=range_start,
        range_end=range_end,
        distribution=Distribution.RANDOM if random_positions else Distribution.EVEN,
        random_rotation=random_rotation,
        random_scale=random_scale,
        random_offset=random_offset,
        random_seed=seed,
    )

    with _cli_errors():
        if not quiet:
            print_header(__version__)
        document, _ = _load(input_svg, quiet)

        source_path = document.get_path(source)
        if source_path is None:
            raise PathNotFoundError(source)
        target_path = document.get_path(target)
        if target_path is None:
            raise PathNotFoundError(target)
        if length(target_path.segments) <= 0:
            raise PathProcessingError(target, "target path has no length")

        if not quiet:
            print_step("Aligning")
        copies = align_to_path(source_path, target_path, params)

        paths = []
        for path in document.paths:
            if remove_source and path.id == source:
                continue
            paths.append(path)
            if path is target_path:
                paths.extend(copies)

        output_path = output or SVGWriter.get_output_path(input_svg, "aligned")
        save_document(document.with_paths(paths), output_path, precision)

        if not quiet:
            print_saved(
                str(output_path),
                _file_size(output_path),
                f"{len(copies)} copies of '{source}' along '{target}'",
            )


@app.command()
def fit(
    input_svg: InputArg,
    output: OutputOpt = None,
    padding: Annotated[
        float,
        typer.Option(
            "--padding",
            help="Space kept around the content",
            min=0.0,
        ),
    ] = 0.0,
    precision: PrecisionOpt = 3,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Crop the canvas and viewBox to the artwork.

    Example:
        pathrefine fit icon.svg --padding 2
    """
    _validate_input(input_svg)
    _setup_logging(log_file, log_level, quiet)

    with _cli_errors():
        if not quiet:
            print_header(__version__)
        document, _ = _load(input_svg, quiet)

        fitted = fit_to_content(document, padding)
        output_path = output or SVGWriter.get_output_path(input_svg, "fitted")
        save_document(fitted, output_path, precision)

        if not quiet:
            print_saved(
                str(output_path),
                _file_size(output_path),
                f"canvas {fitted.width:g} x {fitted.height:g}",
            )


@app.command()
def repair(
    input_svg: InputArg,
    output: OutputOpt = None,
    intensity: Annotated[
        Intensity,
        typer.Option(
            "--intensity",
            "-i",
            help="Repair strength: light, medium, strong or extreme",
            case_sensitive=False,
        ),
    ] = Intensity.MEDIUM,
    precision: PrecisionOpt = 3,
    workers: WorkersOpt = None,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Close tiny gaps and simplify every path at a preset intensity.

    Example:
        pathrefine repair traced.svg --intensity strong

    This will create traced-repaired.svg.
    """
    _validate_input(input_svg)

    settings = PathRefineSettings(
        processing=ProcessingConfig(max_workers=_max_workers(workers), intensity=intensity),
        serializer=SerializerConfig(precision=precision),
        logging=_logging_config(log_file, log_level, quiet),
    )
    with _cli_errors():
        _run_processor(input_svg, output, Operation.REPAIR, settings, quiet)

    if not quiet:
        preset = INTENSITY_PRESETS[intensity]
        console.print(f"[dim]Intensity {preset.label}: {preset.description}[/dim]")


@app.command()
def merge(
    input_svg: InputArg,
    output: OutputOpt = None,
    path_ids: Annotated[
        list[str] | None,
        typer.Option(
            "--path",
            "-i",
            help="Id of a path to merge (repeat for each path)",
            show_default=False,
        ),
    ] = None,
    similar: Annotated[
        float | None,
        typer.Option(
            "--similar",
            help="Merge paths whose fill colors are at least this similar (0-1)",
            min=0.0,
            max=1.0,
        ),
    ] = None,
    distance: Annotated[
        float | None,
        typer.Option(
            "--distance",
            help="Merge paths whose centers are chained within this distance",
            min=0.0,
        ),
    ] = None,
    fill: Annotated[
        str | None,
        typer.Option("--fill", help="Fill of the merged path (with --path)"),
    ] = None,
    precision: PrecisionOpt = 3,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Merge paths into compound paths.

    Choose exactly one of --path, --similar or --distance.

    Example:
        pathrefine merge icon.svg --similar 0.95
        pathrefine merge icon.svg -i body -i eye --fill "#333"
    """
    _validate_input(input_svg)

    modes = sum(1 for m in (path_ids, similar, distance) if m is not None)
    if modes != 1:
        print_error("Choose exactly one of --path, --similar or --distance")
        raise typer.Exit(code=1)
    if path_ids is not None and len(set(path_ids)) < 2:
        print_error("Merging by id needs at least two --path options")
        raise typer.Exit(code=1)

    _setup_logging(log_file, log_level, quiet)

    with _cli_errors():
        if not quiet:
            print_header(__version__)
        document, _ = _load(input_svg, quiet)

        if not quiet:
            print_step("Merging")
        if path_ids is not None:
            merged = merge_selected_paths(document, path_ids, fill)
            merged_count = document.path_count - merged.path_count
        elif similar is not None:
            merged, merged_count = merge_similar_paths(document, similar)
        else:
            merged, merged_count = merge_nearby_paths(document, distance)  # type: ignore[arg-type]

        output_path = output or SVGWriter.get_output_path(input_svg, "merged")
        save_document(merged, output_path, precision)

        if not quiet:
            print_saved(
                str(output_path),
                _file_size(output_path),
                f"{merged_count} paths merged, {merged.path_count} remaining",
            )


@app.command()
def square(
    input_svg: InputArg,
    output: OutputOpt = None,
    size: Annotated[
        float,
        typer.Option("--size", help="Side length of the square canvas", min=0.001),
    ] = 24.0,
    padding: Annotated[
        float,
        typer.Option("--padding", help="Space kept around the content", min=0.0),
    ] = 2.0,
    offset_x: Annotated[
        float,
        typer.Option("--offset-x", help="Extra horizontal shift after centering"),
    ] = 0.0,
    offset_y: Annotated[
        float,
        typer.Option("--offset-y", help="Extra vertical shift after centering"),
    ] = 0.0,
    precision: PrecisionOpt = 3,
    log_file: LogFileOpt = None,
    log_level: LogLevelOpt = "WARNING",
    quiet: QuietOpt = False,
    _version: VersionOpt = None,  # noqa: ARG001
) -> None:
    """Center and scale the artwork onto a square icon canvas.

    Example:
        pathrefine square icon.svg --size 24 --padding 2
    """
    _validate_input(input_svg)
    if 2 * padding >= size:
        print_error("Padding must leave room for the content", details=f"size {size:g}")
        raise typer.Exit(code=1)
    _setup_logging(log_file, log_level, quiet)

    with _cli_errors():
        if not quiet:
            print_header(__version__)
        document, _ = _load(input_svg, quiet)

        squared = perfect_square(document, size, padding, offset_x, offset_y)
        output_path = output or SVGWriter.get_output_path(input_svg, "square")
        save_document(squared, output_path, precision)

        if not quiet:
            print_saved(str(output_path), _file_size(output_path), f"canvas {size:g} x {size:g}")


def _max_workers(
workers: int | None) -> int | None:
    """CLI worker count to processor setting: None keeps in-process, 0 means auto."""
    if workers is None:
        return 1
    return workers or None


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
