"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from pathrefine.domain import ComplexityTier, Document, DocumentAnalysis

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info

TIER_STYLES = {
    ComplexityTier.OPTIMAL: "green",
    ComplexityTier.ACCEPTABLE: "cyan",
    ComplexityTier.BLOATED: "yellow",
    ComplexityTier.DISASTER: "red",
}


def create_progress() -> Progress:
    """Create a rich progress bar for path processing.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]pathrefine[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_document_info(svg_path: str, document: Document, file_size: str) -> None:
    """Print document information.

    Args:
        svg_path: Path to the SVG file
        document: Loaded document
        file_size: Human-readable file size string
    """
    # Use Text to safely handle paths with special characters
    line1 = Text("  ")
    line1.append(svg_path)
    line1.append(f" ({file_size})")
    console.print(line1)
    points = sum(p.anchor_count for p in document.paths)
    console.print(
        f"  {document.path_count:,} paths {SYM_DOT} {points:,} points {SYM_DOT} "
        f"{document.width:g} x {document.height:g}"
    )


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_analysis(analysis: DocumentAnalysis, size: str, savings: str, verbose: bool) -> None:
    """Print a document health report.

    Args:
        analysis: Document analysis result
        size: Human-readable document size
        savings: Human-readable estimated savings
        verbose: Whether to list every path, not only those with recommendations
    """
    console.print(
        f"  Health [bold]{analysis.health:.0f}[/bold]/100 {SYM_DOT} "
        f"{analysis.total_points:,} points {SYM_DOT} {size}"
    )
    console.print(
        f"  Estimated savings {savings} ({analysis.savings_fraction * 100:.0f}%)"
    )

    rows = [a for a in analysis.paths if verbose or a.recommendations]
    if not rows:
        return

    table = Table(show_edge=False, pad_edge=False, box=None)
    table.add_column("Path")
    table.add_column("Points", justify="right")
    table.add_column("Health", justify="right")
    table.add_column("Tier")
    table.add_column("Suggestions")

    for a in rows:
        style = TIER_STYLES[a.tier]
        table.add_row(
            Text(a.path_id),
            f"{a.point_count:,}",
            f"{a.health:.0f}",
            f"[{style}]{a.tier.value}[/{style}]",
            Text("\n".join(r.message for r in a.recommendations) or SYM_DOT),
        )
    console.print()
    console.print(table)


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    processed: int,
    points_before: int,
    points_after: int,
    errors: int,
    avg_time_ms: float | None = None,
    min_time_ms: float | None = None,
    max_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        processed: Number of paths processed
        points_before: Anchor count before processing
        points_after: Anchor count after processing
        errors: Number of errors encountered
        avg_time_ms: Average processing time per path in milliseconds
        min_time_ms: Minimum processing time per path in milliseconds
        max_time_ms: Maximum processing time per path in milliseconds
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {processed} paths {SYM_DOT} {points_before:,} {SYM_STEP} {points_after:,} points "
        f"{SYM_DOT} [{error_style}]{errors} errors[/{error_style}]"
    )

    if avg_time_ms is not None:
        timing_str = f"{avg_time_ms:.1f}ms avg"
        if min_time_ms is not None and max_time_ms is not None:
            timing_str += f" ({min_time_ms:.1f}-{max_time_ms:.1f}ms range)"
        console.print(f"  {timing_str}")


def print_saved(output_path: str, file_size: str, summary: str) -> None:
    """Print a short success message for single-shot commands.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        summary: One-line description of the change
    """
    console.print(f"\n[bold green]{SYM_OK} Saved[/bold green] {summary}")
    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress paths")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of paths successfully processed before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} paths completed {SYM_DOT} {cancelled} tasks cancelled")
    console.print("  No output file created")
