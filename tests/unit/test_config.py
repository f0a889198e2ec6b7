"""Tests for settings models and structured logging helpers."""

import logging
from pathlib import Path
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from pathrefine.config import (
    AlignmentParams,
    Distribution,
    HealConfig,
    Intensity,
    PathRefineSettings,
    ProcessingConfig,
    ScoringConfig,
    SimplifyConfig,
    get_default_settings,
)
from pathrefine.utils import ProcessingLogger, ProcessingStats, configure_logging


class TestSettings:
    """Tests for pydantic settings."""

    def test_defaults(self) -> None:
        """Test default values of the tunable policy."""
        settings = get_default_settings()

        assert settings.simplify.tolerance_percent == 0.5
        assert settings.simplify.straightness_factor == 2.5
        assert settings.heal.curvature_weight == 0.7
        assert settings.heal.length_weight == 0.3
        assert settings.scoring.reference_diagonal == 80.0
        assert (settings.scoring.density_floor, settings.scoring.density_ceiling) == (2.0, 8.0)
        assert settings.serializer.precision == 3
        assert settings.processing.max_workers == 1

    def test_model_dump_round_trip(self) -> None:
        """Test settings survive the dict form sent to worker processes."""
        settings = PathRefineSettings(simplify=SimplifyConfig(tolerance_percent=2.0))
        assert PathRefineSettings(**settings.model_dump()) == settings

    @pytest.mark.parametrize(
        ("model", "kwargs"),
        [
            (SimplifyConfig, {"tolerance_percent": -1.0}),
            (SimplifyConfig, {"fit_samples": 1}),
            (HealConfig, {"curvature_weight": 1.5}),
            (ScoringConfig, {"density_ceiling": 0.0}),
            (AlignmentParams, {"repeat_count": 0}),
            (AlignmentParams, {"range_end": 1.5}),
        ],
    )
    def test_validation(self, model, kwargs) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            model(**kwargs)

    def test_distribution_from_string(self) -> None:
        """Test enum fields accept their values."""
        assert AlignmentParams(distribution="random").distribution is Distribution.RANDOM
        assert ProcessingConfig(intensity="extreme").intensity is Intensity.EXTREME


class TestProcessingStats:
    """Tests for ProcessingStats."""

    def test_empty(self) -> None:
        """Test statistics before any work."""
        stats = ProcessingStats()
        assert stats.duration_seconds == 0.0
        assert stats.avg_path_time_ms is None
        assert stats.min_path_time_ms is None

    def test_timings(self) -> None:
        """Test duration and per-path timing summaries."""
        stats = ProcessingStats(start_time=10.0, end_time=12.5, path_times_ms=[1.0, 3.0, 5.0])
        assert stats.duration_seconds == 2.5
        assert stats.avg_path_time_ms == 3.0
        assert (stats.min_path_time_ms, stats.max_path_time_ms) == (1.0, 5.0)


class TestProcessingLogger:
    """Tests for ProcessingLogger."""

    def test_counts(self) -> None:
        """Test events are counted into statistics."""
        logger = Mock()
        processing_logger = ProcessingLogger(logger)

        processing_logger.log_path_start("a", "simplify")
        processing_logger.log_path_complete("a", 10, 4, 2.0)
        processing_logger.log_path_skipped("b", "empty path")
        processing_logger.log_path_error("c", ValueError("bad"), "Traceback...")

        stats = processing_logger.stats
        assert stats.processed_count == 1
        assert (stats.points_before, stats.points_after) == (10, 4)
        assert stats.skipped_count == 1
        assert stats.errors == [("c", "bad")]
        assert logger.error.call_args.kwargs["error_type"] == "ValueError"

    def test_document_analysis(self) -> None:
        """Test analysis results are logged at debug level."""
        logger = Mock()
        ProcessingLogger(logger).log_document_analysis("art.svg", 3, 120, 72.345)
        logger.debug.assert_called_once_with(
            "Document analysis", source="art.svg", paths=3, points=120, health=72.3
        )


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_file_output(self, tmp_path: Path) -> None:
        """Test records reach the log file."""
        log_file = tmp_path / "run.log"
        logger = configure_logging(log_file=log_file, console_level="ERROR", quiet=True)
        logger.info("Processing complete", processed=3)

        assert "Processing complete" in log_file.read_text(encoding="utf-8")

    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        """Test reconfiguring replaces earlier handlers."""
        configure_logging(quiet=True)
        count = len(logging.getLogger().handlers)
        configure_logging(quiet=True)
        assert len(logging.getLogger().handlers) == count
