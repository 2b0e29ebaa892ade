"""Tests for logging setup and run statistics."""

import logging
from unittest.mock import Mock

import pytest

from polykit.utils import ProcessingLogger, ProcessingStats, configure_logging


class TestProcessingLogger:
    """Tests for ProcessingLogger."""

    def test_events_update_stats(self) -> None:
        """Test that each logged outcome is tallied."""
        logger = Mock()
        log = ProcessingLogger(logger)

        log.job_started("a", "extrude")
        log.job_finished("a", triangles=4, duration_ms=2.0)
        log.job_finished("b", triangles=6, duration_ms=4.0)
        log.job_skipped("c", "no input geometry")
        log.job_failed("d", "boom", "GeometryError")

        stats = log.stats
        assert stats.processed_count == 2
        assert stats.triangles_produced == 10
        assert stats.skipped_count == 1
        assert stats.error_count == 1
        assert stats.errors == [("d", "boom")]
        assert (stats.min_job_ms, stats.avg_job_ms, stats.max_job_ms) == (2.0, 3.0, 4.0)
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["error_type"] == "GeometryError"

    def test_updates_given_stats(self) -> None:
        """Test that a caller-owned stats object is updated in place."""
        stats = ProcessingStats()
        log = ProcessingLogger(Mock(), stats)
        log.job_skipped("empty", "no input geometry")

        assert log.stats is stats
        assert stats.skipped_count == 1

    def test_empty_stats(self) -> None:
        """Test timing summaries without any jobs."""
        stats = ProcessingStats()
        assert stats.avg_job_ms == 0.0
        assert stats.max_job_ms == 0.0
        assert stats.duration_seconds == 0.0


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        """Remove handlers added by the test."""
        root = logging.getLogger()
        before = list(root.handlers)
        yield
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
                handler.close()

    def test_writes_log_file(self, tmp_path) -> None:
        """Test that the initialization event reaches the log file."""
        log_file = tmp_path / "run.log"
        configure_logging(log_file=log_file, quiet=True)
        assert "Logging initialized" in log_file.read_text(encoding="utf-8")

    def test_repeated_calls_replace_handlers(self, tmp_path) -> None:
        """Test that configuring twice does not duplicate output."""
        root = logging.getLogger()
        configure_logging(log_file=tmp_path / "first.log")
        count = len(root.handlers)
        configure_logging(log_file=tmp_path / "second.log")

        names = [h.get_name() for h in root.handlers]
        assert len(root.handlers) == count
        assert names.count("polykit.file") == 1
        assert names.count("polykit.console") == 1

    def test_unknown_level(self, tmp_path) -> None:
        """Test that a misspelled level is rejected."""
        with pytest.raises(ValueError, match="LOUD"):
            configure_logging(log_file=tmp_path / "run.log", file_level="LOUD")
