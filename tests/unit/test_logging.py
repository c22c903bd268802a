"""
Unit tests for logging infrastructure.

Tests TwigLogger, component loggers, and tracking decorators.
"""

import tempfile
from pathlib import Path

import pytest
from loguru import logger

from twig.logging import (
    TwigLogger,
    get_logger_instance,
    get_twig_logger,
    initialize_logging,
    log_repository_operation,
    performance_monitor,
    track_operation,
)


class TestTwigLogger:
    """Tests for TwigLogger class."""

    def test_logger_initialization(self) -> None:
        """Test logger initialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            twig_logger = TwigLogger(
                log_dir=Path(tmpdir),
                level="INFO",
                enable_file_logging=False,  # Disable for testing
            )
            assert twig_logger.log_dir == Path(tmpdir)
            assert twig_logger.level == "INFO"

    def test_file_logging_creates_log_files(self) -> None:
        """Test that file sinks are created under the log directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            twig_logger = TwigLogger(
                log_dir=log_dir,
                level="DEBUG",
                enable_file_logging=True,
                enable_console_logging=False,
            )
            twig_logger.get_logger("merge").info("merge decision")
            twig_logger.get_logger("refs").error("broken ref")
            logger.remove()

            assert "merge decision" in (log_dir / "merge.log").read_text()
            assert "broken ref" not in (log_dir / "merge.log").read_text()
            assert "broken ref" in (log_dir / "errors.log").read_text()
            assert "merge decision" in (log_dir / "twig.log").read_text()

    def test_get_component_logger(self) -> None:
        """Test getting a component-specific logger."""
        with tempfile.TemporaryDirectory() as tmpdir:
            twig_logger = TwigLogger(log_dir=Path(tmpdir), enable_file_logging=False)
            assert twig_logger.get_logger("objects") is not None


class TestGetTwigLogger:
    """Tests for get_twig_logger function."""

    def test_get_twig_logger_binds_component(self) -> None:
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            get_twig_logger("staging").debug("hello")
        finally:
            logger.remove(sink_id)

        assert records[-1]["extra"]["component"] == "staging"

    def test_log_repository_operation(self) -> None:
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            log_repository_operation(get_twig_logger("refs"), "branch", name="feature")
        finally:
            logger.remove(sink_id)

        extra = records[-1]["extra"]
        assert extra["operation"] == "branch"
        assert extra["name"] == "feature"
        assert "timestamp" in extra


class TestInitializeLogging:
    """Tests for initialize_logging function."""

    def test_initialize_logging_returns_instance(self) -> None:
        """Test that initialize_logging returns a TwigLogger instance."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger_instance = initialize_logging(
                log_dir=Path(tmpdir), level="INFO", enable_file_logging=False
            )
            assert isinstance(logger_instance, TwigLogger)
            assert get_logger_instance() is logger_instance


class TestTrackOperation:
    """Tests for track_operation decorator."""

    def test_track_operation_basic(self) -> None:
        """Test that the wrapped function's result is returned."""

        @track_operation("commit")
        def dummy_commit(message: str) -> str:
            return "abc123"

        assert dummy_commit("msg") == "abc123"

    def test_track_operation_logs_lifecycle(self) -> None:
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:

            @track_operation("branch", component="refs")
            def dummy_branch(name: str) -> None:
                return None

            dummy_branch("feature")
        finally:
            logger.remove(sink_id)

        operations = [r["extra"].get("operation") for r in records]
        assert "branch" in operations
        assert "branch_complete" in operations

    def test_track_operation_captures_error(self) -> None:
        """Test that decorator logs and re-raises errors."""
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:

            @track_operation("merge", component="merge")
            def failing_merge(branch: str) -> None:
                raise ValueError("Test error")

            with pytest.raises(ValueError, match="Test error"):
                failing_merge("other")
        finally:
            logger.remove(sink_id)

        errors = [r for r in records if r["extra"].get("operation") == "merge_error"]
        assert errors
        assert errors[0]["extra"]["error_type"] == "ValueError"


class TestPerformanceMonitor:
    """Tests for performance_monitor decorator."""

    def test_performance_monitor_passes_result(self) -> None:
        @performance_monitor(threshold_ms=10_000)
        def fast() -> int:
            return 42

        assert fast() == 42

    def test_performance_monitor_warns_when_slow(self) -> None:
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:

            @performance_monitor(threshold_ms=0)
            def slow() -> int:
                return sum(range(1000))

            slow()
        finally:
            logger.remove(sink_id)

        assert any(r["level"].name == "WARNING" for r in records)
