"""Tests for the observability module.

Tests for logging configuration and operation tracing.
"""
import logging

import pytest

from zettel_cli.observability import (
    ROOT_LOGGER_NAME,
    configure_logging,
    timed_operation,
    traced,
)


class TestTimedOperation:
    """Tests for timed_operation context manager."""

    def test_timed_operation_logs_success(self, caplog):
        """Test that successful operations log START and END."""
        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            with timed_operation("test_op", note_id="a") as op:
                op["result_count"] = 2

        messages = [r.getMessage() for r in caplog.records]
        assert any("START test_op (note_id=a)" in m for m in messages)
        assert any("END test_op" in m and "[OK]" in m and "result_count=2" in m for m in messages)

    def test_timed_operation_logs_failure(self, caplog):
        """Test that failed operations log the error and re-raise."""
        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            with pytest.raises(ValueError):
                with timed_operation("failing_op"):
                    raise ValueError("boom")

        assert "ERROR: boom" in caplog.text

    def test_correlation_id_is_shared(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            with timed_operation("op") as op:
                correlation_id = op["correlation_id"]

        tagged = [r for r in caplog.records if f"[{correlation_id}]" in r.getMessage()]
        assert len(tagged) == 2


class TestTraced:
    """Tests for the traced decorator."""

    def test_returns_result_and_counts_collections(self, caplog):
        @traced("listing")
        def listing(query=None):
            return ["a", "b", "c"]

        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            assert listing(query="term") == ["a", "b", "c"]

        assert "START listing (query=term)" in caplog.text
        assert "result_count=3" in caplog.text

    def test_defaults_to_function_name(self, caplog):
        @traced()
        def do_work():
            return None

        with caplog.at_level(logging.DEBUG, logger=ROOT_LOGGER_NAME):
            do_work()

        assert "START do_work" in caplog.text

    def test_preserves_metadata(self):
        @traced("x")
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_console_only_by_default(self):
        assert configure_logging() is None
        handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)

    def test_creates_directory_and_returns_file(self, tmp_path):
        log_dir = tmp_path / "logs"
        result = configure_logging(log_dir=log_dir)
        assert log_dir.is_dir()
        assert result == log_dir / "zettel.log"

    def test_sets_level_from_name(self):
        configure_logging(level="debug")
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG

    def test_unknown_level_name_falls_back(self):
        configure_logging(level="chatty")
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING

    def test_repeated_calls_do_not_stack_handlers(self, tmp_path):
        configure_logging(log_dir=tmp_path)
        configure_logging(log_dir=tmp_path)
        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 2

    def test_file_receives_records(self, tmp_path):
        log_file = configure_logging(level="INFO", log_dir=tmp_path, console=False)
        logging.getLogger(f"{ROOT_LOGGER_NAME}.test").info("hello file")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
