"""Tests for the Loguru configuration owned by the package."""

import io

import pytest
from loguru import logger

import dreaddloader
from dreaddloader import (
    LoggingConfigError,
    configure_file_logging,
    configure_test_logging,
    get_logger_state,
    initialize_production_logging,
    is_logging_initialized,
    is_test_mode,
    reset_logging,
    validate_log_level,
)


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Ensure Loguru starts clean for each test."""

    reset_logging()
    yield
    reset_logging()


class TestValidateLogLevel:

    @pytest.mark.parametrize("level", ["debug", "INFO", "Success", "warning"])
    def test_valid_levels_are_upper_cased(self, level):
        assert validate_log_level(level) == level.upper()

    def test_invalid_level(self):
        with pytest.raises(LoggingConfigError, match="Invalid log level"):
            validate_log_level("verbose")


class TestTestLogging:

    def test_console_sink_receives_messages(self):
        stream = io.StringIO()

        sink_ids = configure_test_logging(console_level="DEBUG", console_destination=stream)
        logger.debug("normalizing results")

        assert set(sink_ids) == {"console"}
        assert "normalizing results" in stream.getvalue()
        assert is_logging_initialized()
        assert is_test_mode()

    def test_level_filters_messages(self):
        stream = io.StringIO()

        configure_test_logging(console_level="WARNING", console_destination=stream)
        logger.info("hidden")
        logger.warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_invalid_level_is_rejected(self):
        with pytest.raises(LoggingConfigError):
            configure_test_logging(console_level="loud", console_destination=io.StringIO())


class TestFileLogging:

    def test_file_sink_writes_to_nested_directory(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        sink_id = configure_file_logging(log_file, level="INFO")
        logger.info("loaded results")
        logger.remove(sink_id)

        assert "loaded results" in log_file.read_text(encoding="utf-8")
        assert sink_id in get_logger_state().sink_ids

    def test_invalid_level(self, tmp_path):
        with pytest.raises(LoggingConfigError):
            configure_file_logging(tmp_path / "run.log", level="chatty")


class TestProductionLogging:

    def test_console_only_by_default(self, monkeypatch):
        monkeypatch.delenv("DREADDLOADER_LOG_DIR", raising=False)

        sink_ids = initialize_production_logging()

        assert set(sink_ids) == {"console"}
        assert is_logging_initialized()
        assert not is_test_mode()

    def test_log_dir_adds_file_sink(self, tmp_path):
        sink_ids = initialize_production_logging(log_dir=tmp_path)
        logger.info("pipeline finished")
        reset_logging()

        assert set(sink_ids) == {"console", "file"}
        log_files = list(tmp_path.glob("dreaddloader_*.log"))
        assert len(log_files) == 1
        assert "pipeline finished" in log_files[0].read_text(encoding="utf-8")

    def test_log_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DREADDLOADER_LOG_DIR", str(tmp_path))

        sink_ids = initialize_production_logging()

        assert "file" in sink_ids


class TestResetAndAutoInitialization:

    def test_reset_clears_state(self):
        configure_test_logging(console_destination=io.StringIO())

        reset_logging()

        assert not is_logging_initialized()
        assert get_logger_state().sink_ids == []

    def test_auto_initialization_is_skipped_under_pytest(self):
        baseline_id = logger.add(io.StringIO())
        baseline_handlers = set(logger._core.handlers.keys())

        dreaddloader._auto_initialize_logging()

        assert dreaddloader._is_pytest_running()
        assert set(logger._core.handlers.keys()) == baseline_handlers
        assert not is_logging_initialized()
        logger.remove(baseline_id)
