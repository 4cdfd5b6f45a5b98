"""
DreaddLoader - Preparation of DREADD activity-tracking experiment tables.

Turns the raw behavioral results CSV into an analysis-ready DataFrame and
reports which (subject, Compound_Dose, timepoint) recordings are missing.

This module owns the Loguru configuration. Logging auto-initializes with a
console sink outside of pytest; tests call ``configure_test_logging`` or
``reset_logging`` for isolation.
"""

__version__ = "0.1.0"

import sys
import os
from pathlib import Path
from typing import Optional, Dict, Union, TextIO
from loguru import logger
import warnings


class LoggingConfigError(Exception):
    """Raised when logging configuration fails validation or setup."""
    pass


class LoggerState:
    """Tracks whether logging was initialized and which sinks were added."""

    def __init__(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids = []

    def is_initialized(self) -> bool:
        return self._initialized

    def is_test_mode(self) -> bool:
        return self._test_mode

    def mark_initialized(self, test_mode: bool = False):
        self._initialized = True
        self._test_mode = test_mode

    def add_sink_id(self, sink_id: int):
        self._sink_ids.append(sink_id)

    @property
    def sink_ids(self):
        return list(self._sink_ids)

    def reset(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids.clear()


_logger_state = LoggerState()


def validate_log_level(level: str) -> str:
    """
    Validate a Loguru log level name.

    Args:
        level: Log level string to validate

    Returns:
        Upper-cased log level

    Raises:
        LoggingConfigError: If log level is invalid
    """
    valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
    level_upper = level.upper()

    if level_upper not in valid_levels:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(valid_levels))}"
        )

    return level_upper


def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr
) -> int:
    """
    Add a console sink.

    Args:
        level: Log level for console output
        format_template: Custom format template (uses default if None)
        colorize: Enable colored console output
        destination: Console destination (default: sys.stderr)

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)

        if format_template is None:
            format_template = (
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
            )

        sink_id = logger.add(
            destination,
            level=validated_level,
            format=format_template,
            colorize=colorize
        )

        _logger_state.add_sink_id(sink_id)
        return sink_id

    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Add a rotating file sink, creating the parent directory if needed.

    Args:
        log_file_path: Path to log file
        level: Log level for file output
        rotation: Log rotation setting
        retention: Log retention setting
        format_template: Custom format template (uses default if None)
        encoding: File encoding

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    try:
        validated_level = validate_log_level(level)
        path = Path(log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if format_template is None:
            format_template = (
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name}:{function}:{line} - {message}"
            )

        sink_id = logger.add(
            str(path),
            rotation=rotation,
            retention=retention,
            level=validated_level,
            format=format_template,
            encoding=encoding
        )

        _logger_state.add_sink_id(sink_id)
        return sink_id

    except LoggingConfigError:
        raise
    except Exception as e:
        raise LoggingConfigError(f"Failed to configure file logging: {e}") from e


def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
) -> Dict[str, int]:
    """
    Configure logging for test scenarios: one uncolored console sink.

    Args:
        console_level: Console log level for tests
        console_destination: Console destination (None uses sys.stderr)

    Returns:
        Dictionary mapping sink types to sink IDs
    """
    reset_logging()

    sink_ids = {
        'console': configure_console_logging(
            level=console_level,
            destination=console_destination if console_destination is not None else sys.stderr,
            colorize=False,
        )
    }

    _logger_state.mark_initialized(test_mode=True)
    return sink_ids


def reset_logging():
    """
    Remove every Loguru sink and reset the tracked state.

    Raises:
        LoggingConfigError: If reset fails
    """
    try:
        logger.remove()
        _logger_state.reset()
    except Exception as e:
        raise LoggingConfigError(f"Failed to reset logging configuration: {e}") from e


def initialize_production_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Initialize notebook/production logging.

    The console sink is always added. A file sink is added only when
    ``log_dir`` is given, or when the ``DREADDLOADER_LOG_DIR`` environment
    variable names a directory.

    Args:
        console_level: Console logging level
        file_level: File logging level
        log_dir: Directory for log files

    Returns:
        Dictionary mapping sink types to sink IDs

    Raises:
        LoggingConfigError: If initialization fails
    """
    logger.remove()

    sink_ids = {'console': configure_console_logging(level=console_level)}

    if log_dir is None:
        log_dir = os.environ.get("DREADDLOADER_LOG_DIR")

    if log_dir:
        sink_ids['file'] = configure_file_logging(
            log_file_path=Path(log_dir) / "dreaddloader_{time:YYYYMMDD}.log",
            level=file_level,
        )

    _logger_state.mark_initialized(test_mode=False)
    logger.debug("--- DreaddLoader Logger Initialized ---")

    return sink_ids


def get_logger_state() -> LoggerState:
    return _logger_state


def is_logging_initialized() -> bool:
    return _logger_state.is_initialized()


def is_test_mode() -> bool:
    return _logger_state.is_test_mode()


def _auto_initialize_logging():
    """Initialize console logging on import unless running under pytest."""
    if not _logger_state.is_initialized() and not _is_pytest_running():
        try:
            initialize_production_logging()
        except LoggingConfigError as e:
            warnings.warn(f"Failed to initialize production logging: {e}. Using basic stderr logging.")
            logger.add(sys.stderr, level="INFO")
            _logger_state.mark_initialized(test_mode=False)


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


_auto_initialize_logging()
