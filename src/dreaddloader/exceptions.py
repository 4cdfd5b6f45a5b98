"""
DreaddLoader Exception Hierarchy

Domain-specific exceptions for the activity-table preparation pipeline. Every
error carries an error code for programmatic handling and a context dictionary
that keeps the offending path, row or raw value for diagnostics.

The hierarchy:
- DreaddLoaderError: Base exception for all DreaddLoader-specific errors
- ConfigError: Pipeline configuration loading and validation failures
- LoadError: Results file reading failures
- SchemaError: Column, vocabulary and value validation failures

Usage Examples:
    Error code checking:
    >>> try:
    ...     table = load_table("results.csv")
    ... except LoadError as e:
    ...     if e.error_code == "LOAD_001":
    ...         logger.error(f"Results file missing: {e.context['file_path']}")

    Context preservation:
    >>> raise SchemaError("Unknown compound").with_context({
    ...     "row_index": 12,
    ...     "raw_value": "j99ws",
    ... })

Completeness gaps are never raised: the completeness checker reports them as
data.
"""

import sys
from typing import Any, Dict, Optional
from pathlib import Path


class DreaddLoaderError(Exception):
    """
    Base exception class for all DreaddLoader-specific errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        DREADD_001: Generic DreaddLoader error
        DREADD_002: Unexpected internal error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "DREADD_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the DreaddLoaderError with message, error code, and context.

        Args:
            message: Human-readable error description
            error_code: Unique identifier for programmatic error handling
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context or {})

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            # Skip subclass constructors to reach the raising function
            while frame is not None and frame.f_code.co_name == '__init__':
                frame = frame.f_back
            if frame:
                self.context.setdefault('source_function', frame.f_code.co_name)

    def with_context(self, context: Dict[str, Any]) -> 'DreaddLoaderError':
        """
        Add additional context to the exception and return self for chaining.

        Args:
            context: Dictionary of context information to add

        Returns:
            Self for method chaining
        """
        self.context.update(context)
        return self

    @property
    def message(self) -> str:
        """The bare message without code and context decoration."""
        return super().__str__()

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class ConfigError(DreaddLoaderError):
    """
    Pipeline configuration loading and validation errors.

    Error Codes:
        CONFIG_001: Configuration file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'config_path' in context and isinstance(context['config_path'], (str, Path)):
                self.context['config_path'] = str(context['config_path'])
            if 'validation_errors' in context:
                self.context['validation_errors'] = context['validation_errors']


class LoadError(DreaddLoaderError):
    """
    Results file loading errors.

    Raised when the delimited results file cannot be turned into a raw table.
    Always fatal for the run.

    Error Codes:
        LOAD_001: File not found
        LOAD_002: Path is not a regular file
        LOAD_003: File cannot be decoded with the requested encoding
        LOAD_004: File is empty
        LOAD_005: Delimited content cannot be parsed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "LOAD_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'file_path' in context and isinstance(context['file_path'], (str, Path)):
                self.context['file_path'] = str(context['file_path'])
            if 'encoding' in context:
                self.context['encoding'] = context['encoding']
            if 'delimiter' in context:
                self.context['delimiter'] = context['delimiter']


class SchemaError(DreaddLoaderError):
    """
    Column, vocabulary and value validation errors.

    Any occurrence halts processing: dropping or coercing a malformed row would
    silently corrupt every downstream statistic.

    Error Codes:
        SCHEMA_001: Expected columns missing from the header
        SCHEMA_002: Unknown compound
        SCHEMA_003: Invalid dose value
        SCHEMA_004: Invalid post-injection time value
        SCHEMA_005: Compound_Dose label outside the declared ordering
        SCHEMA_006: Invalid metric value
        SCHEMA_007: Invalid subject identifier
        SCHEMA_008: Invalid normalization request
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SCHEMA_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'row_index' in context:
                self.context['row_index'] = context['row_index']
            if 'column' in context:
                self.context['column'] = context['column']
            if 'raw_value' in context:
                self.context['raw_value'] = context['raw_value']
            if 'missing_columns' in context:
                self.context['missing_columns'] = list(context['missing_columns'])

    @property
    def row_index(self) -> Optional[Any]:
        return self.context.get('row_index')

    @property
    def raw_value(self) -> Optional[Any]:
        return self.context.get('raw_value')


def log_and_raise(
    exception: DreaddLoaderError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with context and then raise it.

    Args:
        exception: The exception to log and raise
        logger: Logger instance to use (optional)
        level: Log level ("error", "warning", "critical")

    Raises:
        The provided exception after logging
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception.message}")

        if exception.context:
            for key, value in exception.context.items():
                log_method(f"  {key}: {value}")

    raise exception


__all__ = [
    'DreaddLoaderError',
    'ConfigError',
    'LoadError',
    'SchemaError',
    'log_and_raise',
]
