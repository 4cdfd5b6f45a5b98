"""
High-level API for preparing activity-tracking results.

Typical notebook use::

    from dreaddloader.api import create_config, load, normalize, check_completeness

    config = create_config("results.csv", known_exceptions=[("21_1", "742")])
    table = normalize(load(config.data_path), config)
    report = check_completeness(table, config)
    report.to_frame()

or in one call: ``run_pipeline(config)``.
"""

from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import KnownException, PipelineConfig, create_config, load_config
from .exceptions import ConfigError, DreaddLoaderError, LoadError, SchemaError
from .pipeline import (
    CompletenessReport,
    MissingCombination,
    PipelineResult,
    normalize_to_baseline,
    run_pipeline,
)
from .pipeline import check_completeness as _check_completeness
from .pipeline import normalize_table
from .readers import load_table, sniff_delimiter


def load(path: Union[str, Path], encoding: str = "utf-8-sig") -> pd.DataFrame:
    """Read the results file into a raw table of text cells."""
    return load_table(path, encoding=encoding)


def normalize(table: pd.DataFrame, config: Optional[PipelineConfig] = None) -> pd.DataFrame:
    """Type and validate a raw table, using the configuration's column headers."""
    config = config or PipelineConfig()
    return normalize_table(table, schema=config.table_schema())


def check_completeness(table: pd.DataFrame, config: Optional[PipelineConfig] = None) -> CompletenessReport:
    """Report missing recordings for the configuration's timepoints and known exceptions."""
    config = config or PipelineConfig()
    return _check_completeness(
        table,
        timepoints=config.timepoints,
        known_exceptions=config.known_exceptions,
    )


__all__ = [
    "CompletenessReport",
    "ConfigError",
    "DreaddLoaderError",
    "KnownException",
    "LoadError",
    "MissingCombination",
    "PipelineConfig",
    "PipelineResult",
    "SchemaError",
    "check_completeness",
    "create_config",
    "load",
    "load_config",
    "normalize",
    "normalize_to_baseline",
    "run_pipeline",
    "sniff_delimiter",
]
