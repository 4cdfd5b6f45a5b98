"""
data_pipeline.py - Complete preparation pipeline for activity results.

Chains the three stages ``load_table -> normalize_table -> check_completeness``.
Each stage returns a new value; nothing is kept between runs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from loguru import logger

from ..config.models import PipelineConfig
from ..exceptions import ConfigError
from ..readers.delimited import load_table
from .completeness import CompletenessReport, check_completeness
from .normalize import normalize_table


@dataclass(frozen=True)
class PipelineResult:
    """Normalized table and its completeness report."""

    table: pd.DataFrame
    report: CompletenessReport


def run_pipeline(
    config: PipelineConfig,
    data_path: Optional[Union[str, Path]] = None,
) -> PipelineResult:
    """
    Load, normalize and check one results file.

    Args:
        config: Pipeline configuration
        data_path: Overrides ``config.data_path`` when given

    Returns:
        PipelineResult with the normalized table and completeness report

    Raises:
        ConfigError: If no results file is configured
        LoadError: If the results file cannot be read
        SchemaError: If the table fails validation
    """
    path = data_path if data_path is not None else config.data_path
    if path is None:
        raise ConfigError(
            "No results file given: set data_path in the configuration or pass it explicitly",
            error_code="CONFIG_003",
        )

    logger.info(f"Preparing activity results from {path}")
    raw = load_table(path, encoding=config.encoding)
    table = normalize_table(raw, schema=config.table_schema())
    report = check_completeness(
        table,
        timepoints=config.timepoints,
        known_exceptions=config.known_exceptions,
    )

    logger.success(
        f"Prepared {len(table)} rows; {len(report)} missing recordings "
        f"({report.suppressed_count} suppressed by known exceptions)"
    )
    return PipelineResult(table=table, report=report)
