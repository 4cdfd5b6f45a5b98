"""
baseline.py - Express metrics relative to each session's baseline recording.

A session is one (subject, Compound_Dose) pair. Its baseline is the mean of
its pre-injection (``is_baseline``) rows, so every later timepoint can be read
as a change from the same animal's own reference activity.
"""

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd
from loguru import logger

from ..exceptions import SchemaError
from ..schema.columns import COMPOUND_DOSE, IS_BASELINE, METRIC_COLUMNS, SUBJECT_ID

BASELINE_METHODS = ("delta", "percent")
BASELINE_SUFFIX = "_vs_baseline"


def _resolve_metrics(table: pd.DataFrame, metrics: Optional[Iterable[str]]) -> List[str]:
    if metrics is None:
        return [m for m in METRIC_COLUMNS if m in table.columns]

    metrics = list(metrics)
    unknown = [m for m in metrics if m not in table.columns]
    if unknown:
        raise SchemaError(
            f"Cannot normalize unknown metric columns: {unknown}",
            error_code="SCHEMA_008",
            context={"missing_columns": unknown},
        )
    return metrics


def baseline_means(table: pd.DataFrame, metrics: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Mean baseline value of each metric per (subject, Compound_Dose).

    NaN metric values are skipped; a session whose baseline rows are all NaN
    for a metric keeps NaN.
    """
    metrics = _resolve_metrics(table, metrics)
    baseline_rows = table.loc[table[IS_BASELINE], [SUBJECT_ID, COMPOUND_DOSE] + metrics]
    keys = baseline_rows[[SUBJECT_ID, COMPOUND_DOSE]].astype(str)
    return (
        baseline_rows[metrics]
        .groupby([keys[SUBJECT_ID], keys[COMPOUND_DOSE]])
        .mean()
        .reset_index()
    )


def normalize_to_baseline(
    table: pd.DataFrame,
    metrics: Optional[Iterable[str]] = None,
    method: str = "delta",
) -> pd.DataFrame:
    """
    Add ``<metric>_vs_baseline`` columns to a copy of the normalized table.

    Args:
        table: Normalized table from ``normalize_table``
        metrics: Metric columns to normalize (all metric columns by default)
        method: ``"delta"`` for value minus baseline, ``"percent"`` for percent
            change from baseline

    Returns:
        New DataFrame with the same rows and index plus one column per metric.
        Sessions without a baseline row get NaN; so does ``"percent"`` against
        a zero baseline.

    Raises:
        SchemaError: For an unknown method or metric column
    """
    if method not in BASELINE_METHODS:
        raise SchemaError(
            f"Unknown baseline method '{method}'; expected one of {list(BASELINE_METHODS)}",
            error_code="SCHEMA_008",
            context={"raw_value": method},
        )
    metrics = _resolve_metrics(table, metrics)

    means = baseline_means(table, metrics)
    keys = table[[SUBJECT_ID, COMPOUND_DOSE]].astype(str)
    aligned = keys.merge(means, on=[SUBJECT_ID, COMPOUND_DOSE], how="left")

    result = table.copy()
    for metric in metrics:
        values = table[metric].to_numpy(dtype="float64")
        reference = aligned[metric].to_numpy(dtype="float64")
        with np.errstate(divide="ignore", invalid="ignore"):
            if method == "delta":
                relative = values - reference
            else:
                relative = np.where(reference == 0, np.nan, (values - reference) / reference * 100.0)
        result[f"{metric}{BASELINE_SUFFIX}"] = relative

    sessions = keys.drop_duplicates()
    without_baseline = len(sessions) - len(means)
    if without_baseline:
        logger.warning(f"{without_baseline} sessions have no baseline recording; their values are NaN")
    logger.debug(f"Normalized {len(metrics)} metrics to baseline using '{method}'")
    return result
