"""
normalize.py - Turn the raw text table into the typed analysis table.

Every identifier cell is validated; the first offending cell raises a
SchemaError naming its row index, column and raw value. Rows are never dropped
or coerced, so the output has exactly one row per input row and keeps the
input index.
"""

import math
from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd
from loguru import logger

from ..exceptions import SchemaError
from ..schema.columns import (
    COMPOUND,
    COMPOUND_DOSE,
    DEFAULT_TABLE_SCHEMA,
    DOSE,
    IS_BASELINE,
    POST_INJECTION_H,
    SUBJECT_ID,
    TableSchema,
)
from ..schema.vocabulary import (
    COMPOUND_DOSE_DTYPE,
    COMPOUND_DOSE_ORDER,
    COMPOUND_DTYPE,
    COMPOUNDS,
    compound_dose_label,
    parse_decimal,
)


def _is_missing(raw: Any) -> bool:
    return raw is None or (not isinstance(raw, str) and pd.isna(raw))


def parse_subject(raw: Any) -> str:
    """Subject identifiers are opaque labels: stripped text, never numbers."""
    if _is_missing(raw) or not str(raw).strip():
        raise ValueError("subject identifier is empty")
    return str(raw).strip()


def parse_compound(raw: Any) -> str:
    if _is_missing(raw):
        raise ValueError("compound is empty")
    compound = str(raw).strip()
    if compound not in COMPOUNDS:
        raise ValueError(f"unknown compound '{compound}'; expected one of {list(COMPOUNDS)}")
    return compound


def parse_dose(raw: Any) -> float:
    """
    Parse a dose, accepting a comma decimal separator.

    >>> parse_dose("0,5")
    0.5

    Raises:
        ValueError: for text that is not a number, missing, infinite or
            negative doses
    """
    dose = parse_decimal(raw)
    if math.isnan(dose):
        raise ValueError("dose is missing")
    if math.isinf(dose) or dose < 0:
        raise ValueError(f"dose must be a non-negative finite number, got {dose}")
    return dose + 0.0


def parse_post_injection_time(raw: Any) -> float:
    hours = parse_decimal(raw)
    if not math.isfinite(hours):
        raise ValueError(f"post-injection time must be a finite number, got {raw!r}")
    return hours


def parse_metric(raw: Any) -> float:
    """Metric cells may be empty or NaN (unrecordable, e.g. full occlusion)."""
    return parse_decimal(raw)


def _parse_cells(
    series: pd.Series,
    column: str,
    parser: Callable[[Any], Any],
    error_code: str,
    what: str,
) -> List[Any]:
    values = []
    for index, raw in series.items():
        try:
            values.append(parser(raw))
        except ValueError as e:
            raise SchemaError(
                f"Invalid {what} {raw!r} in row {index}: {e}",
                error_code=error_code,
                context={"row_index": index, "column": column, "raw_value": raw},
            ) from e
    return values


def _build_compound_dose(compounds: List[str], doses: List[float], index: pd.Index) -> List[str]:
    labels = []
    for row_index, compound, dose in zip(index, compounds, doses):
        label = compound_dose_label(compound, dose)
        if label not in COMPOUND_DOSE_ORDER:
            raise SchemaError(
                f"Compound_Dose '{label}' in row {row_index} is not a declared condition",
                error_code="SCHEMA_005",
                context={"row_index": row_index, "column": COMPOUND_DOSE, "raw_value": label},
            )
        labels.append(label)
    return labels


def normalize_table(table: pd.DataFrame, schema: TableSchema = DEFAULT_TABLE_SCHEMA) -> pd.DataFrame:
    """
    Type and validate the raw results table.

    Args:
        table: Raw table as returned by ``load_table``
        schema: Named-column layout to validate against

    Returns:
        New DataFrame with canonical column names: identifier columns,
        ``is_baseline``, ``compound_dose`` (ordered categorical) and float64
        metric columns. Columns outside the schema are dropped.

    Raises:
        SchemaError: on missing columns or the first invalid cell
    """
    table = table.rename(columns=lambda column: str(column).strip())
    schema.validate_header(table.columns)
    source = {name: table[schema.source_for(name)] for name in (SUBJECT_ID, COMPOUND, DOSE, POST_INJECTION_H)}

    subjects = _parse_cells(source[SUBJECT_ID], schema.source_for(SUBJECT_ID), parse_subject, "SCHEMA_007", "subject")
    compounds = _parse_cells(source[COMPOUND], schema.source_for(COMPOUND), parse_compound, "SCHEMA_002", "compound")
    doses = _parse_cells(source[DOSE], schema.source_for(DOSE), parse_dose, "SCHEMA_003", "dose")
    hours = _parse_cells(
        source[POST_INJECTION_H], schema.source_for(POST_INJECTION_H),
        parse_post_injection_time, "SCHEMA_004", "post-injection time",
    )
    labels = _build_compound_dose(compounds, doses, table.index)

    columns: Dict[str, Any] = {
        SUBJECT_ID: pd.Categorical(subjects, categories=sorted(set(subjects))),
        COMPOUND: pd.Categorical(compounds, dtype=COMPOUND_DTYPE),
        DOSE: np.asarray(doses, dtype="float64"),
        POST_INJECTION_H: np.asarray(hours, dtype="float64"),
        IS_BASELINE: np.asarray([h == 0 for h in hours], dtype=bool),
        COMPOUND_DOSE: pd.Categorical(labels, dtype=COMPOUND_DOSE_DTYPE),
    }
    for metric in schema.metric_columns:
        columns[metric.name] = np.asarray(
            _parse_cells(table[metric.source], metric.source, parse_metric, "SCHEMA_006", "metric value"),
            dtype="float64",
        )

    normalized = pd.DataFrame(columns, index=table.index)

    logger.info(
        f"Normalized {len(normalized)} rows: {normalized[SUBJECT_ID].nunique()} subjects, "
        f"{normalized[COMPOUND_DOSE].nunique()} Compound_Dose conditions, "
        f"{int(normalized[IS_BASELINE].sum())} baseline rows"
    )
    nan_counts = normalized[schema.metric_names].isna().sum()
    for metric, count in nan_counts[nan_counts > 0].items():
        logger.debug(f"Metric {metric} has {count} NaN values")

    return normalized
