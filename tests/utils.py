"""
Shared test utilities for the dreaddloader test suite.

Builders for raw result rows and results files in the layout the tracking
software exports: four identifier columns, six session columns the pipeline
ignores, then the ten metric columns.
"""

from itertools import product
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
from hypothesis import strategies as st

from dreaddloader.schema.columns import DEFAULT_IDENTIFIER_SOURCES, METRIC_SOURCES
from dreaddloader.schema.vocabulary import COMPOUND_DOSE_LABELS, DEFAULT_TIMEPOINTS


SUBJECT_HEADER = DEFAULT_IDENTIFIER_SOURCES["subject_id"]
COMPOUND_HEADER = DEFAULT_IDENTIFIER_SOURCES["compound"]
DOSE_HEADER = DEFAULT_IDENTIFIER_SOURCES["dose"]
TIME_HEADER = DEFAULT_IDENTIFIER_SOURCES["post_injection_h"]

SESSION_HEADERS = ["Video", "Arena", "Date", "Frames", "Duration (s)", "Tracked frames"]

RESULTS_HEADER: List[str] = (
    [SUBJECT_HEADER, COMPOUND_HEADER, DOSE_HEADER, TIME_HEADER]
    + SESSION_HEADERS
    + list(METRIC_SOURCES.values())
)


def split_label(label: str):
    compound, _, dose = label.rpartition("_")
    return compound, float(dose)


def make_row(
    subject: Any,
    compound: Any,
    dose: Any,
    hours: Any,
    metrics: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """One raw result row keyed by source header."""
    row: Dict[str, Any] = {
        SUBJECT_HEADER: subject,
        COMPOUND_HEADER: compound,
        DOSE_HEADER: dose,
        TIME_HEADER: hours,
        "Video": f"{subject}_{compound}_{hours}.mp4",
        "Arena": 1,
        "Date": "2024-03-01",
        "Frames": 18000,
        "Duration (s)": 600,
        "Tracked frames": 17500,
    }
    base = float(hours) if not isinstance(hours, str) else 0.0
    defaults = {
        "High activity %": 30.0 + base,
        "Low activity %": 60.0 - base,
        "Occlusion %": 10.0,
        "Mean speed": 2.5 + base / 10,
        "Std deviation": 0.75,
        "ADR Low/High+Occ": 1.75,
        "ADR Low/High": 2.0,
        "Skewness low": 0.25,
        "Skewness high": -0.5,
        "Normalized entropy": 0.875,
    }
    if metrics:
        defaults.update(metrics)
    row.update(defaults)
    return row


def make_session_rows(subject: Any, label: str, timepoints: Iterable[float] = DEFAULT_TIMEPOINTS) -> List[Dict[str, Any]]:
    compound, dose = split_label(label)
    return [make_row(subject, compound, dose, hours) for hours in timepoints]


def make_complete_rows(
    subjects: Sequence[Any],
    compound_doses: Sequence[str],
    timepoints: Iterable[float] = DEFAULT_TIMEPOINTS,
) -> List[Dict[str, Any]]:
    """Every subject x condition x timepoint."""
    timepoints = list(timepoints)
    rows = []
    for subject, label in product(subjects, compound_doses):
        rows.extend(make_session_rows(subject, label, timepoints))
    return rows


def write_results_csv(
    path: Path,
    rows: List[Dict[str, Any]],
    delimiter: str = ",",
    decimal: str = ".",
    columns: Optional[Sequence[str]] = None,
    encoding: str = "utf-8",
) -> Path:
    """Write rows the way the tracking export does; NaN becomes an empty cell."""
    frame = pd.DataFrame(rows, columns=list(columns or RESULTS_HEADER))
    frame.to_csv(path, sep=delimiter, decimal=decimal, index=False, encoding=encoding)
    return path


def raw_table(rows: List[Dict[str, Any]], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Rows as the loader would return them: every cell as text, NaN for empty."""
    frame = pd.DataFrame(rows, columns=list(columns or RESULTS_HEADER))
    return frame.apply(lambda column: column.map(lambda v: v if pd.isna(v) else str(v)))


# ============================================================================
# HYPOTHESIS STRATEGIES
# ============================================================================

subject_ids = st.from_regex(r"[1-9][0-9]{2}", fullmatch=True)
compound_dose_labels = st.sampled_from(COMPOUND_DOSE_LABELS)
timepoints = st.sampled_from(DEFAULT_TIMEPOINTS)
