"""
pipeline package - Normalization, completeness and baseline stages.

Transforms the raw results table into the typed analysis table, reports
missing recordings and derives baseline-relative metrics.
"""

from .baseline import baseline_means, normalize_to_baseline
from .completeness import CompletenessReport, MissingCombination, check_completeness
from .data_pipeline import PipelineResult, run_pipeline
from .normalize import normalize_table, parse_dose

__all__ = [
    "CompletenessReport",
    "MissingCombination",
    "PipelineResult",
    "baseline_means",
    "check_completeness",
    "normalize_table",
    "normalize_to_baseline",
    "parse_dose",
    "run_pipeline",
]
