"""
schema package - Column layout and categorical vocabularies of the results table.
"""

from .columns import (
    COMPOUND,
    COMPOUND_DOSE,
    DEFAULT_TABLE_SCHEMA,
    DOSE,
    IDENTIFIER_COLUMNS,
    IS_BASELINE,
    METRIC_COLUMNS,
    METRIC_SOURCES,
    POST_INJECTION_H,
    SUBJECT_ID,
    ColumnConfig,
    ColumnRole,
    TableSchema,
    build_table_schema,
)
from .vocabulary import (
    COMPOUNDS,
    COMPOUND_DOSE_DTYPE,
    COMPOUND_DOSE_LABELS,
    COMPOUND_DOSE_ORDER,
    COMPOUND_DTYPE,
    DEFAULT_TIMEPOINTS,
    CompoundDoseOrder,
    compound_dose_label,
    format_dose,
    parse_decimal,
)

__all__ = [
    "COMPOUND",
    "COMPOUND_DOSE",
    "COMPOUND_DOSE_DTYPE",
    "COMPOUND_DOSE_LABELS",
    "COMPOUND_DOSE_ORDER",
    "COMPOUND_DTYPE",
    "COMPOUNDS",
    "DEFAULT_TABLE_SCHEMA",
    "DEFAULT_TIMEPOINTS",
    "DOSE",
    "IDENTIFIER_COLUMNS",
    "IS_BASELINE",
    "METRIC_COLUMNS",
    "METRIC_SOURCES",
    "POST_INJECTION_H",
    "SUBJECT_ID",
    "ColumnConfig",
    "ColumnRole",
    "CompoundDoseOrder",
    "TableSchema",
    "build_table_schema",
    "compound_dose_label",
    "format_dose",
    "parse_decimal",
]
