"""
Column schema models using Pydantic for validation.

Describes the results table by name instead of by position: four identifier
columns (subject, compound, dose, post-injection time) and ten metric columns.
Each column maps a canonical snake_case name to the header it carries in the
source file, so header drift is caught up front rather than silently reading
the wrong column.
"""

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from ..exceptions import SchemaError


SUBJECT_ID = "subject_id"
COMPOUND = "compound"
DOSE = "dose"
POST_INJECTION_H = "post_injection_h"

# Derived columns added by the normalizer
IS_BASELINE = "is_baseline"
COMPOUND_DOSE = "compound_dose"

IDENTIFIER_COLUMNS: Tuple[str, ...] = (SUBJECT_ID, COMPOUND, DOSE, POST_INJECTION_H)

DEFAULT_IDENTIFIER_SOURCES: Dict[str, str] = {
    SUBJECT_ID: "Subject",
    COMPOUND: "Compound",
    DOSE: "Dose",
    POST_INJECTION_H: "Post-injection time (h)",
}

# Source file order of the ten metric columns
METRIC_SOURCES: Dict[str, str] = {
    "high_activity_pct": "High activity %",
    "low_activity_pct": "Low activity %",
    "occlusion_pct": "Occlusion %",
    "mean_speed": "Mean speed",
    "speed_std": "Std deviation",
    "adr_low_high_occ": "ADR Low/High+Occ",
    "adr_low_high": "ADR Low/High",
    "skewness_low": "Skewness low",
    "skewness_high": "Skewness high",
    "normalized_entropy": "Normalized entropy",
}

METRIC_COLUMNS: Tuple[str, ...] = tuple(METRIC_SOURCES)

_IDENTIFIER_DESCRIPTIONS = {
    SUBJECT_ID: "Opaque subject label",
    COMPOUND: "Injected compound",
    DOSE: "Dose, comma or dot decimal separator",
    POST_INJECTION_H: "Hours after injection, 0 is the baseline recording",
}


class ColumnRole(str, Enum):
    """Whether a column identifies a recording or measures it."""
    IDENTIFIER = "identifier"
    METRIC = "metric"


class ColumnConfig(BaseModel):
    """
    Configuration for a single column of the results table.

    Attributes:
        name: Canonical column name in the normalized table
        source: Header of the column in the source file
        role: Identifier or metric column
        description: Human-readable description of the column
    """
    name: str
    source: str
    role: ColumnRole
    description: str = ""

    @field_validator('name', 'source')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Column names and source headers must not be blank")
        return v


class TableSchema(BaseModel):
    """
    Named-column layout of the results table.

    Names and source headers must each be unique, and the four identifier
    columns must all be present.
    """
    columns: List[ColumnConfig] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_layout(self):
        names = [column.name for column in self.columns]
        sources = [column.source for column in self.columns]

        for label, values in (("name", names), ("source header", sources)):
            duplicates = sorted({value for value in values if values.count(value) > 1})
            if duplicates:
                raise ValueError(f"Duplicate column {label}s: {duplicates}")

        missing = [name for name in IDENTIFIER_COLUMNS if name not in names]
        if missing:
            raise ValueError(f"Schema lacks identifier columns: {missing}")

        logger.trace(f"Table schema validated with {len(self.columns)} columns")
        return self

    @property
    def identifier_columns(self) -> List[ColumnConfig]:
        return [c for c in self.columns if c.role is ColumnRole.IDENTIFIER]

    @property
    def metric_columns(self) -> List[ColumnConfig]:
        return [c for c in self.columns if c.role is ColumnRole.METRIC]

    @property
    def metric_names(self) -> List[str]:
        return [c.name for c in self.metric_columns]

    def source_for(self, name: str) -> str:
        """Source header for a canonical column name."""
        for column in self.columns:
            if column.name == name:
                return column.source
        raise KeyError(name)

    def rename_map(self) -> Dict[str, str]:
        """Mapping from source headers to canonical names."""
        return {column.source: column.name for column in self.columns}

    def missing_columns(self, header: Iterable[str]) -> List[str]:
        """Source headers the schema expects but ``header`` lacks, in schema order."""
        present = {str(h).strip() for h in header}
        return [column.source for column in self.columns if column.source not in present]

    def validate_header(self, header: Iterable[str]) -> None:
        """
        Check that every expected column is present.

        Raises:
            SchemaError: listing the absent source headers
        """
        header = list(header)
        missing = self.missing_columns(header)
        if missing:
            raise SchemaError(
                f"Results table is missing expected columns: {', '.join(missing)}",
                error_code="SCHEMA_001",
                context={
                    "missing_columns": missing,
                    "actual_columns": [str(h) for h in header],
                },
            )


def build_table_schema(
    identifier_sources: Optional[Mapping[str, str]] = None,
    metric_sources: Optional[Mapping[str, str]] = None,
) -> TableSchema:
    """
    Build the table schema, optionally overriding source headers.

    Args:
        identifier_sources: Canonical identifier name to source header; entries
            not given fall back to the defaults
        metric_sources: Canonical metric name to source header; replaces the
            default metric set when given

    Returns:
        Validated TableSchema
    """
    identifiers = dict(DEFAULT_IDENTIFIER_SOURCES)
    if identifier_sources:
        unknown = sorted(set(identifier_sources) - set(IDENTIFIER_COLUMNS))
        if unknown:
            raise ValueError(f"Unknown identifier columns: {unknown}")
        identifiers.update(identifier_sources)

    metrics = dict(METRIC_SOURCES if metric_sources is None else metric_sources)

    columns = [
        ColumnConfig(
            name=name,
            source=identifiers[name],
            role=ColumnRole.IDENTIFIER,
            description=_IDENTIFIER_DESCRIPTIONS[name],
        )
        for name in IDENTIFIER_COLUMNS
    ]
    columns.extend(
        ColumnConfig(name=name, source=source, role=ColumnRole.METRIC)
        for name, source in metrics.items()
    )
    return TableSchema(columns=columns)


DEFAULT_TABLE_SCHEMA = build_table_schema()
