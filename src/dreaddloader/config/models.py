"""
Pydantic configuration models for dreaddloader.

Replaces the inline constants an analysis notebook would otherwise carry
(results file path, known experiment exceptions, timepoint set) with validated
models that can be built in code or loaded from YAML.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..schema.columns import DEFAULT_IDENTIFIER_SOURCES, TableSchema, build_table_schema
from ..schema.vocabulary import COMPOUND_DOSE_ORDER, DEFAULT_TIMEPOINTS

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class KnownException(BaseModel):
    """
    A (Compound_Dose, subject) pair for which no experiment was run.

    Suppresses every timepoint of that pair in the completeness check.

    Attributes:
        compound_dose: Declared Compound_Dose label, e.g. ``"21_1"``
        subject: Subject label; numbers are accepted and kept as text
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    compound_dose: str = Field(
        description="Compound_Dose label of the condition never run",
        json_schema_extra={"example": "21_1"},
    )
    subject: str = Field(
        description="Subject label",
        json_schema_extra={"example": "742"},
    )

    @field_validator('compound_dose')
    @classmethod
    def validate_compound_dose(cls, v: str) -> str:
        if v not in COMPOUND_DOSE_ORDER:
            raise ValueError(
                f"Unknown Compound_Dose '{v}'; expected one of {list(COMPOUND_DOSE_ORDER)}"
            )
        return v

    @field_validator('subject', mode='before')
    @classmethod
    def coerce_subject(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError(f"subject must be a label, got {v!r}")
        if isinstance(v, float) and v.is_integer():
            # YAML or spreadsheet numbers: 742.0 names subject "742"
            v = int(v)
        if isinstance(v, (int, float)):
            logger.debug(f"Coercing numeric subject {v!r} to text")
            return str(v)
        return v

    @classmethod
    def coerce(cls, value: Union["KnownException", Tuple[str, Any], Dict[str, Any]]) -> "KnownException":
        """Accept a model, a ``(compound_dose, subject)`` pair or a mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, (str, bytes)) or not isinstance(value, (tuple, list)) or len(value) != 2:
            raise ValueError(
                f"Known exception must be a (compound_dose, subject) pair or a mapping, got {value!r}"
            )
        compound_dose, subject = value
        return cls(compound_dose=compound_dose, subject=subject)

    def as_key(self) -> Tuple[str, str]:
        return self.compound_dose, self.subject


class ColumnHeaders(BaseModel):
    """Source-file headers of the four identifier columns."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    subject_id: str = DEFAULT_IDENTIFIER_SOURCES["subject_id"]
    compound: str = DEFAULT_IDENTIFIER_SOURCES["compound"]
    dose: str = DEFAULT_IDENTIFIER_SOURCES["dose"]
    post_injection_h: str = DEFAULT_IDENTIFIER_SOURCES["post_injection_h"]


class PipelineConfig(BaseModel):
    """
    Configuration of one pipeline run.

    Attributes:
        data_path: Results file to load
        encoding: Text encoding of the results file
        timepoints: Post-injection hours every session is expected to cover
        known_exceptions: Conditions never run for a subject
        columns: Identifier column headers of the results file
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    data_path: Optional[Path] = Field(
        default=None,
        description="Path to the delimited results file",
        json_schema_extra={"example": "data/activity_results.csv"},
    )
    encoding: str = Field(default="utf-8-sig", description="Results file encoding")
    timepoints: Tuple[float, ...] = Field(
        default=tuple(float(t) for t in DEFAULT_TIMEPOINTS),
        description="Expected post-injection timepoints in hours",
    )
    known_exceptions: List[KnownException] = Field(
        default_factory=list,
        description="(Compound_Dose, subject) pairs never recorded",
        json_schema_extra={"example": [{"compound_dose": "21_1", "subject": "742"}]},
    )
    columns: ColumnHeaders = Field(default_factory=ColumnHeaders)

    @field_validator('timepoints', mode='before')
    @classmethod
    def validate_timepoints(cls, v: Any) -> Tuple[float, ...]:
        if isinstance(v, (str, bytes)) or not isinstance(v, Iterable):
            raise ValueError("timepoints must be a list of numbers")
        values = [float(t) for t in v]
        if not values:
            raise ValueError("timepoints must not be empty")
        if any(t < 0 for t in values):
            raise ValueError(f"timepoints must be non-negative, got {values}")
        if len(set(values)) != len(values):
            raise ValueError(f"timepoints must be unique, got {values}")
        return tuple(sorted(values))

    @field_validator('known_exceptions', mode='before')
    @classmethod
    def coerce_known_exceptions(cls, v: Any) -> Any:
        if v is None:
            return []
        return [
            item if isinstance(item, (dict, KnownException)) else KnownException.coerce(item)
            for item in v
        ]

    def table_schema(self) -> TableSchema:
        """Table schema with this configuration's identifier headers."""
        return build_table_schema(self.columns.model_dump())


def create_config(
    data_path: Optional[Union[str, Path]] = None,
    known_exceptions: Optional[Iterable[Any]] = None,
    timepoints: Optional[Iterable[float]] = None,
    **kwargs
) -> PipelineConfig:
    """
    Build a validated PipelineConfig in code.

    Example:
        >>> config = create_config(
        ...     "results.csv",
        ...     known_exceptions=[("21_1", "742")],
        ... )
        >>> config.known_exceptions[0].subject
        '742'
    """
    values: Dict[str, Any] = dict(kwargs)
    if data_path is not None:
        values["data_path"] = data_path
    if known_exceptions is not None:
        values["known_exceptions"] = list(known_exceptions)
    if timepoints is not None:
        values["timepoints"] = list(timepoints)

    config = PipelineConfig(**values)
    logger.debug(
        f"Created pipeline config with {len(config.known_exceptions)} known exceptions "
        f"and timepoints {config.timepoints}"
    )
    return config
