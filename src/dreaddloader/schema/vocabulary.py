"""
vocabulary.py - Fixed compound and Compound_Dose vocabularies.

The Compound_Dose ordering is experiment-logical, not lexicographic: saline
first, then the compound 21 dose series, CNO, and the j60/j52 variants. Plots
and tables downstream rely on this order, so it is declared once here as an
ordered pandas categorical.

Dose labels are rendered in positional notation with trailing zeros removed
(``1.0 -> "1"``, ``0.5 -> "0.5"``), which reproduces the declared labels
exactly.
"""

from typing import Any, Iterable, Iterator, Tuple

import numpy as np
import pandas as pd
from loguru import logger


SALINE = "Saline"

COMPOUNDS: Tuple[str, ...] = (
    SALINE,
    "21",
    "cno",
    "j60nws",
    "j60ws",
    "j52nws",
    "j52ws",
)

COMPOUND_DOSE_LABELS: Tuple[str, ...] = (
    "Saline_0",
    "21_1",
    "21_3",
    "21_5",
    "21_10",
    "cno_3",
    "j60nws_0.5",
    "j60nws_1",
    "j60ws_0.5",
    "j60ws_1",
    "j52nws_0.5",
    "j52nws_1",
    "j52ws_0.5",
    "j52ws_1",
)

DEFAULT_TIMEPOINTS: Tuple[int, ...] = (0, 1, 2, 4, 6, 8, 10)

COMPOUND_DTYPE = pd.CategoricalDtype(categories=list(COMPOUNDS), ordered=True)


def parse_decimal(raw: Any) -> float:
    """
    Parse a number that may use a comma as decimal separator.

    Missing values (None, NaN, empty strings) come back as NaN; the caller
    decides whether that is acceptable.

    Args:
        raw: Cell value as read from the file

    Returns:
        Parsed float

    Raises:
        ValueError: If the value is not a number
    """
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return float("nan")
    if isinstance(raw, (int, float, np.integer, np.floating)) and not isinstance(raw, bool):
        return float(raw)

    text = str(raw).strip()
    if not text:
        return float("nan")

    return float(text.replace(",", "."))


def format_dose(dose: float) -> str:
    """
    Render a dose the way Compound_Dose labels spell it.

    >>> format_dose(1.0)
    '1'
    >>> format_dose(0.5)
    '0.5'
    """
    # Adding 0.0 turns -0.0 into 0.0
    return np.format_float_positional(float(dose) + 0.0, trim="-")


def compound_dose_label(compound: str, dose: float) -> str:
    """Build the ``"{compound}_{dose}"`` grouping key."""
    return f"{compound}_{format_dose(dose)}"


def split_compound_dose(label: str) -> Tuple[str, float]:
    """
    Split a Compound_Dose label back into compound and numeric dose.

    Raises:
        ValueError: If the label has no ``_`` separator or a non-numeric dose
    """
    compound, sep, dose = label.rpartition("_")
    if not sep or not compound:
        raise ValueError(f"Compound_Dose label '{label}' has no compound/dose separator")
    return compound, float(dose)


class CompoundDoseOrder:
    """
    Ordered lookup table of Compound_Dose labels.

    Construction checks that every label is unique, names a known compound and
    spells its dose canonically, so a malformed vocabulary fails at import time
    instead of producing misordered plots.
    """

    def __init__(self, labels: Iterable[str], compounds: Iterable[str] = COMPOUNDS):
        labels = tuple(labels)
        compounds = frozenset(compounds)

        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Duplicate Compound_Dose labels: {duplicates}")

        for label in labels:
            compound, dose = split_compound_dose(label)
            if compound not in compounds:
                raise ValueError(f"Compound_Dose label '{label}' uses unknown compound '{compound}'")
            if dose < 0:
                raise ValueError(f"Compound_Dose label '{label}' has a negative dose")
            if compound_dose_label(compound, dose) != label:
                raise ValueError(
                    f"Compound_Dose label '{label}' is not canonical; "
                    f"expected '{compound_dose_label(compound, dose)}'"
                )

        self._labels = labels
        self._rank = {label: position for position, label in enumerate(labels)}
        self.dtype = pd.CategoricalDtype(categories=list(labels), ordered=True)
        logger.trace(f"Compound_Dose ordering built with {len(labels)} labels")

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def rank(self, label: str) -> int:
        """Position of ``label`` in the ordering; ``KeyError`` if absent."""
        return self._rank[label]

    def __contains__(self, label: object) -> bool:
        return label in self._rank

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"CompoundDoseOrder({list(self._labels)!r})"


COMPOUND_DOSE_ORDER = CompoundDoseOrder(COMPOUND_DOSE_LABELS)
COMPOUND_DOSE_DTYPE = COMPOUND_DOSE_ORDER.dtype
