"""
completeness.py - Report which expected recordings are absent.

Every subject is expected to have every Compound_Dose condition present in the
data recorded at every timepoint, except for the declared known exceptions
(conditions never run for a subject). Gaps are reported as data: an empty
report is the normal, passing outcome.

The result only depends on the set of (subject, Compound_Dose, timepoint)
triples in the table, never on row order.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Sequence, Tuple

import pandas as pd
from loguru import logger

from ..config.models import KnownException
from ..schema.columns import COMPOUND_DOSE, POST_INJECTION_H, SUBJECT_ID
from ..schema.vocabulary import COMPOUND_DOSE_DTYPE, COMPOUND_DOSE_ORDER, DEFAULT_TIMEPOINTS


@dataclass(frozen=True)
class MissingCombination:
    """One expected recording absent from the data."""

    subject: str
    compound_dose: str
    timepoint: float

    def as_tuple(self) -> Tuple[str, str, float]:
        return self.subject, self.compound_dose, self.timepoint


@dataclass(frozen=True)
class CompletenessReport:
    """
    Outcome of a completeness check.

    Behaves as the sorted sequence of missing combinations and also keeps the
    counts behind it.

    Attributes:
        missing: Missing combinations sorted by subject, Compound_Dose order
            and timepoint
        expected_count: Size of the expected set after exceptions
        observed_count: Distinct observed triples on the timepoint grid
        suppressed_count: Combinations removed by known exceptions
        unexpected_timepoints: Observed timepoints outside the timepoint set
    """

    missing: Tuple[MissingCombination, ...] = ()
    expected_count: int = 0
    observed_count: int = 0
    suppressed_count: int = 0
    unexpected_timepoints: Tuple[float, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.missing

    def __len__(self) -> int:
        return len(self.missing)

    def __iter__(self) -> Iterator[MissingCombination]:
        return iter(self.missing)

    def __getitem__(self, item):
        return self.missing[item]

    def to_frame(self) -> pd.DataFrame:
        """Missing combinations as a DataFrame in report order."""
        frame = pd.DataFrame(
            [m.as_tuple() for m in self.missing],
            columns=[SUBJECT_ID, COMPOUND_DOSE, POST_INJECTION_H],
        )
        frame[POST_INJECTION_H] = frame[POST_INJECTION_H].astype("float64")
        frame[COMPOUND_DOSE] = frame[COMPOUND_DOSE].astype(COMPOUND_DOSE_DTYPE)
        return frame

    def summary(self) -> pd.DataFrame:
        """Number of missing timepoints per (subject, Compound_Dose)."""
        frame = self.to_frame()
        return (
            frame.groupby([SUBJECT_ID, COMPOUND_DOSE], observed=True, sort=False)
            .size()
            .rename("missing")
            .reset_index()
        )


def _normalize_timepoints(timepoints: Iterable[float]) -> List[float]:
    return sorted({float(t) for t in timepoints})


def check_completeness(
    table: pd.DataFrame,
    timepoints: Iterable[float] = DEFAULT_TIMEPOINTS,
    known_exceptions: Iterable[Any] = (),
) -> CompletenessReport:
    """
    Compare the observed recordings against the full expected grid.

    Expected combinations are all distinct subjects x all distinct
    Compound_Dose values present x ``timepoints``, minus every combination whose
    (Compound_Dose, subject) pair is a known exception, at any timepoint.

    Args:
        table: Normalized table from ``normalize_table``
        timepoints: Expected post-injection timepoints
        known_exceptions: KnownException models or ``(compound_dose, subject)``
            pairs

    Returns:
        CompletenessReport whose ``missing`` is sorted by subject, then the
        declared Compound_Dose order, then timepoint
    """
    grid = _normalize_timepoints(timepoints)
    exceptions = {KnownException.coerce(item).as_key() for item in known_exceptions}

    subject_values = table[SUBJECT_ID].astype(str)
    compound_dose_values = table[COMPOUND_DOSE].astype(str)
    hour_values = table[POST_INJECTION_H].astype(float)

    subjects = sorted(set(subject_values))
    compound_doses: Sequence[str] = sorted(set(compound_dose_values), key=COMPOUND_DOSE_ORDER.rank)
    observed = set(zip(subject_values, compound_dose_values, hour_values))

    grid_set = set(grid)
    unexpected = sorted({hours for _, _, hours in observed if hours not in grid_set})
    if unexpected:
        logger.warning(f"Observed timepoints outside the expected set {grid}: {unexpected}")

    missing = []
    expected_count = 0
    suppressed_count = 0
    for subject in subjects:
        for compound_dose in compound_doses:
            if (compound_dose, subject) in exceptions:
                suppressed_count += len(grid)
                continue
            for hours in grid:
                expected_count += 1
                if (subject, compound_dose, hours) not in observed:
                    missing.append(
                        MissingCombination(subject=subject, compound_dose=compound_dose, timepoint=hours)
                    )

    present_pairs = {(cd, s) for s, cd, _ in observed}
    known_pairs = {(cd, s) for s in subjects for cd in compound_doses}
    for compound_dose, subject in sorted(exceptions - known_pairs):
        logger.debug(f"Known exception ({compound_dose}, {subject}) matches no subject/condition in the data")
    for compound_dose, subject in sorted(exceptions & present_pairs):
        logger.warning(f"Known exception ({compound_dose}, {subject}) has recordings in the data")

    report = CompletenessReport(
        missing=tuple(missing),
        expected_count=expected_count,
        observed_count=sum(1 for triple in observed if triple[2] in grid_set),
        suppressed_count=suppressed_count,
        unexpected_timepoints=tuple(unexpected),
    )

    if report.is_complete:
        logger.info(f"All {expected_count} expected recordings are present")
    else:
        logger.info(f"{len(report)} of {expected_count} expected recordings are missing")
    return report
