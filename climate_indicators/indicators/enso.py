"""
ENSO Episode Classification

Labels each month El Nino / La Nina / Neutral from its ONI anomaly and
extracts the runs of identical non-neutral labels long enough to count
as episodes.

Classification:
    anomaly >= +threshold  -> ElNino
    anomaly <= -threshold  -> LaNina
    otherwise              -> Neutral

Missing anomalies are dropped before scanning, so a gap neither breaks
nor extends a run. Runs shorter than min_length are discarded outright;
they are never merged into a neighbouring run.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Union

import pandas as pd

from ..exceptions import SchemaError
from ..schemas import ANOMALY, DATE, ONI_COLUMN

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.5
DEFAULT_MIN_LENGTH = 5


class EpisodeLabel(Enum):
    """Per-month ENSO state."""

    EL_NINO = "ElNino"
    LA_NINA = "LaNina"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class EpisodeRun:
    """A reportable El Nino or La Nina episode."""

    label: EpisodeLabel
    start_date: pd.Timestamp
    end_date: pd.Timestamp
    length: int

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "length": self.length,
        }


def classify_month(value: float, threshold: float = DEFAULT_THRESHOLD) -> EpisodeLabel:
    """Label one month from its anomaly."""
    if value >= threshold:
        return EpisodeLabel.EL_NINO
    if value <= -threshold:
        return EpisodeLabel.LA_NINA
    return EpisodeLabel.NEUTRAL


def _oni_values(data: Union[pd.DataFrame, pd.Series]) -> pd.Series:
    """
    Extract a date-indexed anomaly series with missing values removed.

    Accepts an ONI MonthlySeries ('date', 'anomaly'), a compiled table
    ('Date', 'ONI_Anomaly') or a Series indexed by date.
    """
    if isinstance(data, pd.Series):
        values = data
    elif DATE in data.columns and ANOMALY in data.columns:
        values = data.set_index(DATE)[ANOMALY]
    elif "Date" in data.columns and ONI_COLUMN in data.columns:
        values = data.set_index("Date")[ONI_COLUMN]
    else:
        raise SchemaError(f"No ONI anomaly column in {list(data.columns)}")

    values = values.dropna().sort_index()
    values.index = pd.DatetimeIndex(values.index)
    return values


def classify_series(
    data: Union[pd.DataFrame, pd.Series],
    threshold: float = DEFAULT_THRESHOLD,
) -> pd.DataFrame:
    """
    Label every month that has an anomaly.

    Returns:
        DataFrame with 'date', 'anomaly' and 'label' (label values are
        the EpisodeLabel strings)
    """
    values = _oni_values(data)
    labels = [classify_month(v, threshold).value for v in values]
    return pd.DataFrame({
        DATE: values.index,
        ANOMALY: values.to_numpy(),
        "label": labels,
    })


@dataclass(frozen=True)
class _NoRun:
    pass


@dataclass(frozen=True)
class _InRun:
    label: EpisodeLabel
    start: pd.Timestamp
    end: pd.Timestamp
    length: int


NO_RUN = _NoRun()


class EpisodeScanner:
    """
    Chronological run detector.

    States are NoRun and InRun(label, start, end, length). Feeding a month
    either extends the open run or closes it; closing emits an EpisodeRun
    only when the run reached min_length.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH):
        if min_length < 1:
            raise ValueError("min_length must be at least 1")
        self.min_length = min_length
        self.state: Union[_NoRun, _InRun] = NO_RUN
        self.episodes: List[EpisodeRun] = []

    def step(self, date: pd.Timestamp, label: EpisodeLabel) -> None:
        state = self.state
        if isinstance(state, _InRun):
            if label == state.label:
                self.state = _InRun(state.label, state.start, date, state.length + 1)
                return
            self._close(state)

        if label is EpisodeLabel.NEUTRAL:
            self.state = NO_RUN
        else:
            self.state = _InRun(label, date, date, 1)

    def _close(self, run: _InRun) -> None:
        if run.length >= self.min_length:
            episode = EpisodeRun(run.label, run.start, run.end, run.length)
            logger.debug(
                f"{run.label.value} episode {run.start.date()} to {run.end.date()} "
                f"({run.length} months)"
            )
            self.episodes.append(episode)
        else:
            logger.debug(f"Discarded {run.length}-month {run.label.value} run at {run.start.date()}")

    def finish(self) -> List[EpisodeRun]:
        """Close any open run, return the episodes found and reset the scanner."""
        if isinstance(self.state, _InRun):
            self._close(self.state)
        episodes = self.episodes
        self.state = NO_RUN
        self.episodes = []
        return episodes


def find_episodes(
    data: Union[pd.DataFrame, pd.Series],
    threshold: float = DEFAULT_THRESHOLD,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> List[EpisodeRun]:
    """
    Find El Nino / La Nina episodes in an ONI series.

    Args:
        data: ONI MonthlySeries, compiled table or date-indexed Series
        threshold: Absolute anomaly that marks a non-neutral month
        min_length: Minimum run length (months) to report

    Returns:
        EpisodeRun list in chronological order
    """
    values = _oni_values(data)
    scanner = EpisodeScanner(min_length)
    for date, value in values.items():
        scanner.step(date, classify_month(value, threshold))
    episodes = scanner.finish()

    n_nino = sum(1 for e in episodes if e.label is EpisodeLabel.EL_NINO)
    logger.info(
        f"Found {len(episodes)} ENSO episodes "
        f"({n_nino} El Nino, {len(episodes) - n_nino} La Nina)"
    )
    return episodes


def episodes_to_frame(episodes: List[EpisodeRun]) -> pd.DataFrame:
    """Tabulate episodes with label, start_date, end_date and length columns."""
    columns = ["label", "start_date", "end_date", "length"]
    return pd.DataFrame([e.to_dict() for e in episodes], columns=columns)
