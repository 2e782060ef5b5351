"""
Plots of the compiled table with ENSO episodes shaded.

    plot_temperatures: the four baseline-relative temperature series
    plot_oni:          the ONI anomaly with the +/- threshold lines
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from .indicators.enso import DEFAULT_THRESHOLD, EpisodeLabel, EpisodeRun  # noqa: E402
from .schemas import ONI_COLUMN, TEMPERATURE_PREFIXES, temp_column  # noqa: E402

logger = logging.getLogger(__name__)

EPISODE_COLORS = {
    EpisodeLabel.EL_NINO: "tab:red",
    EpisodeLabel.LA_NINA: "tab:blue",
}


def shade_episodes(ax, episodes: List[EpisodeRun], alpha: float = 0.15) -> None:
    """Draw one shaded span per episode; each label appears once in the legend."""
    labelled = set()
    for episode in episodes:
        label = None
        if episode.label not in labelled:
            label = episode.label.value
            labelled.add(episode.label)
        # Span covers the whole final month
        end = episode.end_date + pd.offsets.MonthBegin(1)
        ax.axvspan(episode.start_date, end,
                   color=EPISODE_COLORS[episode.label], alpha=alpha,
                   linewidth=0, label=label)


def _save(fig, path: Optional[Union[str, Path]], dpi: int) -> None:
    if path is None:
        return
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi)
    logger.info(f"Saved plot to {path}")


def plot_temperatures(table: pd.DataFrame,
                      episodes: List[EpisodeRun],
                      path: Optional[Union[str, Path]] = None,
                      start: Optional[str] = None,
                      dpi: int = 150):
    """
    Overlay the temperature anomalies of every source.

    Args:
        table: Compiled table
        episodes: ENSO episodes to shade
        path: Save location (figure is only returned if None)
        start: Optional first date to display
        dpi: Output resolution

    Returns:
        matplotlib Figure
    """
    data = table if start is None else table[table["Date"] >= pd.Timestamp(start)]

    fig, ax = plt.subplots(figsize=(12, 5))
    for prefix in TEMPERATURE_PREFIXES:
        ax.plot(data["Date"], data[temp_column(prefix)], linewidth=0.8, label=prefix)

    shade_episodes(ax, [e for e in episodes if data.empty or e.end_date >= data["Date"].min()])
    ax.axhline(0.0, color="black", linewidth=0.5)
    ax.set_title("Global temperature anomaly relative to 1850-1900")
    ax.set_xlabel("Date")
    ax.set_ylabel("Anomaly (°C)")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left", ncol=3, fontsize="small")
    fig.tight_layout()

    _save(fig, path, dpi)
    return fig


def plot_oni(table: pd.DataFrame,
             episodes: List[EpisodeRun],
             path: Optional[Union[str, Path]] = None,
             threshold: float = DEFAULT_THRESHOLD,
             dpi: int = 150):
    """
    Plot the ONI anomaly with threshold lines and shaded episodes.

    Returns:
        matplotlib Figure
    """
    data = table[["Date", ONI_COLUMN]].dropna()

    fig, ax = plt.subplots(figsize=(12, 4))
    ax.plot(data["Date"], data[ONI_COLUMN], color="black", linewidth=0.8, label="ONI")
    shade_episodes(ax, episodes)
    for level in (threshold, -threshold):
        ax.axhline(level, color="grey", linestyle="--", linewidth=0.6)
    ax.set_title("Oceanic Niño Index with El Niño / La Niña episodes")
    ax.set_xlabel("Date")
    ax.set_ylabel("Anomaly (°C)")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left", fontsize="small")
    fig.tight_layout()

    _save(fig, path, dpi)
    return fig
