"""
Climate Indicators Pipeline
===========================

Runs the full compilation:

1. Fetch and parse each source into a canonical MonthlySeries
2. Write one file per source
3. Read the source files back and merge them into the compiled table
4. Find ENSO episodes on the compiled ONI column
5. Write the compiled table, the episode list and the plots

Every run recomputes everything from the downloaded files. Any failed
source aborts the run.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from . import io
from .config import ClimateConfig, get_config
from .exceptions import ClimateDataError
from .fetchers import HttpFetcher
from .indicators.enso import EpisodeRun, find_episodes
from .sources import AVAILABLE_SOURCES, TEMPERATURE_SOURCES, BaseClimateSource
from .transforms.baseline import BaselineWindow
from .transforms.merge import merge_datasets

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything produced by one pipeline run."""
    series: Dict[str, pd.DataFrame]
    compiled: pd.DataFrame
    episodes: List[EpisodeRun]
    files: Dict[str, Path] = field(default_factory=dict)


def build_sources(config: ClimateConfig) -> Dict[str, BaseClimateSource]:
    """Instantiate every source handler from the configuration."""
    window = BaselineWindow.from_strings(
        config.get("baseline.start"), config.get("baseline.end")
    )

    sources: Dict[str, BaseClimateSource] = {}
    for name, cls in AVAILABLE_SOURCES.items():
        # None falls back to the handler's published location
        url = config.source_url(name)
        if name == "oni":
            sources[name] = cls(url=url,
                                anomaly_column=config.get("sources.oni.anomaly_column"),
                                running_months=config.get("sources.oni.running_mean_months"))
        elif name == "gistemp":
            sources[name] = cls(url=url, window=window,
                                start_date=config.get("sources.gistemp.start_date"))
        else:
            sources[name] = cls(url=url, window=window)
    return sources


def series_path(config: ClimateConfig, source: str) -> Path:
    pattern = config.get("output.series_file_pattern", "{source}_data.csv")
    return config.output_dir / pattern.format(source=source)


def fetch_all(sources: Dict[str, BaseClimateSource], fetcher) -> Dict[str, pd.DataFrame]:
    """
    Fetch and parse every source.

    Raises:
        ClimateDataError: From the first source that fails
    """
    series: Dict[str, pd.DataFrame] = {}
    for name, source in sources.items():
        try:
            series[name] = source.fetch(fetcher)
        except ClimateDataError as e:
            logger.error(f"Source '{name}' failed: {e}")
            raise
    return series


def write_sources(series: Dict[str, pd.DataFrame], config: ClimateConfig) -> Dict[str, Path]:
    """Write each canonical series to its own file."""
    float_format = config.get("output.float_format")
    files = {}
    for name, data in series.items():
        path = series_path(config, name)
        if name in TEMPERATURE_SOURCES:
            files[name] = io.write_series(path, data, float_format)
        else:
            files[name] = io.write_oni(path, data, float_format)
    return files


def read_sources(config: ClimateConfig) -> Dict[str, pd.DataFrame]:
    """Read every per-source file written by write_sources()."""
    series = {name: io.read_series(series_path(config, name)) for name in TEMPERATURE_SOURCES}
    series["oni"] = io.read_oni(series_path(config, "oni"))
    return series


def compile_series(series: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Merge canonical series keyed by source name into the compiled table."""
    temperatures = {
        AVAILABLE_SOURCES[name].column_prefix: series.get(name)
        for name in TEMPERATURE_SOURCES
    }
    return merge_datasets(temperatures, series.get("oni"))


def run_pipeline(config: Optional[ClimateConfig] = None,
                 fetcher=None,
                 make_plots: Optional[bool] = None) -> PipelineResult:
    """
    Run the full compilation.

    Args:
        config: Configuration (global config if None)
        fetcher: Object with fetch(url) -> bytes (HttpFetcher if None)
        make_plots: Override the plots.enabled setting

    Returns:
        PipelineResult
    """
    config = config or get_config()
    if make_plots is None:
        make_plots = config.get("plots.enabled", True)

    sources = build_sources(config)

    own_fetcher = fetcher is None
    if own_fetcher:
        fetcher = HttpFetcher(timeout=config.get("fetch.timeout"),
                              user_agent=config.get("fetch.user_agent"))
    try:
        logger.info(f"Fetching {len(sources)} sources")
        series = fetch_all(sources, fetcher)
    finally:
        if own_fetcher:
            fetcher.close()

    files = write_sources(series, config)

    logger.info("Compiling sources")
    compiled = compile_series(read_sources(config))

    out_dir = config.output_dir
    files["compiled"] = io.write_compiled(
        out_dir / config.get("output.compiled_file"), compiled, config.get("output.float_format")
    )

    episodes = find_episodes(
        compiled,
        threshold=config.get("enso.threshold"),
        min_length=config.get("enso.min_run_length"),
    )
    files["episodes"] = io.write_episodes(out_dir / config.get("output.episodes_file"), episodes)

    if make_plots:
        from . import plotting
        import matplotlib.pyplot as plt

        dpi = config.get("plots.dpi", 150)
        temp_path = out_dir / config.get("plots.temperature_file")
        oni_path = out_dir / config.get("plots.oni_file")
        plt.close(plotting.plot_temperatures(compiled, episodes, temp_path, dpi=dpi))
        plt.close(plotting.plot_oni(compiled, episodes, oni_path,
                                    threshold=config.get("enso.threshold"), dpi=dpi))
        files["temperature_plot"] = temp_path
        files["oni_plot"] = oni_path

    logger.info(f"Pipeline complete: {len(compiled)} months, {len(episodes)} episodes")
    return PipelineResult(series=series, compiled=compiled, episodes=episodes, files=files)
