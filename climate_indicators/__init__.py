"""
Climate Indicators - Global Temperature and ENSO Compilation

Downloads five climate datasets, normalizes each into a monthly series,
expresses the temperature series as anomalies against the 1850-1900
preindustrial mean, merges everything into one monthly table and marks
El Nino / La Nina episodes from the Oceanic Nino Index.

Submodules:
    - sources: Per-dataset parsers (HadCRUT5, GISTEMP, NOAAGlobalTemp,
      Berkeley Earth, ONI)
    - transforms: Wide-to-long reshaping, baseline anomalies, merging,
      running means
    - indicators: ENSO episode classification
    - schemas: Canonical column layouts and validation
    - config: Configuration management
    - io, fetchers, plotting: File, network and figure collaborators

Example:
    >>> from climate_indicators import run_pipeline
    >>> result = run_pipeline()
    >>> result.compiled.tail()
"""

__version__ = "0.2.0"

from .exceptions import (
    BaselineUndefinedError,
    ClimateDataError,
    ConfigError,
    DateParseError,
    FetchError,
    MissingSourceError,
    SchemaError,
)
from .config import ClimateConfig, get_config
from .sources import AVAILABLE_SOURCES, get_source
from .transforms import (
    BASELINE_WINDOW,
    BaselineWindow,
    apply_baseline,
    compute_baseline,
    merge_datasets,
    monthly_axis,
    running_mean,
    wide_to_long,
)
from .indicators import EpisodeLabel, EpisodeRun, classify_month, find_episodes
from .pipeline import PipelineResult, run_pipeline

__all__ = [
    "__version__",
    "BaselineUndefinedError",
    "ClimateDataError",
    "ConfigError",
    "DateParseError",
    "FetchError",
    "MissingSourceError",
    "SchemaError",
    "ClimateConfig",
    "get_config",
    "AVAILABLE_SOURCES",
    "get_source",
    "BASELINE_WINDOW",
    "BaselineWindow",
    "apply_baseline",
    "compute_baseline",
    "merge_datasets",
    "monthly_axis",
    "running_mean",
    "wide_to_long",
    "EpisodeLabel",
    "EpisodeRun",
    "classify_month",
    "find_episodes",
    "PipelineResult",
    "run_pipeline",
]
