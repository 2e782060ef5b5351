"""
Climate Indicators - Derived Indicators

Indicators computed from the compiled monthly series:
    - ENSO episodes (El Nino / La Nina runs from the ONI anomaly)
"""

from .enso import (
    DEFAULT_MIN_LENGTH,
    DEFAULT_THRESHOLD,
    EpisodeLabel,
    EpisodeRun,
    EpisodeScanner,
    classify_month,
    classify_series,
    episodes_to_frame,
    find_episodes,
)

__all__ = [
    "DEFAULT_MIN_LENGTH",
    "DEFAULT_THRESHOLD",
    "EpisodeLabel",
    "EpisodeRun",
    "EpisodeScanner",
    "classify_month",
    "classify_series",
    "episodes_to_frame",
    "find_episodes",
]
