"""
Climate Indicators Sources - Climate Data Source Handlers

One handler per published dataset. Each handler turns the raw file into
a canonical MonthlySeries:

    - hadcrut:  Met Office HadCRUT5 (CSV)
    - gistemp:  NASA GISS GISTEMP v4 (wide CSV, year x month)
    - noaa:     NCEI NOAAGlobalTemp v6 (whitespace ASCII, newest monthly build)
    - berkeley: Berkeley Earth Land + Ocean (whitespace ASCII, '%' comments)
    - oni:      CPC Nino-3.4 anomaly table, 3-month running mean (whitespace ASCII)

Each handler implements:
    - parse(raw) -> MonthlySeries
    - fetch(fetcher) -> MonthlySeries
"""

from typing import Dict, List, Type

from .base import BaseClimateSource, SourceFormat, read_delimited
from .hadcrut import HadCRUTSource
from .gistemp import GISTEMPSource
from .noaa import NOAASource
from .berkeley import BerkeleySource
from .oni import ONISource

__all__ = [
    "BaseClimateSource",
    "SourceFormat",
    "read_delimited",
    "HadCRUTSource",
    "GISTEMPSource",
    "NOAASource",
    "BerkeleySource",
    "ONISource",
    "AVAILABLE_SOURCES",
    "TEMPERATURE_SOURCES",
    "get_source",
    "list_sources",
]

# Registry of climate sources, in compiled-table column order
AVAILABLE_SOURCES: Dict[str, Type[BaseClimateSource]] = {
    "hadcrut": HadCRUTSource,
    "gistemp": GISTEMPSource,
    "noaa": NOAASource,
    "berkeley": BerkeleySource,
    "oni": ONISource,
}

TEMPERATURE_SOURCES: List[str] = ["hadcrut", "gistemp", "noaa", "berkeley"]


def get_source(name: str, **kwargs) -> BaseClimateSource:
    """
    Instantiate a source handler by name.

    Args:
        name: Registry key (hadcrut, gistemp, noaa, berkeley, oni)
        **kwargs: Passed to the handler constructor

    Raises:
        KeyError: If the source is unknown
    """
    key = name.lower()
    if key not in AVAILABLE_SOURCES:
        raise KeyError(
            f"Unknown climate source '{name}'. Available: {list(AVAILABLE_SOURCES)}"
        )
    return AVAILABLE_SOURCES[key](**kwargs)


def list_sources() -> List[str]:
    """List registered source names."""
    return list(AVAILABLE_SOURCES.keys())
