"""
Pytest Configuration
====================

Shared fixtures: small raw samples of each source format and a fetcher
that serves them without touching the network.
"""

import pytest
from pathlib import Path
import sys

# Ensure project root is in path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from climate_indicators.config import ClimateConfig  # noqa: E402
from climate_indicators.pipeline import build_sources  # noqa: E402


HADCRUT_CSV = """\
Time,Anomaly (deg C),Lower confidence limit (2.5%),Upper confidence limit (97.5%)
1850-01,-0.6,-0.9,-0.3
1850-02,-0.4,-0.7,-0.1
1899-12,-0.2,-0.5,0.1
1900-01,1.0,0.8,1.2
"""

GISTEMP_CSV = """\
Land-Ocean: Global Means
Year,Jan,Feb,Mar,Apr,May,Jun,Jul,Aug,Sep,Oct,Nov,Dec,J-D,D-N,DJF,MAM,JJA,SON
1880,.10,.10,.10,.10,.10,.10,.10,.10,.10,.10,.10,.10,.10,***,***,.10,.10,.10
1881,.30,.30,.30,.30,.30,.30,.30,.30,.30,.30,.30,.30,.30,.28,.26,.30,.30,.30
1882,.50,.50,.50,***,***,***,***,***,***,***,***,***,***,***,.43,***,***,***
"""

NOAA_ASC = """\
  1850    1  -0.400000   0.050000   0.001   0.002
1850 2     -0.200000 0.040000 0.001 0.002
    1900      1   0.600000   0.030000   0.001   0.002
"""

BERKELEY_TXT = """\
% Berkeley Earth global temperature
%
% Year, Month,  Anomaly, Unc.,   Anomaly, Unc.,   Anomaly, Unc.,   Anomaly, Unc.,   Anomaly, Unc.
%
  1850     1    -0.700     0.380       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN
  1850     2    -0.300     0.430       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN
  1900     1     0.500     0.200       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN

% Global Average Temperature Anomaly with Sea Ice Temperature Inferred from Water Temperatures
%
  1850     1    -0.650     0.380       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN
  1850     2    -0.250     0.430       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN
  1900     1     0.550     0.200       NaN       NaN       NaN       NaN       NaN       NaN       NaN       NaN
"""

ONI_ASCII = """\
 YR   MON  NINO1+2   ANOM   NINO3    ANOM   NINO4    ANOM NINO3.4    ANOM
1950   1   23.01   -1.55   23.56   -2.10   26.94   -1.38   24.55   -1.99
1950   2   24.32   -1.78   24.89   -1.52   26.67   -1.53   25.06   -1.69
1950   3  25.11   -1.38   26.36   -0.84   26.52   -1.80   25.87   -1.42
1950   4   23.63   -1.90   26.44   -1.14   26.90   -1.73   26.28   -1.54
1950   5   22.68   -1.74   25.69   -1.57   27.73   -1.18   26.18   -1.75
1950   6   21.59   -1.22   24.92   -1.38   28.06   -1.02   26.46   -0.98
1950   7   20.23   -0.86   24.69   -0.11   28.11   -0.79   26.29   -0.40
"""

NOAA_LATEST = "aravg.mon.land_ocean.90S.90N.v6.0.0.202410.asc"

NOAA_LISTING = """\
<html><body><h1>Index of /data/noaa-global-surface-temperature/v6/access/timeseries</h1>
<a href="aravg.ann.land_ocean.90S.90N.v6.0.0.202411.asc">aravg.ann.land_ocean.90S.90N.v6.0.0.202411.asc</a>
<a href="aravg.mon.land.90S.90N.v6.0.0.202411.asc">aravg.mon.land.90S.90N.v6.0.0.202411.asc</a>
<a href="aravg.mon.land_ocean.90S.90N.v6.0.0.202409.asc">aravg.mon.land_ocean.90S.90N.v6.0.0.202409.asc</a>
<a href="aravg.mon.land_ocean.90S.90N.v6.0.0.202410.asc">aravg.mon.land_ocean.90S.90N.v6.0.0.202410.asc</a>
</body></html>
"""

RAW_SAMPLES = {
    "hadcrut": HADCRUT_CSV,
    "gistemp": GISTEMP_CSV,
    "noaa": NOAA_ASC,
    "berkeley": BERKELEY_TXT,
    "oni": ONI_ASCII,
}


class FakeFetcher:
    """Serves canned bytes keyed by URL and records what was requested."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def fetch(self, url):
        self.requested.append(url)
        return self.responses[url]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def raw_samples():
    """Raw text of each source, keyed by source name."""
    return dict(RAW_SAMPLES)


@pytest.fixture
def pipeline_config(tmp_path):
    """Configuration writing into a temporary directory, plots off."""
    return ClimateConfig({
        "output": {"output_dir": str(tmp_path / "output")},
        "plots": {"enabled": False},
    })


@pytest.fixture
def source_urls(pipeline_config):
    """URL of each source handler built from the test configuration."""
    return {name: source.url for name, source in build_sources(pipeline_config).items()}


@pytest.fixture
def fake_fetcher(source_urls):
    """FakeFetcher serving every sample; NOAA is served behind its directory listing."""
    responses = {
        source_urls[name]: text.encode("utf-8")
        for name, text in RAW_SAMPLES.items()
        if name != "noaa"
    }
    responses[source_urls["noaa"]] = NOAA_LISTING.encode("utf-8")
    responses[source_urls["noaa"] + NOAA_LATEST] = RAW_SAMPLES["noaa"].encode("utf-8")
    return FakeFetcher(responses)
