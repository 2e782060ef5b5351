"""
Climate Indicators Config - Configuration Management

Holds the default settings for the compilation pipeline:
    - Per-source parse options and download URL overrides
    - Baseline reference window
    - ENSO episode thresholds
    - Fetch and output settings

Overrides can be supplied as a nested dictionary or loaded from a YAML file.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "ClimateConfig",
    "DEFAULT_CONFIG",
    "get_config",
    "set_config",
    "load_config_from_file",
]

DEFAULT_CONFIG = {
    # Data source settings. Download URLs default to each source handler's
    # published location; set sources.<name>.url to override one.
    "sources": {
        "gistemp": {
            "start_date": "1880-01-01",
        },
        "oni": {
            # Position of the monthly anomaly field; -1 is NINO3.4 ANOM
            "anomaly_column": -1,
            "running_mean_months": 3,
        },
    },

    # Preindustrial reference window, [start, end)
    "baseline": {
        "start": "1850-01-01",
        "end": "1900-01-01",
    },

    # ENSO episode settings
    "enso": {
        "threshold": 0.5,
        "min_run_length": 5,
    },

    # HTTP settings
    "fetch": {
        "timeout": 60,
        "user_agent": "climate-indicators/0.2",
    },

    # Output settings
    "output": {
        "output_dir": "output",
        "compiled_file": "compiled_climate_data.csv",
        "episodes_file": "enso_episodes.csv",
        "series_file_pattern": "{source}_data.csv",
        "float_format": "%.6f",
    },

    # Plot settings
    "plots": {
        "enabled": True,
        "dpi": 150,
        "temperature_file": "temperature_anomalies.png",
        "oni_file": "oni_episodes.png",
    },
}


class ClimateConfig:
    """
    Configuration manager for the climate indicators pipeline.

    Values are addressed with dot-notation keys, e.g. ``sources.oni.url``.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict: Configuration overrides (uses defaults if None)
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        if config_dict:
            self._deep_update(self._config, config_dict)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ClimateConfig":
        """
        Build a configuration from a YAML override file.

        Args:
            path: Path to the YAML file

        Returns:
            ClimateConfig with the file's values merged over the defaults

        Raises:
            ConfigError: If the file is missing or not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path, "r") as f:
                overrides = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if overrides is None:
            overrides = {}
        if not isinstance(overrides, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        logger.info(f"Loaded config overrides from {path}")
        return cls(overrides)

    def _deep_update(self, base: dict, updates: dict) -> None:
        """Recursively update nested dictionaries."""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_update(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., 'sources.noaa.url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value by dot-notation key.

        Args:
            key: Configuration key
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return copy.deepcopy(self._config)

    def source_url(self, source: str) -> Optional[str]:
        """
        Return the URL override for a source, or None to use its default.

        Raises:
            ConfigError: If the override is set but is not a string
        """
        url = self.get(f"sources.{source}.url")
        if url is not None and not isinstance(url, str):
            raise ConfigError(f"URL for source '{source}' must be a string, got {url!r}")
        return url or None

    @property
    def output_dir(self) -> Path:
        return Path(self.get("output.output_dir", "output"))


# Global configuration instance
_global_config: Optional[ClimateConfig] = None


def get_config() -> ClimateConfig:
    """
    Get the global configuration instance.

    Returns:
        ClimateConfig instance
    """
    global _global_config
    if _global_config is None:
        _global_config = ClimateConfig()
    return _global_config


def set_config(config: ClimateConfig) -> None:
    """Replace the global configuration instance."""
    global _global_config
    _global_config = config


def load_config_from_file(path: Union[str, Path]) -> ClimateConfig:
    """
    Load configuration from a YAML file and install it globally.

    Args:
        path: Path to configuration file

    Returns:
        The loaded ClimateConfig
    """
    config = ClimateConfig.from_yaml(path)
    set_config(config)
    return config
