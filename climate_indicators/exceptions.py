"""
Error types raised by the climate indicators pipeline.

None of these are recovered automatically: a failure in any source
aborts the run.
"""


class ClimateDataError(Exception):
    """Base class for all pipeline errors."""
    pass


class FetchError(ClimateDataError):
    """Raised when a remote dataset cannot be downloaded."""
    pass


class SchemaError(ClimateDataError):
    """Raised when raw or tabular data does not have the expected layout."""
    pass


class DateParseError(SchemaError):
    """Raised when a year, month or date token cannot be parsed."""
    pass


class BaselineUndefinedError(ClimateDataError):
    """Raised when the baseline window contains no data."""
    pass


class MissingSourceError(ClimateDataError):
    """Raised when the merger is called without every required source."""
    pass


class ConfigError(ClimateDataError):
    """Raised when a configuration file cannot be loaded."""
    pass
