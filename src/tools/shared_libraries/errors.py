"""Error kinds raised by the weather report tools."""


class WeatherReportError(Exception):
    """Base class for failures reported to the user."""

    exit_code = 1


class UsageError(WeatherReportError):
    """Exception for a missing or malformed city argument."""

    exit_code = 2


class StorageError(WeatherReportError):
    """Exception for an unreachable, unwritable or inconsistent database."""

    exit_code = 3


class CityNotFoundError(WeatherReportError):
    """Exception for a city the weather API does not know."""

    exit_code = 4


class NetworkError(WeatherReportError):
    """Exception for a failed request to the weather API."""

    exit_code = 5


class ParseError(WeatherReportError):
    """Exception for a malformed or incomplete weather API response."""

    exit_code = 6


class MissingAPIKeyError(WeatherReportError):
    """Exception for missing API key."""


class ConfigurationError(WeatherReportError):
    """Exception for an invalid environment setting."""
