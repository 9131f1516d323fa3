"""Shared helper functions for weather reports."""

from datetime import datetime
from typing import Any, Iterable


def format_temperature(temp: float) -> str:
    """Format temperature with unit symbol.

    Args:
        temp: Temperature in degrees Celsius.

    Returns:
        Formatted temperature string.
    """
    return f'{temp}°C'


def format_wind_speed(speed: float) -> str:
    """Format wind speed with unit symbol."""
    return f'{speed} m/s'


def format_observed_at(timestamp: int) -> str:
    """Convert Unix seconds to a local calendar timestamp.

    Args:
        timestamp: Unix timestamp in seconds.

    Returns:
        Local time such as ``Tue Nov 14 22:13:20 CET 2023``.
    """
    local = datetime.fromtimestamp(timestamp).astimezone()
    return local.strftime('%a %b %d %H:%M:%S %Z %Y')


def format_weather_summary(record: Any) -> str:
    """Format one weather record into a human-readable report.

    Args:
        record: Object exposing city, observed_at, temperature_c and
            wind_speed_mps.

    Returns:
        Multi-line report ending with a newline.
    """
    return (
        f'Weather fetched at : {format_observed_at(record.observed_at)}\n'
        f'Weather for city : {record.city}\n'
        f'\tCurrent temperature : {format_temperature(record.temperature_c)}\n'
        f'\tWind speed : {format_wind_speed(record.wind_speed_mps)}\n'
    )


def format_weather_listing(records: Iterable[Any]) -> str:
    """Concatenate the reports of several records, blank line between each."""
    return '\n'.join(format_weather_summary(record) for record in records)
