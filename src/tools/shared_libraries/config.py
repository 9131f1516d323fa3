"""Runtime settings read from the environment."""

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError


DEFAULT_API_URL = 'https://api.openweathermap.org/data/2.5/weather'
DEFAULT_DB_PATH = './data/weather.db'
DEFAULT_CACHE_TTL_SECONDS = 30 * 60

LogLevel = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Settings(BaseModel):
    """Settings for one weather report run."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    api_url: str = DEFAULT_API_URL
    db_path: str = DEFAULT_DB_PATH
    cache_ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)
    tracing_endpoint: str | None = None
    log_level: LogLevel = 'WARNING'

    @classmethod
    def from_env(cls) -> 'Settings':
        """Read settings from environment variables.

        Unset variables keep their defaults. ``OPENWEATHER_API_KEY`` is
        accepted when ``WEATHER_API_KEY`` is not set.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        env = {
            'api_key': os.getenv('WEATHER_API_KEY') or os.getenv('OPENWEATHER_API_KEY'),
            'api_url': os.getenv('WEATHER_API_URL'),
            'db_path': os.getenv('DB_PATH'),
            'cache_ttl_seconds': os.getenv('CACHE_TTL_SECONDS'),
            'request_timeout': os.getenv('WEATHER_API_TIMEOUT'),
            'tracing_endpoint': os.getenv('PHOENIX_COLLECTOR_ENDPOINT'),
            'log_level': os.getenv('LOG_LEVEL', '').upper(),
        }
        try:
            return cls(**{key: value for key, value in env.items() if value})
        except ValidationError as e:
            bad = ', '.join(str(err['loc'][0]) for err in e.errors())
            raise ConfigurationError(f'Invalid configuration value for: {bad}') from e
