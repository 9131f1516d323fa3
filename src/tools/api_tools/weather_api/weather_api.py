"""Weather API Tool - OpenWeatherMap integration."""

import logging

import httpx

from observability import trace_tool

from src.tools.shared_libraries.config import DEFAULT_API_URL, Settings
from src.tools.shared_libraries.errors import (
    CityNotFoundError,
    MissingAPIKeyError,
    NetworkError,
    ParseError,
)
from src.tools.shared_libraries.weather_record import WeatherRecord


logger = logging.getLogger(__name__)


class WeatherFetcher:
    """Fetches current weather for one city per call.

    No retries and no caching happen here; the cache lives in the
    weather database.
    """

    def __init__(
        self,
        api_key: str | None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> 'WeatherFetcher':
        return cls(
            api_key=settings.api_key,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
        )

    @trace_tool(name='weather_api.fetch')
    def fetch(self, city_name: str) -> WeatherRecord:
        """Get current weather for a city.

        Args:
            city_name: The city name (e.g., "Paris", "Saint-Etienne").

        Returns:
            The parsed weather record, temperature in Celsius.

        Raises:
            MissingAPIKeyError: If no API key is configured.
            CityNotFoundError: If the API does not know the city.
            NetworkError: If the request fails or the API answers an error.
            ParseError: If the response body is not a complete weather record.
        """
        if not self.api_key:
            raise MissingAPIKeyError('WEATHER_API_KEY environment variable not set.')

        logger.info(f'Fetching current weather for {city_name}')
        try:
            response = httpx.get(
                self.api_url,
                params={
                    'q': city_name,
                    'appid': self.api_key,
                    'units': 'metric',
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise CityNotFoundError(f'City "{city_name}" not found.') from e
            raise NetworkError(
                f'API request failed: HTTP {e.response.status_code}'
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f'API request failed: {e}') from e

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError('Invalid JSON response from API.') from e
        return WeatherRecord.from_api_payload(data)
