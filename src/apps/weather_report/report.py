"""Weather report flow: validate, purge, look up, fetch on a miss, list."""

import logging
import re
import time
from typing import Callable

from observability import trace_span

from src.tools.api_tools.weather_api.weather_api import WeatherFetcher
from src.tools.data_tools.weather_db.weather_db import WeatherStore
from src.tools.shared_libraries.config import Settings
from src.tools.shared_libraries.errors import UsageError
from src.tools.shared_libraries.helpers import (
    format_weather_listing,
    format_weather_summary,
)


logger = logging.getLogger(__name__)

# Letters, "!" and "-" only.
CITY_NAME_PATTERN = re.compile(r'[A-Za-z!-]+')


def validate_city_name(city_name: str) -> str:
    """Reject city names with digits, spaces or other punctuation.

    Raises:
        UsageError: If the name is empty or has a disallowed character.
    """
    if not isinstance(city_name, str) or not CITY_NAME_PATTERN.fullmatch(city_name):
        raise UsageError(
            f'Invalid city name {city_name!r}: only letters, "!" and "-" are allowed.'
        )
    return city_name


@trace_span('weather_report.run')
def run_report(
    city_name: str,
    settings: Settings,
    fetcher: WeatherFetcher | None = None,
    store_opener: Callable[[str], WeatherStore] = WeatherStore.open,
    now: int | None = None,
) -> str:
    """Produce the weather report for a city.

    Stale rows are purged first. On a cache miss the city is fetched and
    stored; the report then lists every cached city, ordered by name,
    preceded by the freshly fetched record on a miss.

    Args:
        city_name: City typed by the user.
        settings: Runtime settings.
        fetcher: Weather API client. Built from settings when omitted.
        store_opener: Opens the weather database for a target.
        now: Current Unix time, defaults to the wall clock.

    Returns:
        The report text.
    """
    validate_city_name(city_name)
    now = int(time.time()) if now is None else now

    sections = []
    with store_opener(settings.db_path) as store:
        store.ensure_schema()
        store.purge_expired(settings.cache_ttl_seconds, now)

        if store.find(city_name) is not None:
            logger.info(f'Cache hit for {city_name}')
        else:
            logger.info(f'Cache miss for {city_name}')
            fetcher = fetcher or WeatherFetcher.from_settings(settings)
            record = fetcher.fetch(city_name)
            sections.append(format_weather_summary(record))

            # The API may answer with another spelling of a city already cached.
            if store.delete(record.city):
                logger.info(f'Replaced cached weather for {record.city}')
            store.insert(record)

        sections.append(format_weather_listing(store.list_all_ordered_by('city')))

    return '\n'.join(sections)
