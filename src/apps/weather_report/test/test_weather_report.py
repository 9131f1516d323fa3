"""Tests for the weather report flow and its CLI."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from src.apps.weather_report.__main__ import main
from src.apps.weather_report.report import run_report, validate_city_name
from src.tools.data_tools.weather_db.weather_db import WeatherStore
from src.tools.shared_libraries.config import Settings
from src.tools.shared_libraries.errors import (
    CityNotFoundError,
    NetworkError,
    StorageError,
    UsageError,
)
from src.tools.shared_libraries.weather_record import WeatherRecord


NOW = 1700000100
TTL = 1800


class StubFetcher:
    """Fetcher double counting its calls."""

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.calls = 0

    def fetch(self, city_name):
        self.calls += 1
        if self.error:
            raise self.error
        return self.record


def make_record(city, observed_at=NOW - 100, temperature_c=12.5, wind_speed_mps=3.2):
    return WeatherRecord(
        city=city,
        observed_at=observed_at,
        temperature_c=temperature_c,
        wind_speed_mps=wind_speed_mps,
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_key='test_api_key',
        db_path=str(tmp_path / 'weather.db'),
        cache_ttl_seconds=TTL,
    )


def seed(settings, *records):
    with WeatherStore.open(settings.db_path) as store:
        store.ensure_schema()
        for record in records:
            store.insert(record)


def stored(settings):
    with WeatherStore.open(settings.db_path) as store:
        store.ensure_schema()
        return store.list_all_ordered_by('city')


class TestValidation:
    """Tests for city name validation."""

    @pytest.mark.parametrize('city', ['Paris', 'Saint-Etienne', 'Yahoo!', 'lyon'])
    def test_accepted_names(self, city):
        """Test letters, "!" and "-" pass."""
        assert validate_city_name(city) == city

    @pytest.mark.parametrize(
        'city',
        ['', 'Paris1', 'New York', "L'Aquila", 'Paris;DROP', 'Zürich', 'Lyon\n'],
    )
    def test_rejected_names_do_no_io(self, settings, city):
        """Test invalid names fail before the store or the API is touched."""
        fetcher = StubFetcher(record=make_record('Paris'))
        store_opener = MagicMock()

        with pytest.raises(UsageError):
            run_report(city, settings, fetcher=fetcher, store_opener=store_opener, now=NOW)

        assert fetcher.calls == 0
        store_opener.assert_not_called()


class TestRunReport:
    """Tests for the purge, lookup, fetch and list flow."""

    def test_cache_hit_skips_fetch(self, settings):
        """Test a fresh row answers without calling the API."""
        seed(settings, make_record('Paris'))
        fetcher = StubFetcher(error=AssertionError('fetch must not be called'))

        report = run_report('Paris', settings, fetcher=fetcher, now=NOW)

        assert fetcher.calls == 0
        assert 'Paris' in report

    def test_cache_hit_ignores_case(self, settings):
        """Test the typed case does not matter for a hit."""
        seed(settings, make_record('Paris'))
        fetcher = StubFetcher()

        run_report('paris', settings, fetcher=fetcher, now=NOW)

        assert fetcher.calls == 0

    def test_cache_miss_round_trip(self, settings):
        """Test a miss fetches, stores and reports the city."""
        lyon = make_record('Lyon', observed_at=1700000000)
        fetcher = StubFetcher(record=lyon)

        report = run_report('Lyon', settings, fetcher=fetcher, now=NOW)

        assert fetcher.calls == 1
        assert stored(settings) == [lyon]
        assert 'Lyon' in report
        assert '12.5' in report
        assert '3.2' in report

    def test_report_lists_whole_table(self, settings):
        """Test the report dumps every cached city ordered by name."""
        seed(settings, make_record('Rome'), make_record('Paris'))
        fetcher = StubFetcher(record=make_record('Lyon'))

        report = run_report('Lyon', settings, fetcher=fetcher, now=NOW)

        listing = report.split('\n\n', 1)[1]
        assert listing.index('Lyon') < listing.index('Paris') < listing.index('Rome')

    def test_expired_row_is_refetched(self, settings):
        """Test a stale row is purged and replaced by a fresh fetch."""
        seed(settings, make_record('Paris', observed_at=NOW - TTL - 1, temperature_c=1.0))
        fresh = make_record('Paris', observed_at=NOW, temperature_c=15.0)
        fetcher = StubFetcher(record=fresh)

        run_report('Paris', settings, fetcher=fetcher, now=NOW)

        assert fetcher.calls == 1
        assert stored(settings) == [fresh]

    def test_canonical_name_already_cached(self, settings):
        """Test a fetch returning an already cached spelling replaces that row."""
        seed(settings, make_record('Saint-Etienne', temperature_c=1.0))
        fresh = make_record('Saint-Etienne', observed_at=NOW, temperature_c=8.0)
        fetcher = StubFetcher(record=fresh)

        run_report('StEtienne', settings, fetcher=fetcher, now=NOW)

        assert stored(settings) == [fresh]

    def test_unknown_city_leaves_store_unchanged(self, settings):
        """Test a failed fetch inserts nothing."""
        paris = make_record('Paris')
        seed(settings, paris)
        fetcher = StubFetcher(error=CityNotFoundError('City "Zzzqx" not found.'))

        with pytest.raises(CityNotFoundError):
            run_report('Zzzqx', settings, fetcher=fetcher, now=NOW)

        assert stored(settings) == [paris]

    def test_storage_failure(self, settings):
        """Test an unreachable database surfaces as StorageError."""
        def broken_opener(target):
            raise StorageError('Database error: disk I/O error')

        with pytest.raises(StorageError):
            run_report('Paris', settings, fetcher=StubFetcher(), store_opener=broken_opener, now=NOW)


class TestCli:
    """Tests for the weather-report command."""

    @pytest.fixture
    def runner(self, settings, monkeypatch):
        monkeypatch.setenv('WEATHER_API_KEY', settings.api_key)
        monkeypatch.setenv('DB_PATH', settings.db_path)
        monkeypatch.setenv('CACHE_TTL_SECONDS', str(TTL))
        monkeypatch.delenv('PHOENIX_COLLECTOR_ENDPOINT', raising=False)
        monkeypatch.delenv('LOG_LEVEL', raising=False)
        return CliRunner()

    def test_prints_report(self, runner):
        """Test success prints the report and exits 0."""
        with patch('src.apps.weather_report.__main__.run_report', return_value='REPORT\n'):
            result = runner.invoke(main, ['Paris'])

        assert result.exit_code == 0
        assert 'REPORT' in result.output

    def test_cache_hit_end_to_end(self, runner, settings):
        """Test a cached city is reported without any HTTP call."""
        seed(settings, make_record('Paris', observed_at=9999999999))

        with patch('src.tools.api_tools.weather_api.weather_api.httpx.get') as mock_get:
            result = runner.invoke(main, ['Paris'])

        assert result.exit_code == 0
        assert 'Weather for city : Paris' in result.output
        mock_get.assert_not_called()

    def test_missing_argument(self, runner):
        """Test a missing city prints usage and exits non-zero."""
        result = runner.invoke(main, [])

        assert result.exit_code == 2
        assert 'Usage' in result.output

    def test_too_many_arguments(self, runner):
        """Test two cities are refused."""
        result = runner.invoke(main, ['Paris', 'Lyon'])

        assert result.exit_code == 2

    def test_invalid_characters(self, runner):
        """Test a digit in the name prints usage and exits 2."""
        with patch('src.apps.weather_report.__main__.run_report') as mock_run:
            result = runner.invoke(main, ['Paris1'])

        assert result.exit_code == 2
        assert 'Usage: weather-report CITY_NAME' in result.output
        mock_run.assert_not_called()

    def test_invalid_city_checked_before_settings(self, runner, monkeypatch):
        """Test a bad name is reported even when the environment is broken."""
        monkeypatch.setenv('CACHE_TTL_SECONDS', 'soon')
        monkeypatch.setenv('PHOENIX_COLLECTOR_ENDPOINT', 'http://localhost:6006/v1/traces')

        with patch('src.apps.weather_report.__main__.init_tracing') as mock_tracing:
            result = runner.invoke(main, ['Paris1'])

        assert result.exit_code == 2
        assert 'Usage: weather-report CITY_NAME' in result.output
        mock_tracing.assert_not_called()

    def test_invalid_log_level(self, runner, monkeypatch):
        """Test an unknown LOG_LEVEL is a configuration error."""
        monkeypatch.setenv('LOG_LEVEL', 'chatty')

        with patch('src.apps.weather_report.__main__.run_report') as mock_run:
            result = runner.invoke(main, ['Paris'])

        assert result.exit_code == 1
        assert 'log_level' in result.output
        assert 'unexpected failure' not in result.output
        mock_run.assert_not_called()

    @pytest.mark.parametrize(
        'error, exit_code, message',
        [
            (CityNotFoundError('City "Zzzqx" not found.'), 4, 'City "Zzzqx" not found.'),
            (StorageError('Database error: locked'), 3, 'Database error: locked'),
            (NetworkError('API request failed: HTTP 503'), 5, 'API request failed'),
        ],
    )
    def test_domain_errors(self, runner, error, exit_code, message):
        """Test each error kind gets its own message and exit code."""
        with patch('src.apps.weather_report.__main__.run_report', side_effect=error):
            result = runner.invoke(main, ['Zzzqx'])

        assert result.exit_code == exit_code
        assert message in result.output
        assert 'Traceback' not in result.output

    def test_unexpected_error(self, runner):
        """Test other failures print a generic message without internals."""
        with patch('src.apps.weather_report.__main__.run_report', side_effect=KeyError('secret')):
            result = runner.invoke(main, ['Paris'])

        assert result.exit_code == 1
        assert 'Error: unexpected failure' in result.output
        assert 'secret' not in result.output
