"""Weather Report CLI - Entry point."""

import logging
import sys

import click
from dotenv import load_dotenv

from observability import init_tracing

from src.tools.shared_libraries.config import Settings
from src.tools.shared_libraries.errors import UsageError, WeatherReportError

from .report import run_report, validate_city_name


load_dotenv()

logger = logging.getLogger(__name__)

USAGE = 'Usage: weather-report CITY_NAME'


@click.command()
@click.argument('city')
def main(city: str):
    """Print the cached weather of every city, fetching CITY if needed."""
    try:
        validate_city_name(city)
        settings = Settings.from_env()
        logging.basicConfig(level=settings.log_level)

        if settings.tracing_endpoint:
            init_tracing(endpoint=settings.tracing_endpoint)

        click.echo(run_report(city, settings), nl=False)

    except UsageError as e:
        click.echo(f'Error: {e}', err=True)
        click.echo(USAGE, err=True)
        sys.exit(e.exit_code)
    except WeatherReportError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(e.exit_code)
    except Exception:
        logger.debug('Unexpected failure', exc_info=True)
        click.echo('Error: unexpected failure', err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
