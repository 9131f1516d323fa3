"""Immutable weather snapshot shared by the API client and the cache."""

from typing import Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)

from .errors import ParseError
from .helpers import format_weather_summary


class WeatherRecord(BaseModel):
    """Weather of one city at the time the API measured it.

    Numeric fields take JSON numbers only; booleans and numeric strings
    are rejected.
    """

    model_config = ConfigDict(frozen=True)

    city: StrictStr = Field(min_length=1, description='Canonical city name')
    observed_at: StrictInt = Field(description='Unix seconds of the measurement')
    temperature_c: StrictFloat = Field(description='Temperature in Celsius')
    wind_speed_mps: StrictFloat = Field(description='Wind speed in meters/second')

    @classmethod
    def from_api_payload(cls, payload: Any) -> 'WeatherRecord':
        """Build a record from a current-weather API response.

        Args:
            payload: Decoded JSON body. Must expose ``name``, ``dt``,
                ``main.temp`` and ``wind.speed``.

        Returns:
            The parsed record.

        Raises:
            ParseError: If a field is missing or has the wrong type.
        """
        if not isinstance(payload, Mapping):
            raise ParseError('Invalid weather data: response body is not a JSON object')

        main = payload.get('main')
        wind = payload.get('wind')
        if not isinstance(main, Mapping) or not isinstance(wind, Mapping):
            raise ParseError('Invalid weather data: response lacks the "main" or "wind" object')

        fields = {
            'city': payload.get('name'),
            'observed_at': payload.get('dt'),
            'temperature_c': main.get('temp'),
            'wind_speed_mps': wind.get('speed'),
        }
        missing = [name for name, value in fields.items() if value is None]
        if missing:
            raise ParseError(f'Invalid weather data: response lacks {", ".join(missing)}')

        return cls._validated(fields)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'WeatherRecord':
        """Build a record from a ``weather`` table row."""
        return cls._validated({
            'city': row['city'],
            'observed_at': row['observed_at'],
            'temperature_c': row['temperature_c'],
            'wind_speed_mps': row['wind_speed_mps'],
        })

    @classmethod
    def _validated(cls, fields: dict) -> 'WeatherRecord':
        try:
            return cls(**fields)
        except ValidationError as e:
            errors = '; '.join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ParseError(f'Invalid weather data: {errors}') from e

    def __str__(self) -> str:
        return format_weather_summary(self)
