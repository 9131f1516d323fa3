"""Weather Database Tool - SQLite cache of fetched weather records."""

import logging
import sqlite3
from pathlib import Path

from observability import trace_tool

from src.tools.shared_libraries.errors import ParseError, StorageError
from src.tools.shared_libraries.weather_record import WeatherRecord

from .models import ORDERABLE_COLUMNS, SCHEMA_SQL


logger = logging.getLogger(__name__)

MEMORY_TARGET = ':memory:'
SQLITE_URL_PREFIX = 'sqlite:///'


def resolve_db_path(target: str) -> str:
    """Turn a path or ``sqlite:///`` connection string into a file path.

    Args:
        target: Filesystem path, ``sqlite:///path`` or ``:memory:``.

    Returns:
        The path handed to ``sqlite3.connect``.
    """
    if target.startswith(SQLITE_URL_PREFIX):
        target = target[len(SQLITE_URL_PREFIX):] or MEMORY_TARGET
    if target == MEMORY_TARGET:
        return target
    db_path = Path(target)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


class WeatherStore:
    """Owns the database connection and the ``weather`` table.

    Every statement commits on its own, so an interrupted run never leaves
    half of an operation behind.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @classmethod
    def open(cls, target: str) -> 'WeatherStore':
        """Open or create the backing database.

        Raises:
            StorageError: If the target cannot be created or opened.
        """
        try:
            conn = sqlite3.connect(resolve_db_path(target))
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f'Database error: cannot open {target}: {e}') from e
        conn.row_factory = sqlite3.Row
        logger.debug(f'Opened weather database {target}')
        return cls(conn)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> 'WeatherStore':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            with self.conn:
                return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f'Database error: {e}') from e

    def _to_record(self, row: sqlite3.Row) -> WeatherRecord:
        try:
            return WeatherRecord.from_row(row)
        except ParseError as e:
            raise StorageError(f"Database error: corrupt row for {row['city']!r}: {e}") from e

    @trace_tool(name='db.ensure_schema', capture_output=False)
    def ensure_schema(self) -> None:
        """Create the weather table if it does not exist yet."""
        try:
            with self.conn:
                self.conn.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            raise StorageError(f'Database error: {e}') from e

    @trace_tool(name='db.purge_expired')
    def purge_expired(self, ttl_seconds: int, now: int) -> int:
        """Delete every row older than the freshness window.

        Args:
            ttl_seconds: Maximum age of a fresh row, in seconds.
            now: Current Unix time in seconds.

        Returns:
            Number of deleted rows.
        """
        cursor = self._execute(
            'DELETE FROM weather WHERE ? - observed_at > ?',
            (now, ttl_seconds),
        )
        if cursor.rowcount:
            logger.info(f'Purged {cursor.rowcount} expired weather row(s)')
        return cursor.rowcount

    @trace_tool(name='db.find')
    def find(self, city_name: str) -> WeatherRecord | None:
        """Look up the cached record of a city, ignoring case.

        Returns:
            The record, or None when the city is not cached.
        """
        row = self._execute(
            """
            SELECT city, observed_at, temperature_c, wind_speed_mps
            FROM weather
            WHERE city = ?
            """,
            (city_name,),
        ).fetchone()
        return self._to_record(row) if row else None

    @trace_tool(name='db.insert', capture_output=False)
    def insert(self, record: WeatherRecord) -> None:
        """Insert a new row.

        Raises:
            StorageError: If a row for the city already exists.
        """
        self._execute(
            """
            INSERT INTO weather (city, observed_at, temperature_c, wind_speed_mps)
            VALUES (?, ?, ?, ?)
            """,
            (
                record.city,
                record.observed_at,
                record.temperature_c,
                record.wind_speed_mps,
            ),
        )
        logger.info(f'Cached weather for {record.city}')

    @trace_tool(name='db.delete')
    def delete(self, city_name: str) -> int:
        """Remove the row of a city. Returns the number of deleted rows."""
        return self._execute(
            'DELETE FROM weather WHERE city = ?',
            (city_name,),
        ).rowcount

    @trace_tool(name='db.list_all', capture_output=False)
    def list_all_ordered_by(self, field: str = 'city') -> list[WeatherRecord]:
        """Return every cached record, ascending by the given column.

        Args:
            field: One of city, observed_at, temperature_c, wind_speed_mps.

        Raises:
            ValueError: If field is not an orderable column.
        """
        if field not in ORDERABLE_COLUMNS:
            raise ValueError(f'Cannot order weather rows by {field!r}')
        rows = self._execute(
            f"""
            SELECT city, observed_at, temperature_c, wind_speed_mps
            FROM weather
            ORDER BY {field} ASC
            """
        ).fetchall()
        return [self._to_record(row) for row in rows]
