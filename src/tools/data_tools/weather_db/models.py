"""Database schema for the weather cache."""

# One row per city; the key compares case-insensitively.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS weather (
    city TEXT NOT NULL UNIQUE COLLATE NOCASE,
    observed_at INTEGER NOT NULL,
    temperature_c REAL NOT NULL,
    wind_speed_mps REAL NOT NULL
);

-- Index for the expiry purge
CREATE INDEX IF NOT EXISTS idx_weather_observed_at ON weather(observed_at);
"""

# Columns a listing may be ordered by.
ORDERABLE_COLUMNS = ('city', 'observed_at', 'temperature_c', 'wind_speed_mps')
