"""Database schema definition and initialization.

Tables:
- shows / episodes: show and episode reference data used for enrichment
- movie_collection: the catalog of known media files
- movie_queue: dense, uniquely ordered queue positions into the catalog
- job_messages: durable named job queues consumed by the worker
"""

import sqlite3

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

-- Show reference data
CREATE TABLE IF NOT EXISTS shows (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    show TEXT UNIQUE NOT NULL,
    title TEXT,
    link TEXT,
    istv INTEGER NOT NULL DEFAULT 0,
    source TEXT,
    rating REAL,
    last_modified TEXT NOT NULL  -- ISO 8601 UTC timestamp
);

-- Episode reference data
CREATE TABLE IF NOT EXISTS episodes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    show TEXT NOT NULL,
    season INTEGER NOT NULL,
    episode INTEGER NOT NULL,
    epurl TEXT,
    eptitle TEXT,
    rating REAL,
    last_modified TEXT NOT NULL,
    UNIQUE(show, season, episode)
);

-- Catalog of media files
CREATE TABLE IF NOT EXISTS movie_collection (
    idx INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT UNIQUE NOT NULL,
    show TEXT NOT NULL,
    show_id INTEGER REFERENCES shows(id) ON DELETE SET NULL,
    last_modified TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_movie_collection_show ON movie_collection(show);
CREATE INDEX IF NOT EXISTS idx_movie_collection_last_modified
    ON movie_collection(last_modified);

-- Ordered queue; the UNIQUE constraint is checked per row during UPDATE
CREATE TABLE IF NOT EXISTS movie_queue (
    idx INTEGER NOT NULL UNIQUE,
    collection_idx INTEGER NOT NULL REFERENCES movie_collection(idx),
    last_modified TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_movie_queue_collection_idx
    ON movie_queue(collection_idx);

-- Durable job queues
CREATE TABLE IF NOT EXISTS job_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    queue TEXT NOT NULL,
    payload TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'ready',
    reserved_by TEXT,
    reserved_at TEXT,
    delivery_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    CONSTRAINT valid_status CHECK (status IN ('ready', 'reserved'))
);

CREATE INDEX IF NOT EXISTS idx_job_messages_queue_status
    ON job_messages(queue, status, id);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the database schema if it doesn't exist.

    Args:
        conn: An open database connection.
    """
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO _meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    if conn.in_transaction:
        conn.commit()


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Get the current schema version, or None if the schema is absent."""
    try:
        row = conn.execute(
            "SELECT value FROM _meta WHERE key = 'schema_version'"
        ).fetchone()
        return int(row[0]) if row else None
    except sqlite3.OperationalError:
        # Table doesn't exist
        return None


def initialize_database(conn: sqlite3.Connection) -> None:
    """Initialize the database with schema, creating tables if needed.

    Raises:
        RuntimeError: If the database was created by a newer version.
    """
    current_version = get_schema_version(conn)
    if current_version is None:
        create_schema(conn)
    elif current_version > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {current_version} is newer than "
            f"supported version {SCHEMA_VERSION}"
        )
