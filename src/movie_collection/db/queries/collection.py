"""Catalog, show and episode query functions.

Functions take an open connection and never commit; callers own the
transaction (see ConnectionPool.transaction).
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from movie_collection.db.queries.helpers import (
    _escape_like_pattern,
    _path_filter_clause,
    _row_to_catalog_entry,
    _row_to_catalog_listing,
    _row_to_episode_record,
    _row_to_show_record,
)
from movie_collection.db.types import (
    CatalogEntry,
    CatalogListing,
    EpisodeRecord,
    ShowRecord,
)

# Tables whose latest modification time is reported for sync clients
TRACKED_TABLES = ("movie_collection", "movie_queue", "shows", "episodes")


# ==========================================================================
# movie_collection
# ==========================================================================


def get_collection_index(conn: sqlite3.Connection, path: str) -> int | None:
    """Get the catalog id for a path, or None if the path is unknown."""
    row = conn.execute(
        "SELECT idx FROM movie_collection WHERE path = ?", (path,)
    ).fetchone()
    return row["idx"] if row else None


def get_collection_path(conn: sqlite3.Connection, idx: int) -> str | None:
    """Get the path for a catalog id, or None if the id is unknown."""
    row = conn.execute(
        "SELECT path FROM movie_collection WHERE idx = ?", (idx,)
    ).fetchone()
    return row["path"] if row else None


def get_collection_entry(
    conn: sqlite3.Connection, path: str
) -> CatalogEntry | None:
    """Get the full catalog row for a path."""
    row = conn.execute(
        """
        SELECT idx, path, show, show_id, last_modified
        FROM movie_collection WHERE path = ?
        """,
        (path,),
    ).fetchone()
    return _row_to_catalog_entry(row) if row else None


def insert_collection_entry(
    conn: sqlite3.Connection, path: str, show: str, now: str
) -> int:
    """Insert a catalog row and return its id.

    show_id is filled in immediately when the show is already known.
    """
    cursor = conn.execute(
        """
        INSERT INTO movie_collection (path, show, show_id, last_modified)
        VALUES (?, ?, (SELECT id FROM shows WHERE show = ?), ?)
        """,
        (path, show, show, now),
    )
    if cursor.lastrowid is None:
        raise sqlite3.IntegrityError(f"Insert into movie_collection failed: {path}")
    return cursor.lastrowid


def delete_collection_entry(conn: sqlite3.Connection, path: str) -> int:
    """Delete a catalog row by path. Returns the number of rows deleted."""
    cursor = conn.execute("DELETE FROM movie_collection WHERE path = ?", (path,))
    return cursor.rowcount


def search_collection(
    conn: sqlite3.Connection, patterns: Sequence[str] = ()
) -> list[CatalogEntry]:
    """List catalog rows whose path contains any of the patterns.

    An empty pattern list matches everything. Results are ordered by path.
    """
    clause, params = _path_filter_clause(patterns)
    cursor = conn.execute(
        f"""
        SELECT idx, path, show, show_id, last_modified
        FROM movie_collection
        WHERE 1 = 1{clause}
        ORDER BY path
        """,  # nosec B608 - clause only holds placeholders
        params,
    )
    return [_row_to_catalog_entry(row) for row in cursor.fetchall()]


def search_collection_listing(
    conn: sqlite3.Connection, patterns: Sequence[str] = ()
) -> list[CatalogListing]:
    """Like search_collection, joined with the title, rating and istv of the show.

    Rows without a linked show get an empty title, rating -1 and istv False.
    """
    clause, params = _path_filter_clause(patterns, column="a.path")
    cursor = conn.execute(
        f"""
        SELECT a.path, a.show,
            COALESCE(s.title, '') AS title,
            COALESCE(s.rating, -1) AS rating,
            COALESCE(s.istv, 0) AS istv
        FROM movie_collection a
        LEFT JOIN shows s ON a.show_id = s.id
        WHERE 1 = 1{clause}
        ORDER BY a.path
        """,  # nosec B608 - clause only holds placeholders
        params,
    )
    return [_row_to_catalog_listing(row) for row in cursor.fetchall()]


def get_collection_index_match(conn: sqlite3.Connection, pattern: str) -> int | None:
    """Lowest catalog id whose path contains pattern, or None."""
    row = conn.execute(
        """
        SELECT idx FROM movie_collection
        WHERE path LIKE ? ESCAPE '\\'
        ORDER BY idx LIMIT 1
        """,
        (f"%{_escape_like_pattern(pattern)}%",),
    ).fetchone()
    return row["idx"] if row else None


def fix_collection_show_ids(conn: sqlite3.Connection, now: str) -> int:
    """Fill in show_id for rows whose show matches a known show.

    Returns:
        Number of rows updated.
    """
    cursor = conn.execute(
        """
        UPDATE movie_collection
        SET show_id = (SELECT s.id FROM shows s WHERE s.show = movie_collection.show),
            last_modified = ?
        WHERE show_id IS NULL
          AND EXISTS (SELECT 1 FROM shows s WHERE s.show = movie_collection.show)
        """,
        (now,),
    )
    return cursor.rowcount


def get_collection_after(
    conn: sqlite3.Connection, timestamp: str
) -> list[CatalogEntry]:
    """Catalog rows modified at or after the given ISO timestamp."""
    cursor = conn.execute(
        """
        SELECT idx, path, show, show_id, last_modified
        FROM movie_collection
        WHERE last_modified >= ?
        ORDER BY last_modified, idx
        """,
        (timestamp,),
    )
    return [_row_to_catalog_entry(row) for row in cursor.fetchall()]


def get_last_modified(conn: sqlite3.Connection) -> dict[str, str | None]:
    """Latest last_modified per tracked table (None for empty tables)."""
    result: dict[str, str | None] = {}
    for table in TRACKED_TABLES:
        row = conn.execute(
            f"SELECT max(last_modified) AS last_modified FROM {table}"  # nosec B608
        ).fetchone()
        result[table] = row["last_modified"]
    return result


# ==========================================================================
# shows / episodes
# ==========================================================================


def upsert_show(
    conn: sqlite3.Connection,
    show: str,
    title: str | None,
    link: str | None,
    istv: bool,
    source: str | None,
    rating: float | None,
    now: str,
) -> int:
    """Insert or update a show by its key and return its id."""
    conn.execute(
        """
        INSERT INTO shows (show, title, link, istv, source, rating, last_modified)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(show) DO UPDATE SET
            title = excluded.title,
            link = excluded.link,
            istv = excluded.istv,
            source = excluded.source,
            rating = excluded.rating,
            last_modified = excluded.last_modified
        """,
        (show, title, link, int(istv), source, rating, now),
    )
    row = conn.execute("SELECT id FROM shows WHERE show = ?", (show,)).fetchone()
    return row["id"]


def get_show(conn: sqlite3.Connection, show: str) -> ShowRecord | None:
    """Get a show by its key."""
    row = conn.execute(
        "SELECT id, show, title, link, istv, source, rating FROM shows WHERE show = ?",
        (show,),
    ).fetchone()
    return _row_to_show_record(row) if row else None


def upsert_episode(
    conn: sqlite3.Connection,
    show: str,
    season: int,
    episode: int,
    epurl: str | None,
    eptitle: str | None,
    rating: float | None,
    now: str,
) -> None:
    """Insert or update an episode keyed by (show, season, episode)."""
    conn.execute(
        """
        INSERT INTO episodes
            (show, season, episode, epurl, eptitle, rating, last_modified)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(show, season, episode) DO UPDATE SET
            epurl = excluded.epurl,
            eptitle = excluded.eptitle,
            rating = excluded.rating,
            last_modified = excluded.last_modified
        """,
        (show, season, episode, epurl, eptitle, rating, now),
    )


def get_episode(
    conn: sqlite3.Connection, show: str, season: int, episode: int
) -> EpisodeRecord | None:
    """Get an episode by (show, season, episode)."""
    row = conn.execute(
        """
        SELECT show, season, episode, epurl, eptitle, rating
        FROM episodes
        WHERE show = ? AND season = ? AND episode = ?
        """,
        (show, season, episode),
    ).fetchone()
    return _row_to_episode_record(row) if row else None


def get_episode_keys(conn: sqlite3.Connection) -> set[tuple[str, int, int]]:
    """Every known (show, season, episode) triple."""
    cursor = conn.execute("SELECT show, season, episode FROM episodes")
    return {(row["show"], row["season"], row["episode"]) for row in cursor.fetchall()}
