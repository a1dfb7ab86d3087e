"""Queue position query functions.

movie_queue.idx is UNIQUE and SQLite checks that constraint row by row
while an UPDATE runs, so a plain ``idx = idx + 1`` over a range can
collide with a neighbor that has not been moved yet. Callers therefore
move ranges by an offset large enough to clear every existing position,
then settle them back (see QueueIndexEngine).

Functions take an open connection and never commit.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from movie_collection.db.queries.helpers import _path_filter_clause, _row_to_queue_row
from movie_collection.db.types import QueueListing, QueueRow, TvShowSummary


def get_max_queue_index(conn: sqlite3.Connection) -> int:
    """Highest queue position, or -1 when the queue is empty."""
    row = conn.execute("SELECT max(idx) AS max_idx FROM movie_queue").fetchone()
    return row["max_idx"] if row["max_idx"] is not None else -1


def get_queue_positions(conn: sqlite3.Connection, collection_idx: int) -> list[int]:
    """Positions referencing a catalog entry, highest first."""
    cursor = conn.execute(
        "SELECT idx FROM movie_queue WHERE collection_idx = ? ORDER BY idx DESC",
        (collection_idx,),
    )
    return [row["idx"] for row in cursor.fetchall()]


def shift_queue_positions(
    conn: sqlite3.Connection,
    position: int,
    delta: int,
    now: str,
    *,
    inclusive: bool,
) -> int:
    """Add delta to every position at (inclusive) or above position.

    Returns:
        Number of rows moved.
    """
    op = ">=" if inclusive else ">"
    cursor = conn.execute(
        f"""
        UPDATE movie_queue
        SET idx = idx + ?, last_modified = ?
        WHERE idx {op} ?
        """,  # nosec B608 - op is one of two literals
        (delta, now, position),
    )
    return cursor.rowcount


def insert_queue_row(
    conn: sqlite3.Connection, position: int, collection_idx: int, now: str
) -> None:
    """Insert a queue row at an unoccupied position."""
    conn.execute(
        "INSERT INTO movie_queue (idx, collection_idx, last_modified) VALUES (?, ?, ?)",
        (position, collection_idx, now),
    )


def delete_queue_row(conn: sqlite3.Connection, position: int) -> int:
    """Delete the row at a position. Returns the number of rows deleted."""
    cursor = conn.execute("DELETE FROM movie_queue WHERE idx = ?", (position,))
    return cursor.rowcount


def list_queue(
    conn: sqlite3.Connection, patterns: Sequence[str] = ()
) -> list[QueueListing]:
    """Queue rows ordered by position, joined with path and show link.

    Args:
        conn: Database connection.
        patterns: Path substrings; a row matches if any pattern matches.
            Empty means every row.
    """
    clause, params = _path_filter_clause(patterns, column="b.path")
    cursor = conn.execute(
        f"""
        SELECT a.idx, a.collection_idx, b.path, c.link
        FROM movie_queue a
        JOIN movie_collection b ON a.collection_idx = b.idx
        LEFT JOIN shows c ON b.show_id = c.id
        WHERE 1 = 1{clause}
        ORDER BY a.idx
        """,  # nosec B608 - clause only holds placeholders
        params,
    )
    return [
        QueueListing(
            position=row["idx"],
            path=row["path"],
            catalog_ref=row["collection_idx"],
            link=row["link"],
        )
        for row in cursor.fetchall()
    ]


def get_queue_rows(conn: sqlite3.Connection) -> list[QueueRow]:
    """Every queue row ordered by position."""
    cursor = conn.execute(
        """
        SELECT a.idx, a.collection_idx, b.path, a.last_modified
        FROM movie_queue a
        JOIN movie_collection b ON a.collection_idx = b.idx
        ORDER BY a.idx
        """
    )
    return [_row_to_queue_row(row) for row in cursor.fetchall()]


def get_queue_after(conn: sqlite3.Connection, timestamp: str) -> list[QueueRow]:
    """Queue rows modified at or after the given ISO timestamp."""
    cursor = conn.execute(
        """
        SELECT a.idx, a.collection_idx, b.path, a.last_modified
        FROM movie_queue a
        JOIN movie_collection b ON a.collection_idx = b.idx
        WHERE a.last_modified >= ?
        ORDER BY a.idx
        """,
        (timestamp,),
    )
    return [_row_to_queue_row(row) for row in cursor.fetchall()]


def list_queued_tv_shows(conn: sqlite3.Connection) -> list[TvShowSummary]:
    """Television shows with at least one queued file, with queued counts."""
    cursor = conn.execute(
        """
        SELECT b.show, c.title, c.link, c.source, count(*) AS count
        FROM movie_queue a
        JOIN movie_collection b ON a.collection_idx = b.idx
        JOIN shows c ON b.show_id = c.id
        WHERE c.istv
        GROUP BY b.show, c.title, c.link, c.source
        ORDER BY b.show
        """
    )
    return [
        TvShowSummary(
            show=row["show"],
            title=row["title"],
            link=row["link"],
            source=row["source"],
            count=row["count"],
        )
        for row in cursor.fetchall()
    ]
