"""Durable job message query functions.

A message is 'ready' until a consumer reserves it, then 'reserved' until
the consumer acknowledges it (the row is deleted) or the reservation is
recovered back to 'ready' after the consumer died.

Functions take an open connection and never commit.
"""

from __future__ import annotations

import sqlite3


def insert_message(
    conn: sqlite3.Connection, queue: str, payload: str, now: str
) -> int:
    """Append a message to a queue and return its id."""
    cursor = conn.execute(
        """
        INSERT INTO job_messages (queue, payload, status, created_at)
        VALUES (?, ?, 'ready', ?)
        """,
        (queue, payload, now),
    )
    if cursor.lastrowid is None:
        raise sqlite3.IntegrityError(f"Insert into job_messages failed: {queue}")
    return cursor.lastrowid


def reserve_next_message(
    conn: sqlite3.Connection, queue: str, consumer_id: str, now: str
) -> sqlite3.Row | None:
    """Mark the oldest ready message of a queue as reserved and return it.

    Must run inside a write transaction so the select and update are atomic.
    """
    row = conn.execute(
        """
        SELECT id FROM job_messages
        WHERE queue = ? AND status = 'ready'
        ORDER BY id
        LIMIT 1
        """,
        (queue,),
    ).fetchone()
    if row is None:
        return None

    conn.execute(
        """
        UPDATE job_messages
        SET status = 'reserved',
            reserved_by = ?,
            reserved_at = ?,
            delivery_count = delivery_count + 1
        WHERE id = ? AND status = 'ready'
        """,
        (consumer_id, now, row["id"]),
    )
    return conn.execute(
        """
        SELECT id, queue, payload, delivery_count
        FROM job_messages WHERE id = ?
        """,
        (row["id"],),
    ).fetchone()


def delete_message(conn: sqlite3.Connection, message_id: int) -> bool:
    """Delete an acknowledged message. Returns False if it was already gone."""
    cursor = conn.execute(
        "DELETE FROM job_messages WHERE id = ? AND status = 'reserved'",
        (message_id,),
    )
    return cursor.rowcount > 0


def release_reserved_messages(
    conn: sqlite3.Connection, queue: str, consumer_id: str | None = None
) -> int:
    """Return reserved messages of a queue to 'ready'.

    Args:
        conn: Database connection.
        queue: Queue name.
        consumer_id: Only release reservations held by this consumer.
            None releases every reservation on the queue.

    Returns:
        Number of messages released.
    """
    if consumer_id is None:
        cursor = conn.execute(
            """
            UPDATE job_messages
            SET status = 'ready', reserved_by = NULL, reserved_at = NULL
            WHERE queue = ? AND status = 'reserved'
            """,
            (queue,),
        )
    else:
        cursor = conn.execute(
            """
            UPDATE job_messages
            SET status = 'ready', reserved_by = NULL, reserved_at = NULL
            WHERE queue = ? AND status = 'reserved' AND reserved_by = ?
            """,
            (queue, consumer_id),
        )
    return cursor.rowcount


def count_messages(
    conn: sqlite3.Connection, queue: str, status: str | None = None
) -> int:
    """Count messages on a queue, optionally restricted to one status."""
    if status is None:
        row = conn.execute(
            "SELECT count(*) AS n FROM job_messages WHERE queue = ?", (queue,)
        ).fetchone()
    else:
        row = conn.execute(
            "SELECT count(*) AS n FROM job_messages WHERE queue = ? AND status = ?",
            (queue, status),
        ).fetchone()
    return row["n"]
