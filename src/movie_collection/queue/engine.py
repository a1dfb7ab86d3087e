"""Ordered queue of catalog entries with dense, unique positions.

Positions are kept contiguous from 0. Every mutation runs in one write
transaction and leaves the queue dense; a failure rolls the whole
mutation back.

movie_queue.idx carries a UNIQUE constraint that SQLite checks row by row
inside an UPDATE, so ranges are never moved by one in place. Insert moves
the tail past the current maximum, places the new row, then settles the
tail back one slot above its old position. Remove deletes the row, moves
the tail past the maximum, then settles it one slot below its old
position. At no point do two rows share a position.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

from movie_collection.catalog.store import CatalogStore
from movie_collection.core.datetime_utils import to_utc_iso, utc_now_iso
from movie_collection.core.filename import ParsedStem, classify_path
from movie_collection.db.connection import handle_storage_errors
from movie_collection.db.queries import (
    delete_queue_row,
    get_collection_index,
    get_collection_path,
    get_max_queue_index,
    get_queue_after,
    get_queue_positions,
    get_queue_rows,
    insert_queue_row,
    list_queue,
    list_queued_tv_shows,
    shift_queue_positions,
)
from movie_collection.db.types import QueueListing, QueueRow, TvShowSummary
from movie_collection.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)


def _insert_at(conn: sqlite3.Connection, position: int, collection_idx: int) -> int:
    """Insert collection_idx at position, shifting the tail up by one.

    position is clamped to [0, max + 1]. Returns the position used.
    """
    max_idx = get_max_queue_index(conn)
    position = max(0, min(position, max_idx + 1))
    shift = max_idx - position + 2
    now = utc_now_iso()

    # Tail [position, max] moves to [max + 2, ...], clear of every row
    shift_queue_positions(conn, position, shift, now, inclusive=True)
    insert_queue_row(conn, position, collection_idx, now)
    # Net effect on the tail: +1
    shift_queue_positions(conn, position, 1 - shift, now, inclusive=False)
    return position


def _remove_at(conn: sqlite3.Connection, position: int) -> bool:
    """Delete the row at position and close the gap.

    Returns:
        False (and changes nothing) when position is negative, past the
        end, or unoccupied.
    """
    max_idx = get_max_queue_index(conn)
    if position < 0 or position > max_idx:
        return False
    if delete_queue_row(conn, position) == 0:
        return False

    diff = max_idx - position
    now = utc_now_iso()
    # Tail (position, max] moves to (max, ...], then settles at -1 overall
    shift_queue_positions(conn, position, diff, now, inclusive=False)
    shift_queue_positions(conn, position, -(diff + 1), now, inclusive=False)
    return True


def _remove_collection_idx(conn: sqlite3.Connection, collection_idx: int) -> int:
    """Remove every queue row referencing collection_idx. Returns the count."""
    removed = 0
    # Highest first, so each removal leaves the remaining positions valid
    for position in get_queue_positions(conn, collection_idx):
        if _remove_at(conn, position):
            removed += 1
    return removed


class QueueIndexEngine:
    """Insert, remove and list queue entries.

    Example:
        engine = QueueIndexEngine(CatalogStore(pool))
        engine.append("/movies/a.mp4")
        engine.insert(0, "/movies/b.mp4")
        for entry in engine.list():
            print(entry)
    """

    def __init__(self, catalog: CatalogStore, list_workers: int = 4) -> None:
        """Initialize the engine.

        Args:
            catalog: Catalog the queue references. Shares its connection pool.
            list_workers: Threads used for episode lookups in list().
        """
        if list_workers < 1:
            raise ValueError(f"list_workers must be >= 1, got {list_workers}")
        self._catalog = catalog
        self._pool = catalog.pool
        self._list_workers = list_workers

    @property
    def catalog(self) -> CatalogStore:
        return self._catalog

    @handle_storage_errors
    def max_position(self) -> int:
        """Highest occupied position, -1 when the queue is empty."""
        with self._pool.read_connection() as conn:
            return get_max_queue_index(conn)

    def _insert_path(self, position: int | None, path: Path | str) -> int:
        if not Path(path).exists():
            raise NotFoundError(path, f"{path} does not exist")

        with self._pool.transaction() as conn:
            collection_idx = self._catalog.insert(path)
            prior = _remove_collection_idx(conn, collection_idx)
            if prior:
                logger.debug("Removed prior queue entry for %s", path)
            if position is None:
                position = get_max_queue_index(conn) + 1
            final = _insert_at(conn, position, collection_idx)

        logger.info("Queued %s at position %d", path, final)
        return final

    @handle_storage_errors
    def insert(self, position: int, path: Path | str) -> int:
        """Queue a file at a position, moving later entries down by one.

        Unknown files are added to the catalog first. A file that is
        already queued is moved rather than duplicated. Positions past the
        end append; negative positions prepend.

        Args:
            position: Target position.
            path: File to queue.

        Returns:
            The position the file now occupies.

        Raises:
            NotFoundError: If the file does not exist on disk.
        """
        return self._insert_path(position, path)

    @handle_storage_errors
    def append(self, path: Path | str) -> int:
        """Queue a file after the current last entry."""
        return self._insert_path(None, path)

    @handle_storage_errors
    def insert_by_catalog_ref(self, position: int, collection_idx: int) -> int:
        """Queue an existing catalog entry at a position.

        Raises:
            NotFoundError: If no catalog entry has this id.
        """
        with self._pool.transaction() as conn:
            if get_collection_path(conn, collection_idx) is None:
                raise NotFoundError(
                    collection_idx, f"No catalog entry with id {collection_idx}"
                )
            _remove_collection_idx(conn, collection_idx)
            final = _insert_at(conn, position, collection_idx)

        logger.info("Queued catalog entry %d at position %d", collection_idx, final)
        return final

    @handle_storage_errors
    def remove_by_position(self, position: int) -> bool:
        """Remove the entry at a position; later entries move up by one.

        Returns:
            True if an entry was removed, False for an out-of-range position.
        """
        with self._pool.transaction() as conn:
            removed = _remove_at(conn, position)
        if removed:
            logger.info("Removed queue position %d", position)
        return removed

    @handle_storage_errors
    def remove_by_catalog_ref(self, collection_idx: int) -> int:
        """Remove every queue entry referencing a catalog entry.

        Returns:
            Number of entries removed (0 when nothing was queued).
        """
        with self._pool.transaction() as conn:
            return _remove_collection_idx(conn, collection_idx)

    @handle_storage_errors
    def remove_by_path(self, path: Path | str) -> int:
        """Remove every queue entry for a file path.

        Returns:
            Number of entries removed (0 when the path is unknown or unqueued).
        """
        with self._pool.transaction() as conn:
            collection_idx = get_collection_index(conn, str(path))
            if collection_idx is None:
                return 0
            removed = _remove_collection_idx(conn, collection_idx)
        if removed:
            logger.info("Removed %s from queue", path)
        return removed

    @handle_storage_errors
    def rows(self) -> list[QueueRow]:
        """Every queue row in position order, without enrichment."""
        with self._pool.read_connection() as conn:
            return get_queue_rows(conn)

    def _lookup_episode(self, parsed: ParsedStem) -> str | None:
        return self._catalog.get_episode_link(
            parsed.show, parsed.season, parsed.episode
        )

    @handle_storage_errors
    def list(self, patterns: Sequence[str] = ()) -> list[QueueListing]:
        """Queue entries in position order, enriched with episode data.

        Episode-shaped entries get show, season, episode and episode_link
        when the episodes table knows the episode. Lookups run concurrently
        on separate read connections; a failed or empty lookup leaves the
        entry unenriched.

        Args:
            patterns: Path substrings; an entry matches if any matches.
                Empty returns the whole queue.
        """
        with self._pool.read_connection() as conn:
            entries = list_queue(conn, patterns)

        candidates = [
            (entry, parsed)
            for entry in entries
            if (parsed := classify_path(entry.path)).is_episode
        ]
        if candidates:
            workers = min(self._list_workers, len(candidates))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._lookup_episode, parsed): (entry, parsed)
                    for entry, parsed in candidates
                }
                for future in as_completed(futures):
                    entry, parsed = futures[future]
                    try:
                        episode_link = future.result()
                    except StorageError as e:
                        logger.debug("Episode lookup failed for %s: %s", entry.path, e)
                        continue
                    if episode_link:
                        entry.show = parsed.show
                        entry.season = parsed.season
                        entry.episode = parsed.episode
                        entry.episode_link = episode_link

        return sorted(entries, key=lambda entry: entry.position)

    @handle_storage_errors
    def entries_after(self, timestamp: datetime) -> list[QueueRow]:
        """Queue rows modified at or after timestamp."""
        with self._pool.read_connection() as conn:
            return get_queue_after(conn, to_utc_iso(timestamp))

    @handle_storage_errors
    def list_tv_shows(self) -> list[TvShowSummary]:
        """Television shows with queued episodes and their counts."""
        with self._pool.read_connection() as conn:
            return list_queued_tv_shows(conn)
