"""Persistent catalog of known media files.

The catalog maps each file path to a stable id and a show key. The show
key always comes from movie_collection.core.filename, so the catalog and
the job pipeline agree on show identity.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

from movie_collection.core.datetime_utils import (
    parse_iso_timestamp,
    to_utc_iso,
    utc_now_iso,
)
from movie_collection.core.filename import ParsedStem, classify_path
from movie_collection.db.connection import ConnectionPool, handle_storage_errors
from movie_collection.db.queries import (
    delete_collection_entry,
    fix_collection_show_ids,
    get_collection_after,
    get_collection_entry,
    get_collection_index,
    get_collection_index_match,
    get_collection_path,
    get_episode,
    get_episode_keys,
    get_last_modified,
    get_show,
    insert_collection_entry,
    search_collection,
    search_collection_listing,
    upsert_episode,
    upsert_show,
)
from movie_collection.db.types import (
    CatalogEntry,
    CatalogListing,
    EpisodeRecord,
    ShowRecord,
)
from movie_collection.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class CatalogStore:
    """Catalog of media files backed by the movie_collection table.

    Writes run through ConnectionPool.transaction, so a caller that already
    holds a transaction (the queue engine) gets the write folded into its
    own unit of work. Reads use a fresh read connection.
    """

    def __init__(self, pool: ConnectionPool, list_workers: int = 4) -> None:
        """Initialize the store.

        Args:
            pool: Connection pool for the library database.
            list_workers: Threads used for episode lookups in search().
        """
        if list_workers < 1:
            raise ValueError(f"list_workers must be >= 1, got {list_workers}")
        self._pool = pool
        self._list_workers = list_workers

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @handle_storage_errors
    def get_index(self, path: Path | str) -> int | None:
        """Catalog id for a path, or None if the path is unknown."""
        with self._pool.read_connection() as conn:
            return get_collection_index(conn, str(path))

    @handle_storage_errors
    def get_index_match(self, pattern: str) -> int | None:
        """Catalog id of the first entry whose path contains pattern."""
        with self._pool.read_connection() as conn:
            return get_collection_index_match(conn, pattern)

    @handle_storage_errors
    def get_path(self, idx: int) -> str:
        """Path for a catalog id.

        Raises:
            NotFoundError: If no catalog row has this id.
        """
        with self._pool.read_connection() as conn:
            path = get_collection_path(conn, idx)
        if path is None:
            raise NotFoundError(idx, f"No catalog entry with id {idx}")
        return path

    @handle_storage_errors
    def get_entry(self, path: Path | str) -> CatalogEntry | None:
        with self._pool.read_connection() as conn:
            return get_collection_entry(conn, str(path))

    @handle_storage_errors
    def insert(self, path: Path | str) -> int:
        """Add a file to the catalog and return its id.

        Already-known paths return their existing id.

        Raises:
            NotFoundError: If the file does not exist on disk.
        """
        if not Path(path).exists():
            raise NotFoundError(path, f"{path} does not exist")

        path_str = str(path)
        with self._pool.transaction() as conn:
            existing = get_collection_index(conn, path_str)
            if existing is not None:
                return existing
            show = classify_path(path_str).show
            idx = insert_collection_entry(conn, path_str, show, utc_now_iso())

        logger.info("Added %s to catalog (id=%d, show=%s)", path_str, idx, show)
        return idx

    @handle_storage_errors
    def remove(self, path: Path | str) -> bool:
        """Delete a catalog row.

        Queue rows referencing the entry must be removed first (through the
        queue engine); otherwise the foreign key rejects the delete.

        Returns:
            True if a row was deleted, False if the path was unknown.
        """
        with self._pool.transaction() as conn:
            deleted = delete_collection_entry(conn, str(path)) > 0
        if deleted:
            logger.info("Removed %s from catalog", path)
        return deleted

    @handle_storage_errors
    def entries(self, patterns: Sequence[str] = ()) -> list[CatalogEntry]:
        """Catalog rows whose path contains any pattern (all rows if none)."""
        with self._pool.read_connection() as conn:
            return search_collection(conn, patterns)

    @handle_storage_errors
    def search(self, patterns: Sequence[str] = ()) -> list[CatalogListing]:
        """Search the catalog by path substring, with show and episode data.

        Each match carries the title, rating and istv flag of its linked
        show. Episode files whose show key matches the row also get
        season, episode, eptitle, epurl and eprating when the episodes
        table knows the episode; those lookups run concurrently on separate
        read connections. Results are ordered by (season, episode) with
        non-episodes first, ties keeping path order.

        Args:
            patterns: Path substrings; a row matches if any matches.
                Empty returns every row.
        """
        with self._pool.read_connection() as conn:
            listings = search_collection_listing(conn, patterns)

        candidates = [
            (listing, parsed)
            for listing in listings
            if (parsed := classify_path(listing.path)).is_episode
            and parsed.show == listing.show
        ]
        if candidates:
            workers = min(self._list_workers, len(candidates))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._lookup_episode, parsed): listing
                    for listing, parsed in candidates
                }
                for future in as_completed(futures):
                    listing = futures[future]
                    try:
                        record = future.result()
                    except StorageError as e:
                        logger.debug("Episode lookup failed for %s: %s", listing.path, e)
                        continue
                    if record is not None:
                        listing.season = record.season
                        listing.episode = record.episode
                        listing.eptitle = record.eptitle
                        listing.epurl = record.epurl
                        listing.eprating = record.rating

        return sorted(
            listings,
            key=lambda listing: (
                listing.season is not None,
                listing.season or 0,
                listing.episode or 0,
            ),
        )

    def _lookup_episode(self, parsed: ParsedStem) -> EpisodeRecord | None:
        return self.get_episode(parsed.show, parsed.season, parsed.episode)

    @handle_storage_errors
    def fix_show_ids(self) -> int:
        """Link rows without a show_id to the show with the same key.

        Returns:
            Number of rows repaired.
        """
        with self._pool.transaction() as conn:
            updated = fix_collection_show_ids(conn, utc_now_iso())
        if updated:
            logger.info("Repaired show_id on %d catalog entries", updated)
        return updated

    @handle_storage_errors
    def entries_after(self, timestamp: datetime) -> list[CatalogEntry]:
        """Catalog rows modified at or after timestamp."""
        with self._pool.read_connection() as conn:
            return get_collection_after(conn, to_utc_iso(timestamp))

    @handle_storage_errors
    def last_modified(self) -> dict[str, datetime | None]:
        """Latest modification time per table, None for empty tables."""
        with self._pool.read_connection() as conn:
            raw = get_last_modified(conn)
        return {
            table: parse_iso_timestamp(value) if value else None
            for table, value in raw.items()
        }

    # ------------------------------------------------------------------
    # Show and episode reference data
    # ------------------------------------------------------------------

    @handle_storage_errors
    def upsert_show(
        self,
        show: str,
        title: str | None = None,
        link: str | None = None,
        istv: bool = False,
        source: str | None = None,
        rating: float | None = None,
    ) -> int:
        """Insert or update a show and return its id."""
        with self._pool.transaction() as conn:
            return upsert_show(
                conn, show, title, link, istv, source, rating, utc_now_iso()
            )

    @handle_storage_errors
    def get_show(self, show: str) -> ShowRecord | None:
        with self._pool.read_connection() as conn:
            return get_show(conn, show)

    @handle_storage_errors
    def upsert_episode(
        self,
        show: str,
        season: int,
        episode: int,
        epurl: str | None = None,
        eptitle: str | None = None,
        rating: float | None = None,
    ) -> None:
        """Insert or update an episode keyed by (show, season, episode)."""
        with self._pool.transaction() as conn:
            upsert_episode(
                conn, show, season, episode, epurl, eptitle, rating, utc_now_iso()
            )

    @handle_storage_errors
    def get_episode(self, show: str, season: int, episode: int) -> EpisodeRecord | None:
        with self._pool.read_connection() as conn:
            return get_episode(conn, show, season, episode)

    @handle_storage_errors
    def get_episode_link(self, show: str, season: int, episode: int) -> str | None:
        """External episode link, or None when the episode is unknown."""
        record = self.get_episode(show, season, episode)
        return record.epurl if record else None

    @handle_storage_errors
    def episode_keys(self) -> set[tuple[str, int, int]]:
        """Every (show, season, episode) the episodes table knows."""
        with self._pool.read_connection() as conn:
            return get_episode_keys(conn)
