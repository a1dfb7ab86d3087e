"""Shared helper functions for database queries.

This module provides utility functions used across multiple query modules:
- SQL pattern escaping for LIKE queries
- Row mapping functions to convert database rows to typed dataclasses
"""

import sqlite3
from collections.abc import Sequence

from movie_collection.db.types import (
    CatalogEntry,
    CatalogListing,
    EpisodeRecord,
    QueueRow,
    ShowRecord,
)


def _escape_like_pattern(value: str) -> str:
    """Escape special characters in SQL LIKE patterns.

    Note:
        Queries using this must include ESCAPE '\\' clause.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _path_filter_clause(
    patterns: Sequence[str], column: str = "path"
) -> tuple[str, list[str]]:
    """Build a disjunction of path-substring LIKE conditions.

    Args:
        patterns: Substrings to match. Empty means no filter.
        column: Column the patterns apply to.

    Returns:
        Tuple of (SQL fragment starting with " AND", bound parameters). The
        fragment is empty when there are no patterns.
    """
    if not patterns:
        return "", []
    conditions = " OR ".join(f"{column} LIKE ? ESCAPE '\\'" for _ in patterns)
    params = [f"%{_escape_like_pattern(p)}%" for p in patterns]
    return f" AND ({conditions})", params


def _row_to_catalog_entry(row: sqlite3.Row) -> CatalogEntry:
    return CatalogEntry(
        id=row["idx"],
        path=row["path"],
        show=row["show"],
        show_id=row["show_id"],
        last_modified=row["last_modified"],
    )


def _row_to_queue_row(row: sqlite3.Row) -> QueueRow:
    return QueueRow(
        position=row["idx"],
        catalog_ref=row["collection_idx"],
        path=row["path"],
        last_modified=row["last_modified"],
    )


def _row_to_show_record(row: sqlite3.Row) -> ShowRecord:
    return ShowRecord(
        id=row["id"],
        show=row["show"],
        title=row["title"],
        link=row["link"],
        istv=bool(row["istv"]),
        source=row["source"],
        rating=row["rating"],
    )


def _row_to_episode_record(row: sqlite3.Row) -> EpisodeRecord:
    return EpisodeRecord(
        show=row["show"],
        season=row["season"],
        episode=row["episode"],
        epurl=row["epurl"],
        eptitle=row["eptitle"],
        rating=row["rating"],
    )


def _row_to_catalog_listing(row: sqlite3.Row) -> CatalogListing:
    return CatalogListing(
        path=row["path"],
        show=row["show"],
        title=row["title"],
        rating=float(row["rating"]),
        istv=bool(row["istv"]),
    )
