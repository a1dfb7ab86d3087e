"""SQLite persistence for the catalog, the queue and the job broker."""

from movie_collection.db.connection import (
    ConnectionPool,
    handle_storage_errors,
)
from movie_collection.db.schema import (
    SCHEMA_VERSION,
    create_schema,
    get_schema_version,
    initialize_database,
)
from movie_collection.db.types import (
    CatalogEntry,
    CatalogListing,
    EpisodeRecord,
    QueueListing,
    QueueRow,
    ShowRecord,
    TvShowSummary,
)

__all__ = [
    # Connection
    "ConnectionPool",
    "handle_storage_errors",
    # Schema
    "SCHEMA_VERSION",
    "create_schema",
    "get_schema_version",
    "initialize_database",
    # Types
    "CatalogEntry",
    "CatalogListing",
    "EpisodeRecord",
    "QueueListing",
    "QueueRow",
    "ShowRecord",
    "TvShowSummary",
]
