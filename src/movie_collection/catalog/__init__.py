"""Catalog of known media files and its reconciliation with disk."""

from movie_collection.catalog.reconcile import (
    ReconcileReport,
    rebuild_catalog,
    resync_after_move,
)
from movie_collection.catalog.store import CatalogStore

__all__ = [
    "CatalogStore",
    "ReconcileReport",
    "rebuild_catalog",
    "resync_after_move",
]
