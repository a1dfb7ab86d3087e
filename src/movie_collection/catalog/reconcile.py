"""Reconcile the catalog and queue with the files on disk.

rebuild_catalog walks the library directories, adds files the catalog does
not know, and drops catalog rows whose files are gone (dequeuing them first
so the queue stays dense). resync_after_move is the maintenance pass run
after a move job replaces a library file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from movie_collection.core.file_utils import walk_directory
from movie_collection.core.filename import classify_path

if TYPE_CHECKING:
    from movie_collection.config.models import MovieCollectionConfig
    from movie_collection.queue.engine import QueueIndexEngine

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """Outcome of a catalog rebuild."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    dequeued: list[str] = field(default_factory=list)
    shows_missing_episodes: set[str] = field(default_factory=set)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def rebuild_catalog(
    engine: QueueIndexEngine, config: MovieCollectionConfig
) -> ReconcileReport:
    """Bring the catalog in line with the library directories.

    Nothing is removed when no media file is found at all, so an unmounted
    library does not empty the catalog. Running it twice in a row changes
    nothing the second time.

    Args:
        engine: Queue engine; its catalog is the one rebuilt.
        config: Supplies the scanned directories and media suffixes.

    Returns:
        ReconcileReport listing what changed.
    """
    report = ReconcileReport()
    catalog = engine.catalog

    on_disk: set[str] = set()
    for directory in config.paths.scan_dirs():
        if not directory.exists():
            logger.debug("Skipping missing library directory %s", directory)
            continue
        on_disk.update(str(p) for p in walk_directory(directory, config.library.suffixes))

    if not on_disk:
        logger.warning("No media files found in %s", config.paths.scan_dirs())
        return report

    known = {entry.path for entry in catalog.entries()}

    for path in sorted(on_disk - known):
        logger.info("Not in catalog: %s", path)
        catalog.insert(path)
        report.added.append(path)

    for path in sorted(known - on_disk):
        if engine.remove_by_path(path):
            logger.info("In queue but not on disk: %s", path)
            report.dequeued.append(path)
        else:
            logger.info("Not on disk: %s", path)
        catalog.remove(path)
        report.removed.append(path)

    episode_keys = catalog.episode_keys()
    for path in on_disk:
        parsed = classify_path(path)
        if parsed.is_episode and parsed not in episode_keys:
            report.shows_missing_episodes.add(parsed.show)
    for show in sorted(report.shows_missing_episodes):
        logger.info("Show has episode not in database: %s", show)

    logger.info(
        "Catalog rebuild: %d added, %d removed, %d dequeued",
        len(report.added),
        len(report.removed),
        len(report.dequeued),
    )
    return report


def resync_after_move(
    engine: QueueIndexEngine, path: Path | str, config: MovieCollectionConfig
) -> ReconcileReport:
    """Refresh catalog and queue after a move replaced the file at path.

    Dequeues the replaced file, queues it again at the end, rebuilds the
    catalog from disk and repairs missing show ids.
    """
    engine.remove_by_path(path)
    engine.append(path)
    report = rebuild_catalog(engine, config)
    engine.catalog.fix_show_ids()
    return report
