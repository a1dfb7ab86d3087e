"""Move job processing service.

Swaps a finished mp4 into its library destination and then resyncs the
queue and catalog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from movie_collection.catalog.reconcile import resync_after_move
from movie_collection.config.models import MovieCollectionConfig
from movie_collection.executor.move import swap_into_place
from movie_collection.jobs.models import TranscodeJob

if TYPE_CHECKING:
    from movie_collection.queue.engine import QueueIndexEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveJobResult:
    """Result of processing a move job."""

    success: bool
    source_path: Path | None = None
    destination_path: Path | None = None
    previous_path: Path | None = None
    skipped: bool = False


class MoveJobService:
    """Service for processing move jobs."""

    def __init__(self, config: MovieCollectionConfig, engine: QueueIndexEngine) -> None:
        self.config = config
        self.engine = engine

    def reservation_marker(self, job: TranscodeJob) -> Path:
        """File in the movies root whose presence authorizes the move."""
        return self.config.paths.movies_root / f"{job.prefix}.mp4"

    def run(self, job: TranscodeJob) -> MoveJobResult:
        """Process a move job end-to-end.

        No-op when the source is gone or the reservation marker is absent.

        Raises:
            FileOperationError: If copying or swapping fails.
            StorageError: If the post-move resync fails.
        """
        if not job.input_path.exists():
            logger.info("Input %s is gone, nothing to move", job.input_path)
            return MoveJobResult(success=True, skipped=True)

        marker = self.reservation_marker(job)
        if not marker.exists():
            logger.info("No reservation marker %s, skipping move", marker)
            return MoveJobResult(success=True, skipped=True)

        swap = swap_into_place(job.input_path, job.output_path)
        resync_after_move(self.engine, job.output_path, self.config)

        logger.info("Moved %s -> %s", job.input_path, job.output_path)
        return MoveJobResult(
            success=True,
            source_path=job.input_path,
            destination_path=swap.destination,
            previous_path=swap.previous,
        )
