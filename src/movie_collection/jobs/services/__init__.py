"""Job processing services.

Service classes hold the business logic for each job kind, separate from
the worker's consume/dispatch loop.
"""

from movie_collection.jobs.services.move import MoveJobResult, MoveJobService
from movie_collection.jobs.services.transcode import (
    TranscodeJobResult,
    TranscodeJobService,
)

__all__ = [
    "MoveJobResult",
    "MoveJobService",
    "TranscodeJobResult",
    "TranscodeJobService",
]
