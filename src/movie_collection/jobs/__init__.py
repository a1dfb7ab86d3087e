"""Transcode/move job pipeline.

Jobs are built from file paths (builder), published onto durable queues
(publisher, broker) and consumed one at a time by the worker, which
dispatches to the transcode and move services.
"""

from movie_collection.jobs.broker import Delivery, JobBroker
from movie_collection.jobs.builder import (
    build_move_job,
    build_transcode_job,
    job_script_path,
)
from movie_collection.jobs.models import JobKind, TranscodeJob
from movie_collection.jobs.publisher import JobPublisher, queue_for
from movie_collection.jobs.worker import JobWorker, run_worker

__all__ = [
    "Delivery",
    "JobBroker",
    "JobKind",
    "JobPublisher",
    "JobWorker",
    "TranscodeJob",
    "build_move_job",
    "build_transcode_job",
    "job_script_path",
    "queue_for",
    "run_worker",
]
