"""Publish jobs onto the broker.

Transcode jobs also get a job script, ``<job_script_dir>/<prefix>.sh``,
which marks the prefix as submitted until the transcode finishes.
build_transcode_job refuses to build a second job while it exists.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from movie_collection.config.models import MovieCollectionConfig
from movie_collection.core.datetime_utils import utc_now_iso
from movie_collection.exceptions import FileOperationError
from movie_collection.jobs.broker import JobBroker
from movie_collection.jobs.builder import (
    build_move_job,
    build_transcode_job,
    job_script_path,
)
from movie_collection.jobs.models import JobKind, TranscodeJob

logger = logging.getLogger(__name__)


def queue_for(kind: JobKind, config: MovieCollectionConfig) -> str:
    """Queue name that carries jobs of a kind."""
    if kind is JobKind.TRANSCODE:
        return config.queues.transcode
    return config.queues.move


def render_job_script(job: TranscodeJob, config: MovieCollectionConfig) -> str:
    """Shell script equivalent of a transcode job, for humans and the guard."""
    command = shlex.join(
        [
            config.encoder.executable,
            "-i",
            str(job.input_path),
            "-o",
            str(job.output_path),
            "--preset",
            config.encoder.preset,
        ]
    )
    return f"#!/bin/bash\n# queued {utc_now_iso()}\n{command}\n"


class JobPublisher:
    """Serializes jobs onto the queue for their kind.

    Publishing is fire-and-forget: no reply is awaited.
    """

    def __init__(self, broker: JobBroker, config: MovieCollectionConfig) -> None:
        self._broker = broker
        self._config = config

    def _write_script(self, job: TranscodeJob) -> Path:
        script = job_script_path(job.prefix, self._config)
        try:
            script.parent.mkdir(parents=True, exist_ok=True)
            script.write_text(render_job_script(job, self._config), encoding="utf-8")
        except OSError as e:
            raise FileOperationError(f"Cannot write job script {script}: {e}") from e
        return script

    def publish(self, job: TranscodeJob) -> int:
        """Publish a job. Returns the broker message id."""
        queue = queue_for(job.kind, self._config)
        script: Path | None = None
        if job.kind is JobKind.TRANSCODE:
            script = self._write_script(job)

        try:
            message_id = self._broker.publish(queue, job.to_json())
        except Exception:
            if script is not None:
                script.unlink(missing_ok=True)
            raise

        logger.info(
            "Published %s job for %s to %s", job.kind.value, job.prefix, queue
        )
        return message_id

    def submit_transcode(self, path: Path | str) -> TranscodeJob:
        """Build and publish a transcode job."""
        job = build_transcode_job(path, self._config)
        self.publish(job)
        return job

    def submit_move(
        self,
        path: Path | str,
        directory: str | None = None,
        unwatched: bool = False,
    ) -> TranscodeJob:
        """Build and publish a move job (a transcode job for non-mp4 files)."""
        job = build_move_job(path, self._config, directory, unwatched)
        self.publish(job)
        return job
