"""Transcode job processing service.

Runs the encoder for one job, then promotes the result into the movies
root, archives the job log and removes the job script. Failures raise and
leave the broker message unacknowledged for redelivery.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from movie_collection.config.models import MovieCollectionConfig
from movie_collection.exceptions import FileOperationError, ProcessError
from movie_collection.executor.encoder import EncoderExecutor
from movie_collection.executor.move import promote_file
from movie_collection.jobs.builder import job_script_path
from movie_collection.jobs.logs import JobLogWriter, archive_job_log, job_log_path
from movie_collection.jobs.models import TranscodeJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscodeJobResult:
    """Result of processing a transcode job."""

    success: bool
    output_path: Path | None = None
    archived_log: Path | None = None
    skipped: bool = False


class TranscodeJobService:
    """Service for processing transcode jobs."""

    def __init__(
        self,
        config: MovieCollectionConfig,
        encoder: EncoderExecutor | None = None,
        cancel_requested: Callable[[], bool] | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the transcode job service.

        Args:
            config: Supplies library paths and encoder settings.
            encoder: Encoder to run. Defaults to one built from config.
            cancel_requested: Polled during encoding; True kills the encoder.
            timeout: Maximum encoding time in seconds (None = no limit).
        """
        self.config = config
        self.encoder = encoder or EncoderExecutor(
            config.encoder.executable, config.encoder.preset
        )
        self._cancel_requested = cancel_requested
        self._timeout = timeout

    def run(self, job: TranscodeJob) -> TranscodeJobResult:
        """Process a transcode job end-to-end.

        A job whose input has disappeared is treated as done.

        Raises:
            ProcessError: If the encoder cannot start, fails, is cancelled,
                or produces no output.
            FileOperationError: If promoting the output fails.
        """
        if not job.input_path.exists():
            logger.info("Input %s is gone, nothing to transcode", job.input_path)
            return TranscodeJobResult(success=True, skipped=True)

        log_path = job_log_path(job.prefix, self.config)
        try:
            job.output_path.parent.mkdir(parents=True, exist_ok=True)
            log_writer = JobLogWriter(log_path).open()
        except OSError as e:
            raise FileOperationError(f"Cannot prepare transcode of {job.prefix}: {e}") from e

        with log_writer as log:
            log.write_header(job.kind.value, job.prefix)
            result = self.encoder.run(
                job.input_path,
                job.output_path,
                log,
                cancel_requested=self._cancel_requested,
                timeout=self._timeout,
            )
            log.write_footer(result.returncode)

        if result.cancelled:
            raise ProcessError(
                f"Transcode of {job.prefix} was cancelled", command=result.command
            )
        if not result.success:
            raise ProcessError(
                f"Encoder failed for {job.prefix} with exit code {result.returncode}",
                command=result.command,
                returncode=result.returncode,
            )
        if not job.output_path.exists():
            raise ProcessError(
                f"Encoder produced no output at {job.output_path}",
                command=result.command,
                returncode=result.returncode,
            )

        final_path = promote_file(
            job.output_path, self.config.paths.movies_root / job.output_path.name
        )
        try:
            archived = archive_job_log(log_path, self.config.paths.log_archive_dir)
            job_script_path(job.prefix, self.config).unlink(missing_ok=True)
        except OSError as e:
            raise FileOperationError(f"Cleanup after {job.prefix} failed: {e}") from e

        logger.info("Transcoded %s -> %s", job.input_path, final_path)
        return TranscodeJobResult(
            success=True, output_path=final_path, archived_log=archived
        )
