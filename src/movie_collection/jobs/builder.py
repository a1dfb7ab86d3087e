"""Build transcode and move jobs from file paths.

Construction errors (AlreadyQueuedError, ClassificationError,
NotFoundError) are raised to the submitter; a job that fails to build
never reaches the broker.
"""

from __future__ import annotations

import logging
from pathlib import Path

from movie_collection.config.models import MovieCollectionConfig
from movie_collection.core.filename import parse_file_stem
from movie_collection.exceptions import (
    AlreadyQueuedError,
    ClassificationError,
    FileOperationError,
    NotFoundError,
)
from movie_collection.jobs.models import JobKind, TranscodeJob

logger = logging.getLogger(__name__)


def job_script_path(prefix: str, config: MovieCollectionConfig) -> Path:
    """Job script marking a submitted transcode for prefix."""
    return config.paths.job_script_dir / f"{prefix}.sh"


def build_transcode_job(path: Path | str, config: MovieCollectionConfig) -> TranscodeJob:
    """Build a transcode job for path.

    The encoder writes ``<work_dir>/encoded/<prefix>.mp4``.

    Raises:
        AlreadyQueuedError: If a job script for this prefix already exists.
    """
    input_path = Path(path).absolute()
    prefix = input_path.stem
    script = job_script_path(prefix, config)
    if script.exists():
        raise AlreadyQueuedError(prefix, script)

    return TranscodeJob(
        kind=JobKind.TRANSCODE,
        prefix=prefix,
        input_path=input_path,
        output_path=config.paths.encoded_dir / f"{prefix}.mp4",
    )


def _move_destination_dir(
    input_path: Path,
    config: MovieCollectionConfig,
    directory: str | None,
    unwatched: bool,
) -> Path:
    paths = config.paths
    if directory:
        relative = Path(directory)
        if relative.is_absolute() or ".." in relative.parts:
            raise NotFoundError(
                directory, f"Directory {directory} is not under {paths.movies_root}"
            )
        dest_dir = paths.movies_root / relative
        if not dest_dir.is_dir():
            raise NotFoundError(dest_dir, f"Directory {dest_dir} does not exist")
        return dest_dir

    if unwatched:
        if not paths.unwatched_dir.is_dir():
            raise NotFoundError(
                paths.unwatched_dir, f"Directory {paths.unwatched_dir} does not exist"
            )
        return paths.unwatched_dir

    parsed = parse_file_stem(input_path.stem)
    if not parsed.is_episode:
        raise ClassificationError(input_path, parsed.season, parsed.episode)

    dest_dir = paths.television_root / parsed.show / f"season{parsed.season}"
    if not dest_dir.exists():
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Cannot create {dest_dir}: {e}") from e
        logger.info("Created %s", dest_dir)
    return dest_dir


def build_move_job(
    path: Path | str,
    config: MovieCollectionConfig,
    directory: str | None = None,
    unwatched: bool = False,
) -> TranscodeJob:
    """Build a job that moves an mp4 into the library.

    Sources that are not mp4 need transcoding first, so they get a
    transcode job instead.

    Destination directory, in priority order:
    1. ``<movies_root>/<directory>`` when directory is given (must exist
       and stay inside movies_root)
    2. the unwatched directory when unwatched is set (must exist)
    3. ``<television_root>/<show>/season<N>`` from the file name (created
       on demand)

    Raises:
        NotFoundError: If an explicit or unwatched directory is missing
            or the explicit directory points outside movies_root.
        ClassificationError: If the default path is needed but the name is
            not episode-shaped.
        AlreadyQueuedError: When delegating to build_transcode_job.
    """
    input_path = Path(path).absolute()
    if input_path.suffix.lower() != ".mp4":
        return build_transcode_job(input_path, config)

    prefix = input_path.stem
    dest_dir = _move_destination_dir(input_path, config, directory, unwatched)
    return TranscodeJob(
        kind=JobKind.MOVE,
        prefix=prefix,
        input_path=input_path,
        output_path=dest_dir / f"{prefix}.mp4",
    )
