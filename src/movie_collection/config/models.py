"""Configuration data models.

This module defines dataclasses for movie collection configuration options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

DEFAULT_SUFFIXES: tuple[str, ...] = ("avi", "mp4", "mkv")


def is_covered(path: Path, roots: list[Path]) -> bool:
    """Return True if path is one of roots or lies beneath one."""
    return any(path.is_relative_to(root) for root in roots)


@dataclass
class PathsConfig:
    """File-system layout of the library.

    Television is organized as ``<television_root>/<show>/season<N>/``.
    Job scripts, job logs and encoder output live under ``work_dir``.
    """

    movies_root: Path = field(
        default_factory=lambda: Path.home() / "Documents" / "movies"
    )
    television_root: Path = field(
        default_factory=lambda: Path.home() / "Documents" / "television"
    )
    unwatched_dir: Path = field(
        default_factory=lambda: Path.home() / "television" / "unwatched"
    )
    work_dir: Path = field(default_factory=lambda: Path.home() / "dvdrip")
    log_archive_dir: Path = field(default_factory=lambda: Path.home() / "tmp_avi")

    # Directories scanned when the catalog is rebuilt from disk.
    # Empty means [movies_root, television_root].
    library_dirs: list[Path] = field(default_factory=list)

    @property
    def job_script_dir(self) -> Path:
        """Directory holding one ``<prefix>.sh`` per submitted transcode."""
        return self.work_dir / "jobs"

    @property
    def job_log_dir(self) -> Path:
        """Directory holding per-job encoder output while a job runs."""
        return self.work_dir / "log"

    @property
    def encoded_dir(self) -> Path:
        """Directory the encoder writes into before promotion."""
        return self.work_dir / "encoded"

    def scan_dirs(self) -> list[Path]:
        """Directories walked by a catalog rebuild.

        Defaults to the movie and television roots plus the unwatched
        directory, unless the latter already sits under one of the roots.
        """
        if self.library_dirs:
            return list(self.library_dirs)
        dirs = [self.movies_root, self.television_root]
        if not is_covered(self.unwatched_dir, dirs):
            dirs.append(self.unwatched_dir)
        return dirs

    def move_destinations(self) -> dict[str, Path]:
        """Directories a transcode or move job can write library files into."""
        return {
            "movies_root": self.movies_root,
            "television_root": self.television_root,
            "unwatched_dir": self.unwatched_dir,
        }


@dataclass
class LibraryConfig:
    """Catalog and queue behavior."""

    suffixes: tuple[str, ...] = DEFAULT_SUFFIXES

    # Thread pool size for per-entry episode lookups in queue listings
    list_workers: int = 4

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.list_workers < 1:
            raise ValueError(f"list_workers must be >= 1, got {self.list_workers}")
        self.suffixes = tuple(self.suffixes)


@dataclass
class EncoderConfig:
    """External encoder invocation."""

    executable: str = "HandBrakeCLI"
    preset: str = "Android 480p30"


@dataclass
class QueuesConfig:
    """Durable job queue names and consumer polling."""

    transcode: str = "transcode_work_queue"
    move: str = "remcom_worker_queue"

    # Seconds the worker sleeps when every queue is empty
    poll_interval: float = 5.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.transcode == self.move:
            raise ValueError("transcode and move queues must have different names")
        if self.poll_interval <= 0:
            raise ValueError(
                f"poll_interval must be positive, got {self.poll_interval}"
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    format: Literal["text", "json"] = "text"
    file: Path | None = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    include_stderr: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.casefold() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        if self.format not in ("text", "json"):
            raise ValueError(f"format must be 'text' or 'json', got {self.format}")


@dataclass
class MovieCollectionConfig:
    """Top-level configuration."""

    database_path: Path = field(
        default_factory=lambda: Path.home() / ".movie_collection" / "library.db"
    )
    paths: PathsConfig = field(default_factory=PathsConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    queues: QueuesConfig = field(default_factory=QueuesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
