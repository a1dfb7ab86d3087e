"""Exception types for the movie collection core.

Every error raised by the catalog, the queue engine and the job pipeline
derives from MovieCollectionError, so callers can catch them all with a
single except clause if desired.
"""

from __future__ import annotations

from pathlib import Path


class MovieCollectionError(Exception):
    """Base exception for movie collection errors."""


class NotFoundError(MovieCollectionError):
    """Raised when a path, directory, or catalog entry does not exist.

    Attributes:
        target: The missing path or identifier.
    """

    def __init__(self, target: Path | str | int, message: str | None = None) -> None:
        self.target = target
        super().__init__(message or f"Not found: {target}")


class AlreadyQueuedError(MovieCollectionError):
    """Raised when a job for the same file prefix was already submitted.

    Attributes:
        prefix: File name without extension that keys the job.
        script_path: The existing job script that blocked the submission.
    """

    def __init__(self, prefix: str, script_path: Path) -> None:
        self.prefix = prefix
        self.script_path = script_path
        super().__init__(f"Job for {prefix} already queued ({script_path} exists)")


class ClassificationError(MovieCollectionError):
    """Raised when a file name must be an episode but is not.

    Attributes:
        path: The offending file path.
    """

    def __init__(self, path: Path | str, season: int, episode: int) -> None:
        self.path = path
        self.season = season
        self.episode = episode
        super().__init__(
            f"Failed to parse show season {season} episode {episode} from {path}"
        )


class StorageError(MovieCollectionError):
    """Raised when a query or transaction against the store fails."""


class DatabaseLockedError(StorageError):
    """Raised when the database is locked and cannot be accessed."""


class ProcessError(MovieCollectionError):
    """Raised when the external encoder fails to start or exits abnormally.

    Attributes:
        command: Command line that was executed.
        returncode: Exit status, or None if the process never started.
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        self.command = command or []
        self.returncode = returncode
        super().__init__(message)


class FileOperationError(MovieCollectionError):
    """Raised when copying, renaming, or reading a file fails."""
