"""Per-job encoder log files.

While a transcode runs, the encoder's output is written to
``<job_log_dir>/<prefix>_mp4.out``. After a successful run the file is
moved into the log archive directory.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import IO, TYPE_CHECKING

from movie_collection.core.datetime_utils import utc_now_iso
from movie_collection.executor.move import promote_file

if TYPE_CHECKING:
    from types import TracebackType

    from movie_collection.config.models import MovieCollectionConfig

logger = logging.getLogger(__name__)


def job_log_path(prefix: str, config: MovieCollectionConfig) -> Path:
    """Log file receiving encoder output for a job prefix."""
    return config.paths.job_log_dir / f"{prefix}_mp4.out"


def archive_job_log(log_path: Path, archive_dir: Path) -> Path | None:
    """Move a job log into the archive directory.

    Returns:
        The archived path, or None if there was no log to archive.
    """
    if not log_path.exists():
        return None
    archived = promote_file(log_path, archive_dir / log_path.name)
    logger.debug("Archived job log to %s", archived)
    return archived


class JobLogWriter:
    """Context manager writing one job's log file.

    Thread-safe; the encoder output reader and the service may both write.

    Example:
        with JobLogWriter(path) as log:
            log.write_header("transcode", "show_s01_ep01")
            encoder.run(input_path, output_path, log)
            log.write_footer(returncode=0)
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._file_handle: IO[str] | None = None

    def open(self) -> JobLogWriter:
        """Create (or truncate) the log file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file_handle = self.path.open("w", encoding="utf-8")
        return self

    def __enter__(self) -> JobLogWriter:
        if self._file_handle is None:
            self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._file_handle is not None:
                self._file_handle.close()
                self._file_handle = None

    def write(self, text: str) -> int:
        """Write raw text (encoder output lines keep their own newlines)."""
        with self._lock:
            if self._file_handle is None:
                return 0
            return self._file_handle.write(text)

    def flush(self) -> None:
        with self._lock:
            if self._file_handle is not None:
                self._file_handle.flush()

    def write_line(self, line: str) -> None:
        self.write(f"{line}\n")

    def write_header(self, kind: str, prefix: str) -> None:
        self.write_line(f"=== {kind} {prefix} started {utc_now_iso()} ===")

    def write_footer(self, returncode: int) -> None:
        self.write_line(
            f"=== finished {utc_now_iso()} with exit code {returncode} ==="
        )
