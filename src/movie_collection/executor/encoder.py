"""External encoder invocation.

Runs the encoder (HandBrakeCLI by default) as a child process and copies
its output, line by line, into a log sink. The child never outlives the
call: it is killed on cancellation, on timeout, and when the caller is
interrupted (KeyboardInterrupt, SystemExit from a signal handler).
"""

from __future__ import annotations

import logging
import queue
import subprocess  # nosec B404
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from movie_collection.exceptions import ProcessError

logger = logging.getLogger(__name__)


class LogSink(Protocol):
    """Anything encoder output can be written to (a text file, JobLogWriter)."""

    def write(self, text: str, /) -> object: ...

    def flush(self) -> None: ...


@dataclass(frozen=True)
class EncoderResult:
    """Outcome of one encoder run.

    Attributes:
        returncode: Exit status; -1 when the child was killed.
        command: Command line that was executed.
        cancelled: True if the run was cancelled before the child exited.
        timed_out: True if the run exceeded its timeout.
        lines: Number of output lines written to the log sink.
    """

    returncode: int
    command: list[str] = field(default_factory=list)
    cancelled: bool = False
    timed_out: bool = False
    lines: int = 0

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.cancelled and not self.timed_out


class EncoderExecutor:
    """Runs the external encoder with a fixed preset."""

    # How often the wait loop checks for exit, cancellation and timeout
    POLL_INTERVAL = 0.5
    READER_JOIN_TIMEOUT = 5.0

    def __init__(self, executable: str = "HandBrakeCLI", preset: str = "Android 480p30") -> None:
        self.executable = executable
        self.preset = preset

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        """Build the encoder command line."""
        return [
            self.executable,
            "-i",
            str(input_path),
            "-o",
            str(output_path),
            "--preset",
            self.preset,
        ]

    def run(
        self,
        input_path: Path,
        output_path: Path,
        log_sink: LogSink,
        cancel_requested: Callable[[], bool] | None = None,
        timeout: float | None = None,
    ) -> EncoderResult:
        """Run the encoder and stream its output into log_sink.

        Args:
            input_path: File to encode.
            output_path: File the encoder writes.
            log_sink: Text stream receiving every output line as it arrives.
            cancel_requested: Polled while the child runs; returning True
                kills the child.
            timeout: Maximum run time in seconds. None means no limit.

        Returns:
            EncoderResult describing how the child ended.

        Raises:
            ProcessError: If the encoder cannot be started.
        """
        cmd = self.build_command(input_path, output_path)
        logger.info("Running encoder: %s", " ".join(cmd))

        try:
            process = subprocess.Popen(  # nosec B603
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ProcessError(f"Failed to start encoder: {e}", command=cmd) from e

        output_queue: queue.Queue[str | None] = queue.Queue()

        def read_output() -> None:
            try:
                assert process.stdout is not None
                for line in process.stdout:
                    output_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed after kill
                logger.debug("Encoder output reader stopped: %s", e)
            finally:
                output_queue.put(None)

        reader_thread = threading.Thread(target=read_output, daemon=True)
        reader_thread.start()

        lines = 0
        cancelled = False
        timed_out = False
        start_time = time.monotonic()
        try:
            while True:
                try:
                    line = output_queue.get(timeout=self.POLL_INTERVAL)
                except queue.Empty:
                    line = ""
                if line is None:
                    break
                if line:
                    log_sink.write(line)
                    lines += 1

                if cancel_requested is not None and cancel_requested():
                    cancelled = True
                    break
                if timeout is not None and time.monotonic() - start_time >= timeout:
                    timed_out = True
                    break

            if cancelled or timed_out:
                logger.warning(
                    "Encoder %s, killing pid %d",
                    "cancelled" if cancelled else f"timed out after {timeout}s",
                    process.pid,
                )
                process.kill()
            returncode = process.wait()
        finally:
            if process.poll() is None:
                logger.warning("Killing encoder pid %d on interrupt", process.pid)
                process.kill()
                process.wait()
            reader_thread.join(timeout=self.READER_JOIN_TIMEOUT)
            log_sink.flush()

        if cancelled or timed_out:
            returncode = -1

        logger.info("Encoder exited with %d (%d lines of output)", returncode, lines)
        return EncoderResult(
            returncode=returncode,
            command=cmd,
            cancelled=cancelled,
            timed_out=timed_out,
            lines=lines,
        )
