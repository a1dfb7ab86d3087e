"""Job context for structured logging.

Carries the job currently being processed through contextvars so every
log record emitted while a job runs is tagged with its prefix and kind.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_prefix: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_prefix", default=None
)
_job_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_kind", default=None
)


def set_job_context(prefix: str, kind: str | None = None) -> None:
    """Set the current job context.

    Args:
        prefix: Job prefix, the file stem the job operates on.
        kind: Job kind ("transcode" or "move").
    """
    _job_prefix.set(prefix)
    _job_kind.set(kind)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_prefix.set(None)
    _job_kind.set(None)


def get_job_context() -> tuple[str | None, str | None]:
    """Get the current job context as (prefix, kind)."""
    return _job_prefix.get(), _job_kind.get()


@contextmanager
def job_context(prefix: str, kind: str | None = None) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Restores the previous context on exit.

    Example:
        with job_context("show_s01_ep02", "transcode"):
            logger.info("Encoding")  # tagged [transcode:show_s01_ep02]
    """
    old_prefix = _job_prefix.get()
    old_kind = _job_kind.get()
    try:
        set_job_context(prefix, kind)
        yield
    finally:
        _job_prefix.set(old_prefix)
        _job_kind.set(old_kind)


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_prefix and job_kind attributes for JSON output and a compact
    job_tag such as ``[transcode:show_s01_ep02] `` for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        prefix, kind = get_job_context()

        record.job_prefix = prefix
        record.job_kind = kind

        if prefix:
            record.job_tag = f"[{kind}:{prefix}] " if kind else f"[{prefix}] "
        else:
            record.job_tag = ""

        return True
