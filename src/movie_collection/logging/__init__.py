"""Structured logging for the movie collection.

Provides configurable logging with JSON format support, file rotation and
per-job context tagging.
"""

from movie_collection.logging.config import JSONFormatter, configure_logging
from movie_collection.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "clear_job_context",
    "configure_logging",
    "get_job_context",
    "job_context",
    "set_job_context",
]
