"""Executors for external processes and file promotion."""

from movie_collection.executor.encoder import EncoderExecutor, EncoderResult, LogSink
from movie_collection.executor.move import (
    MoveErrorType,
    SwapResult,
    classify_os_error,
    promote_file,
    swap_into_place,
)

__all__ = [
    "EncoderExecutor",
    "EncoderResult",
    "LogSink",
    "MoveErrorType",
    "SwapResult",
    "classify_os_error",
    "promote_file",
    "swap_into_place",
]
