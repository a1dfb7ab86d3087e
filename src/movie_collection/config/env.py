"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion. It accepts an optional env mapping so code
that depends on environment variables can be tested without touching
os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        workers = reader.get_int("MC_LIST_WORKERS", 4)

        # Testing usage (inject custom env)
        reader = EnvReader(env={"MC_LIST_WORKERS": "8"})
        workers = reader.get_int("MC_LIST_WORKERS", 4)  # Returns 8
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from environment variable."""
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer from environment variable.

        Logs a warning and returns the default if the value cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float from environment variable.

        Logs a warning and returns the default if the value cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path from environment variable, with tilde expansion.

        Unlike tool paths, library directories may legitimately not exist
        yet, so existence is not checked here.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return Path(value).expanduser()

    def get_path_list(
        self, var: str, separator: str = ":", default: list[Path] | None = None
    ) -> list[Path]:
        """Get a list of paths from a separator-delimited variable.

        Empty entries are dropped.
        """
        value = self._env.get(var)
        if value is None:
            return default if default is not None else []

        paths: list[Path] = []
        for part in value.split(separator):
            part = part.strip()
            if part:
                paths.append(Path(part).expanduser())
        return paths

    def get_list(
        self, var: str, separator: str = ",", default: list[str] | None = None
    ) -> list[str]:
        """Get a list of strings from a separator-delimited variable."""
        value = self._env.get(var)
        if value is None:
            return default if default is not None else []
        return [part.strip() for part in value.split(separator) if part.strip()]
