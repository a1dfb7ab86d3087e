"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Explicit overrides (passed directly to get_config)
2. Environment variables (MC_*)
3. Config file (~/.movie_collection/config.toml)
4. Default values

Environment variables:
- MC_CONFIG_PATH: Path to config file (overrides default location)
- MC_DATABASE_PATH: Path to database file
- MC_MOVIES_ROOT, MC_TELEVISION_ROOT, MC_UNWATCHED_DIR: Library layout
- MC_WORK_DIR: Directory holding job scripts, job logs and encoder output
- MC_LOG_ARCHIVE_DIR: Where finished job logs are archived
- MC_LIBRARY_DIRS: Colon-separated directories scanned on catalog rebuild
- MC_SUFFIXES: Comma-separated media extensions
- MC_ENCODER, MC_ENCODER_PRESET: External encoder executable and preset
- MC_TRANSCODE_QUEUE, MC_MOVE_QUEUE, MC_POLL_INTERVAL: Job queues
- MC_LOG_LEVEL, MC_LOG_FILE, MC_LOG_FORMAT: Logging
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from movie_collection.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from movie_collection.config.env import EnvReader
from movie_collection.config.models import MovieCollectionConfig, is_covered

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".movie_collection"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigParseError(ValueError):
    """Raised when a config file exists but is not valid TOML."""


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by the MC_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("MC_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigParseError on parse failures.
                If False (default), log a warning and return empty dict.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigParseError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        if strict:
            raise ConfigParseError(f"Failed to parse config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def get_config(
    config_path: Path | None = None,
    overrides: ConfigSource | None = None,
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> MovieCollectionConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides MC_CONFIG_PATH).
        overrides: Highest-precedence values, e.g. from a calling service.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigParseError on config file parse failures.

    Returns:
        MovieCollectionConfig with merged configuration.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    if overrides is not None:
        builder.apply(overrides)

    return builder.build()


def validate_config(config: MovieCollectionConfig) -> list[str]:
    """Validate cross-field configuration constraints.

    Returns:
        List of error strings. Empty list means configuration is valid.
    """
    errors: list[str] = []

    paths = config.paths
    if paths.movies_root == paths.television_root:
        errors.append("movies_root and television_root must differ")

    scan_dirs = paths.scan_dirs()
    for scan_dir in scan_dirs:
        if not scan_dir.exists():
            errors.append(f"Library directory does not exist: {scan_dir}")

    # A destination outside every scanned directory is dropped by the
    # catalog rebuild that follows each move
    for name, destination in paths.move_destinations().items():
        if not is_covered(destination, scan_dirs):
            errors.append(f"{name} is not under any library directory: {destination}")

    if paths.job_log_dir == paths.log_archive_dir:
        errors.append("log_archive_dir must differ from the job log directory")

    return errors
