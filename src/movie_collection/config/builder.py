"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building MovieCollectionConfig by
composing multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from movie_collection.config.env import EnvReader
from movie_collection.config.models import (
    DEFAULT_SUFFIXES,
    EncoderConfig,
    LibraryConfig,
    LoggingConfig,
    MovieCollectionConfig,
    PathsConfig,
    QueuesConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Database
    database_path: Path | None = None

    # Paths
    movies_root: Path | None = None
    television_root: Path | None = None
    unwatched_dir: Path | None = None
    work_dir: Path | None = None
    log_archive_dir: Path | None = None
    library_dirs: list[Path] | None = None

    # Library
    suffixes: list[str] | None = None
    list_workers: int | None = None

    # Encoder
    encoder_executable: str | None = None
    encoder_preset: str | None = None

    # Queues
    transcode_queue: str | None = None
    move_queue: str | None = None
    poll_interval: float | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds MovieCollectionConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values."""
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> MovieCollectionConfig:
        """Build the final MovieCollectionConfig with defaults for unset values.

        Raises:
            ValueError: If a resulting section fails validation.
        """
        default_paths = PathsConfig()
        paths = PathsConfig(
            movies_root=self._get("movies_root", default_paths.movies_root),
            television_root=self._get(
                "television_root", default_paths.television_root
            ),
            unwatched_dir=self._get("unwatched_dir", default_paths.unwatched_dir),
            work_dir=self._get("work_dir", default_paths.work_dir),
            log_archive_dir=self._get(
                "log_archive_dir", default_paths.log_archive_dir
            ),
            library_dirs=list(self._get("library_dirs", [])),
        )

        library = LibraryConfig(
            suffixes=tuple(self._get("suffixes", DEFAULT_SUFFIXES)),
            list_workers=self._get("list_workers", 4),
        )

        encoder = EncoderConfig(
            executable=self._get("encoder_executable", "HandBrakeCLI"),
            preset=self._get("encoder_preset", "Android 480p30"),
        )

        queues = QueuesConfig(
            transcode=self._get("transcode_queue", "transcode_work_queue"),
            move=self._get("move_queue", "remcom_worker_queue"),
            poll_interval=self._get("poll_interval", 5.0),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", True),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        config = MovieCollectionConfig(
            paths=paths,
            library=library,
            encoder=encoder,
            queues=queues,
            logging=logging_config,
        )
        if "database_path" in self._values:
            config.database_path = self._values["database_path"]
        return config


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    database = file_config.get("database", {})
    paths = file_config.get("paths", {})
    library = file_config.get("library", {})
    encoder = file_config.get("encoder", {})
    queues = file_config.get("queues", {})
    logging_conf = file_config.get("logging", {})

    library_dirs: list[Path] | None = None
    if paths.get("library_dirs"):
        library_dirs = [Path(d).expanduser() for d in paths["library_dirs"]]

    return ConfigSource(
        database_path=_optional_path(database.get("path")),
        movies_root=_optional_path(paths.get("movies_root")),
        television_root=_optional_path(paths.get("television_root")),
        unwatched_dir=_optional_path(paths.get("unwatched_dir")),
        work_dir=_optional_path(paths.get("work_dir")),
        log_archive_dir=_optional_path(paths.get("log_archive_dir")),
        library_dirs=library_dirs,
        suffixes=library.get("suffixes"),
        list_workers=library.get("list_workers"),
        encoder_executable=encoder.get("executable"),
        encoder_preset=encoder.get("preset"),
        transcode_queue=queues.get("transcode"),
        move_queue=queues.get("move"),
        poll_interval=queues.get("poll_interval"),
        logging_level=logging_conf.get("level"),
        logging_file=_optional_path(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from MC_* environment variables."""
    return ConfigSource(
        database_path=reader.get_path("MC_DATABASE_PATH"),
        movies_root=reader.get_path("MC_MOVIES_ROOT"),
        television_root=reader.get_path("MC_TELEVISION_ROOT"),
        unwatched_dir=reader.get_path("MC_UNWATCHED_DIR"),
        work_dir=reader.get_path("MC_WORK_DIR"),
        log_archive_dir=reader.get_path("MC_LOG_ARCHIVE_DIR"),
        library_dirs=reader.get_path_list("MC_LIBRARY_DIRS") or None,
        suffixes=reader.get_list("MC_SUFFIXES") or None,
        list_workers=reader.get_int("MC_LIST_WORKERS"),
        encoder_executable=reader.get_str("MC_ENCODER"),
        encoder_preset=reader.get_str("MC_ENCODER_PRESET"),
        transcode_queue=reader.get_str("MC_TRANSCODE_QUEUE"),
        move_queue=reader.get_str("MC_MOVE_QUEUE"),
        poll_interval=reader.get_float("MC_POLL_INTERVAL"),
        logging_level=reader.get_str("MC_LOG_LEVEL"),
        logging_file=reader.get_path("MC_LOG_FILE"),
        logging_format=reader.get_str("MC_LOG_FORMAT"),
    )
