"""Configuration management for the movie collection.

Configuration is loaded with precedence handling:
1. Explicit overrides (highest priority)
2. Environment variables (MC_*)
3. Config file (~/.movie_collection/config.toml)
4. Default values (lowest priority)
"""

from movie_collection.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from movie_collection.config.env import EnvReader
from movie_collection.config.loader import (
    ConfigParseError,
    get_config,
    get_default_config_path,
    load_config_file,
    validate_config,
)
from movie_collection.config.models import (
    EncoderConfig,
    LibraryConfig,
    LoggingConfig,
    MovieCollectionConfig,
    PathsConfig,
    QueuesConfig,
)

__all__ = [
    # Models
    "EncoderConfig",
    "LibraryConfig",
    "LoggingConfig",
    "MovieCollectionConfig",
    "PathsConfig",
    "QueuesConfig",
    # Loader
    "ConfigParseError",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "validate_config",
    # Layering
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
]
