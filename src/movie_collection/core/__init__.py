"""Core utilities package.

Pure helpers with no database or configuration dependencies: file name
classification, directory walking, and UTC timestamp handling.
"""

from movie_collection.core.datetime_utils import (
    parse_iso_timestamp,
    to_utc_iso,
    utc_now_iso,
)
from movie_collection.core.file_utils import normalize_suffixes, walk_directory
from movie_collection.core.filename import (
    NOT_AN_EPISODE,
    ParsedStem,
    classify_path,
    parse_file_stem,
)

__all__ = [
    # Filename classification
    "NOT_AN_EPISODE",
    "ParsedStem",
    "classify_path",
    "parse_file_stem",
    # File utilities
    "normalize_suffixes",
    "walk_directory",
    # Datetime utilities
    "parse_iso_timestamp",
    "to_utc_iso",
    "utc_now_iso",
]
