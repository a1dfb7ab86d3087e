"""Show/season/episode classification of media file names.

Episode files follow the ``<show>_s<season>_ep<episode>`` convention, e.g.
``mr_robot_s01_ep03.mp4``. Anything else is treated as a movie, and the
whole stem becomes the show key.

This is the only place show identity is derived from a file name. The
catalog and the job pipeline both call into it so their show keys agree.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import NamedTuple

NOT_AN_EPISODE = -1

_SEASON_PATTERN = re.compile(r"^s(\d+)$")
_EPISODE_PATTERN = re.compile(r"^ep(\d+)$")


class ParsedStem(NamedTuple):
    """Result of classifying a file stem."""

    show: str
    season: int
    episode: int

    @property
    def is_episode(self) -> bool:
        """True when both season and episode were parsed."""
        return self.season != NOT_AN_EPISODE and self.episode != NOT_AN_EPISODE


def parse_file_stem(file_stem: str) -> ParsedStem:
    """Extract (show, season, episode) from a file name without extension.

    Never raises. A stem that does not match the episode convention yields
    ``(file_stem, -1, -1)``.

    Args:
        file_stem: File name with the extension removed.

    Returns:
        ParsedStem with season/episode set to -1 for non-episodes.

    Example:
        >>> parse_file_stem("mr_robot_s01_ep03")
        ParsedStem(show='mr_robot', season=1, episode=3)
    """
    entries = file_stem.split("_")
    if len(entries) < 3:
        return ParsedStem(file_stem, NOT_AN_EPISODE, NOT_AN_EPISODE)

    season_match = _SEASON_PATTERN.match(entries[-2])
    episode_match = _EPISODE_PATTERN.match(entries[-1])
    show = "_".join(entries[:-2])
    if season_match is None or episode_match is None or not show:
        return ParsedStem(file_stem, NOT_AN_EPISODE, NOT_AN_EPISODE)

    return ParsedStem(show, int(season_match.group(1)), int(episode_match.group(1)))


def classify_path(path: Path | str) -> ParsedStem:
    """Classify a file path by its stem."""
    return parse_file_stem(Path(path).stem)
