"""Record types for the movie collection database.

Plain dataclasses mapped from sqlite3.Row by the helpers in
movie_collection.db.queries.helpers.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogEntry:
    """A known media file."""

    id: int
    path: str
    show: str
    show_id: int | None
    last_modified: str  # ISO 8601 UTC


@dataclass(frozen=True)
class QueueRow:
    """A queue position joined with the catalog path it references."""

    position: int
    catalog_ref: int
    path: str
    last_modified: str


@dataclass
class QueueListing:
    """A queue entry as returned by a listing, with optional episode data.

    link is the show's external link when the catalog row references a
    show. show, season, episode and episode_link stay None for entries
    that are not episodes or whose episode lookup found nothing.
    """

    position: int
    path: str
    catalog_ref: int
    link: str | None = None
    show: str | None = None
    season: int | None = None
    episode: int | None = None
    episode_link: str | None = None

    def __str__(self) -> str:
        if self.episode_link:
            return f"{self.position} {self.path} {self.episode_link}"
        return f"{self.position} {self.path}"


@dataclass(frozen=True)
class ShowRecord:
    """Show reference data."""

    id: int
    show: str
    title: str | None
    link: str | None
    istv: bool
    source: str | None
    rating: float | None = None


@dataclass(frozen=True)
class EpisodeRecord:
    """Episode reference data."""

    show: str
    season: int
    episode: int
    epurl: str | None
    eptitle: str | None
    rating: float | None = None


@dataclass(frozen=True)
class TvShowSummary:
    """A television show with the number of its episodes currently queued."""

    show: str
    title: str | None
    link: str | None
    source: str | None
    count: int

    def __str__(self) -> str:
        return f"{self.show} {self.link or ''} {self.source or ''} {self.count}"


@dataclass
class CatalogListing:
    """A catalog search result joined with its show and episode data.

    title, rating and istv come from the linked show, with empty-string,
    -1 and False standing in when the row has no show. season, episode,
    eptitle, epurl and eprating are filled only for episode files the
    episodes table knows.
    """

    path: str
    show: str
    title: str = ""
    rating: float = -1.0
    istv: bool = False
    season: int | None = None
    episode: int | None = None
    eptitle: str | None = None
    epurl: str | None = None
    eprating: float | None = None

    def __str__(self) -> str:
        if self.istv:
            eprating = -1.0 if self.eprating is None else self.eprating
            season = -1 if self.season is None else self.season
            episode = -1 if self.episode is None else self.episode
            return (
                f"{self.path} {self.show} {self.rating:.1f}/{eprating:.1f} "
                f"s{season:02} ep{episode:02} {self.title} "
                f"{self.eptitle or ''} {self.epurl or ''}"
            )
        return f"{self.path} {self.show} {self.rating:.1f} {self.title}"
