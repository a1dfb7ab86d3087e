"""Tests for CatalogStore."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from movie_collection.catalog import CatalogStore
from movie_collection.exceptions import NotFoundError, StorageError


class TestInsert:
    """Tests for CatalogStore.insert."""

    def test_insert_assigns_id_and_show(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should store the path with the show key from the file name."""
        path = make_media("mr_robot_s01_ep03.mp4")
        idx = catalog.insert(path)

        entry = catalog.get_entry(path)
        assert entry is not None
        assert entry.id == idx
        assert entry.show == "mr_robot"
        assert entry.show_id is None
        assert catalog.get_path(idx) == str(path)

    def test_insert_is_idempotent(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should return the existing id for a known path."""
        path = make_media("the_matrix.mkv")
        assert catalog.insert(path) == catalog.insert(path)
        assert len(catalog.search()) == 1

    def test_insert_missing_file(self, catalog: CatalogStore, temp_dir: Path):
        """Should refuse files that do not exist."""
        with pytest.raises(NotFoundError):
            catalog.insert(temp_dir / "ghost.mp4")
        assert catalog.search() == []

    def test_insert_links_known_show(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should fill show_id when the show is already known."""
        show_id = catalog.upsert_show("house", title="House", istv=True)
        path = make_media("house_s01_ep01.mp4")
        catalog.insert(path)
        assert catalog.get_entry(path).show_id == show_id


class TestLookup:
    """Tests for catalog lookups."""

    def test_unknown_path(self, catalog: CatalogStore):
        """Unknown paths have no index."""
        assert catalog.get_index("/nowhere.mp4") is None
        assert catalog.get_entry("/nowhere.mp4") is None

    def test_unknown_id(self, catalog: CatalogStore):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            catalog.get_path(999)

    def test_search_patterns(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should match any pattern as a path substring."""
        for name in ("house_s01_ep01.mp4", "the_wire_s01_ep01.mp4", "heat.mkv"):
            catalog.insert(make_media(name))

        assert [Path(e.path).name for e in catalog.search(["house", "heat"])] == [
            "heat.mkv",
            "house_s01_ep01.mp4",
        ]
        assert len(catalog.search()) == 3

    def test_search_escapes_wildcards(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """LIKE wildcards in patterns should match literally."""
        catalog.insert(make_media("100%_real.mp4"))
        catalog.insert(make_media("1000_real.mp4"))
        assert len(catalog.search(["0%_"])) == 1

    def test_get_index_match(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should return the first id whose path contains the substring."""
        first = catalog.insert(make_media("house_s01_ep01.mp4"))
        catalog.insert(make_media("house_s01_ep02.mp4"))

        assert catalog.get_index_match("house_s01") == first
        assert catalog.get_index_match("s01_ep02") == first + 1
        assert catalog.get_index_match("the_wire") is None
        assert catalog.get_index_match("%") is None


class TestSearchListing:
    """Tests for the show and episode data attached by CatalogStore.search."""

    def test_movie_without_show(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Rows with no linked show get placeholder show data."""
        path = make_media("heat.mkv")
        catalog.insert(path)

        [listing] = catalog.search()

        assert listing.show == "heat"
        assert listing.title == ""
        assert listing.rating == -1.0
        assert listing.istv is False
        assert listing.season is None
        assert str(listing) == f"{path} heat -1.0 "

    def test_show_and_episode_data(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Episodes should carry show title, rating and their own episode data."""
        catalog.upsert_show("house", title="House", istv=True, rating=8.7)
        catalog.upsert_episode(
            "house", 1, 2, epurl="tt0606035", eptitle="Paternity", rating=8.1
        )
        path = make_media("house_s01_ep02.mp4")
        catalog.insert(path)

        [listing] = catalog.search(["house"])

        assert listing.title == "House"
        assert listing.rating == 8.7
        assert listing.istv is True
        assert (listing.season, listing.episode) == (1, 2)
        assert listing.eptitle == "Paternity"
        assert listing.epurl == "tt0606035"
        assert listing.eprating == 8.1
        assert str(listing) == (
            f"{path} house 8.7/8.1 s01 ep02 House Paternity tt0606035"
        )

    def test_sorted_by_season_and_episode(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Known episodes sort by (season, episode) after everything else."""
        for season, episode in ((2, 1), (1, 3), (1, 1)):
            catalog.upsert_episode("house", season, episode)
        names = [
            "house_s02_ep01.mp4",
            "house_s01_ep03.mp4",
            "house_s01_ep01.mp4",
            "house_s09_ep09.mp4",
            "heat.mkv",
        ]
        for name in names:
            catalog.insert(make_media(name))

        assert [Path(item.path).name for item in catalog.search()] == [
            "heat.mkv",
            "house_s09_ep09.mp4",
            "house_s01_ep01.mp4",
            "house_s01_ep03.mp4",
            "house_s02_ep01.mp4",
        ]

    def test_failed_episode_lookup_left_unenriched(
        self,
        catalog: CatalogStore,
        make_media: Callable[..., Path],
        monkeypatch: pytest.MonkeyPatch,
    ):
        """A storage error during a lookup leaves that row without episode data."""
        catalog.upsert_episode("house", 1, 1, eptitle="Pilot")
        catalog.insert(make_media("house_s01_ep01.mp4"))

        def broken_lookup(show, season, episode):
            raise StorageError("database is gone")

        monkeypatch.setattr(catalog, "get_episode", broken_lookup)

        [listing] = catalog.search()
        assert listing.eptitle is None
        assert listing.season is None

    def test_entries_returns_raw_rows(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """entries() should return plain catalog rows without enrichment."""
        path = make_media("heat.mkv")
        idx = catalog.insert(path)
        [entry] = catalog.entries(["heat"])
        assert (entry.id, entry.path, entry.show) == (idx, str(path), "heat")


class TestRemove:
    """Tests for CatalogStore.remove."""

    def test_remove(self, catalog: CatalogStore, make_media: Callable[..., Path]):
        """Should delete known rows and report unknown ones."""
        path = make_media("heat.mkv")
        catalog.insert(path)
        assert catalog.remove(path) is True
        assert catalog.remove(path) is False
        assert catalog.get_index(path) is None

    def test_remove_queued_rejected(
        self, engine, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """A queued entry cannot be removed until it is dequeued."""
        path = make_media("heat.mkv")
        engine.append(path)
        with pytest.raises(StorageError):
            catalog.remove(path)
        assert engine.remove_by_path(path) == 1
        assert catalog.remove(path) is True


class TestShows:
    """Tests for show and episode reference data."""

    def test_upsert_show_updates(self, catalog: CatalogStore):
        """Should keep the id and update fields on conflict."""
        first = catalog.upsert_show("house", title="House", link="house_md")
        second = catalog.upsert_show("house", title="House M.D.", link="house_md")
        assert first == second
        record = catalog.get_show("house")
        assert record.title == "House M.D."
        assert record.istv is False
        assert record.rating is None

    def test_episode_link(self, catalog: CatalogStore):
        """Should return the episode url, None when unknown."""
        catalog.upsert_episode("house", 1, 2, epurl="tt0606035", eptitle="Paternity")
        assert catalog.get_episode_link("house", 1, 2) == "tt0606035"
        assert catalog.get_episode_link("house", 1, 3) is None
        assert catalog.episode_keys() == {("house", 1, 2)}

    def test_fix_show_ids(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should link rows inserted before their show was known."""
        path = make_media("house_s01_ep01.mp4")
        catalog.insert(path)
        show_id = catalog.upsert_show("house", istv=True)

        assert catalog.fix_show_ids() == 1
        assert catalog.get_entry(path).show_id == show_id
        assert catalog.fix_show_ids() == 0


class TestSync:
    """Tests for incremental sync helpers."""

    def test_entries_after(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should return rows modified at or after the timestamp."""
        before = datetime.now(timezone.utc) - timedelta(seconds=1)
        catalog.insert(make_media("heat.mkv"))
        after = datetime.now(timezone.utc) + timedelta(seconds=1)

        assert [Path(e.path).name for e in catalog.entries_after(before)] == ["heat.mkv"]
        assert catalog.entries_after(after) == []

    def test_last_modified(
        self, catalog: CatalogStore, make_media: Callable[..., Path]
    ):
        """Should report None for empty tables and a datetime otherwise."""
        catalog.insert(make_media("heat.mkv"))
        stamps = catalog.last_modified()

        assert set(stamps) == {"movie_collection", "movie_queue", "shows", "episodes"}
        assert isinstance(stamps["movie_collection"], datetime)
        assert stamps["movie_queue"] is None
