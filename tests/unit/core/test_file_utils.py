"""Tests for library file discovery helpers."""

from pathlib import Path

from movie_collection.core.datetime_utils import parse_iso_timestamp, to_utc_iso
from movie_collection.core.file_utils import normalize_suffixes, walk_directory


class TestNormalizeSuffixes:
    """Tests for normalize_suffixes."""

    def test_adds_dot_and_lowercases(self):
        """Should accept extensions with or without a dot, in any case."""
        assert normalize_suffixes(["MP4", ".mkv", "avi", ""]) == {".mp4", ".mkv", ".avi"}


class TestWalkDirectory:
    """Tests for walk_directory."""

    def test_finds_media_recursively(self, temp_dir: Path):
        """Should yield matching files in nested directories."""
        (temp_dir / "a.mp4").touch()
        (temp_dir / "notes.txt").touch()
        nested = temp_dir / "show" / "season1"
        nested.mkdir(parents=True)
        (nested / "show_s01_ep01.MKV").touch()

        found = list(walk_directory(temp_dir, ["mp4", "mkv"]))

        assert found == [
            (temp_dir / "a.mp4").absolute(),
            (nested / "show_s01_ep01.MKV").absolute(),
        ]

    def test_skips_hidden(self, temp_dir: Path):
        """Should skip hidden files and directories."""
        hidden = temp_dir / ".cache"
        hidden.mkdir()
        (hidden / "x.mp4").touch()
        (temp_dir / ".y.mp4").touch()

        assert list(walk_directory(temp_dir, ["mp4"])) == []

    def test_missing_directory_yields_nothing(self, temp_dir: Path):
        """Should not raise for a missing root."""
        assert list(walk_directory(temp_dir / "missing", ["mp4"])) == []


class TestTimestamps:
    """Tests for the UTC timestamp helpers."""

    def test_round_trip_keeps_microseconds(self):
        """Formatted timestamps always carry microseconds for text ordering."""
        value = parse_iso_timestamp("2024-01-15T10:30:00Z")
        formatted = to_utc_iso(value)
        assert formatted == "2024-01-15T10:30:00.000000+00:00"
        assert parse_iso_timestamp(formatted) == value
