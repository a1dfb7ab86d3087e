"""Tests for EnvReader."""

from pathlib import Path

from movie_collection.config.env import EnvReader


class TestEnvReader:
    """Tests for EnvReader type conversion."""

    def test_missing_returns_default(self):
        """Should return the default for unset variables."""
        reader = EnvReader(env={})
        assert reader.get_str("MC_ENCODER", "HandBrakeCLI") == "HandBrakeCLI"
        assert reader.get_int("MC_LIST_WORKERS") is None

    def test_invalid_int_falls_back(self, caplog):
        """Should log and fall back on unparseable integers."""
        reader = EnvReader(env={"MC_LIST_WORKERS": "many"})
        assert reader.get_int("MC_LIST_WORKERS", 4) == 4
        assert "Invalid integer value for MC_LIST_WORKERS" in caplog.text

    def test_float(self):
        """Should parse floats."""
        assert EnvReader(env={"MC_POLL_INTERVAL": "0.25"}).get_float(
            "MC_POLL_INTERVAL"
        ) == 0.25

    def test_path_expands_user(self):
        """Should expand a leading tilde."""
        path = EnvReader(env={"MC_WORK_DIR": "~/dvdrip"}).get_path("MC_WORK_DIR")
        assert path == Path.home() / "dvdrip"

    def test_path_list_drops_empty(self):
        """Should split on colons and drop empty entries."""
        reader = EnvReader(env={"MC_LIBRARY_DIRS": "/a::/b: "})
        assert reader.get_path_list("MC_LIBRARY_DIRS") == [Path("/a"), Path("/b")]

    def test_list(self):
        """Should split on commas and strip whitespace."""
        reader = EnvReader(env={"MC_SUFFIXES": "mp4, mkv,,avi"})
        assert reader.get_list("MC_SUFFIXES") == ["mp4", "mkv", "avi"]
