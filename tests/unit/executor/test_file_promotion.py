"""Tests for file promotion and the .new/.old swap."""

import errno
import os
import shutil
from pathlib import Path

import pytest

from movie_collection.exceptions import FileOperationError
from movie_collection.executor import (
    MoveErrorType,
    classify_os_error,
    promote_file,
    swap_into_place,
)


class TestClassifyOsError:
    """Tests for classify_os_error."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (errno.ENOSPC, MoveErrorType.DISK_SPACE),
            (errno.EACCES, MoveErrorType.PERMISSION),
            (errno.ENOENT, MoveErrorType.NOT_FOUND),
            (errno.EXDEV, MoveErrorType.CROSS_DEVICE),
            (errno.EBUSY, MoveErrorType.UNKNOWN),
        ],
    )
    def test_by_errno(self, code: int, expected: MoveErrorType):
        """Should categorize by errno."""
        assert classify_os_error(OSError(code, os.strerror(code))) is expected


class TestPromoteFile:
    """Tests for promote_file."""

    def test_rename(self, temp_dir: Path):
        """Should move the file and create the destination directory."""
        src = temp_dir / "encoded" / "heat.mp4"
        src.parent.mkdir()
        src.write_bytes(b"video")
        dst = temp_dir / "movies" / "heat.mp4"

        assert promote_file(src, dst) == dst
        assert dst.read_bytes() == b"video"
        assert not src.exists()

    def test_cross_device_falls_back_to_copy(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """A failed rename should fall back to copy and delete."""
        src = temp_dir / "heat.mp4"
        src.write_bytes(b"video")
        dst = temp_dir / "movies" / "heat.mp4"

        def no_rename(a, b):
            raise OSError(errno.EXDEV, "Invalid cross-device link")

        monkeypatch.setattr(os, "replace", no_rename)
        promote_file(src, dst)

        assert dst.read_bytes() == b"video"
        assert not src.exists()

    def test_missing_source(self, temp_dir: Path):
        """A missing source should raise FileOperationError."""
        with pytest.raises(FileOperationError, match="not_found"):
            promote_file(temp_dir / "ghost.mp4", temp_dir / "out" / "ghost.mp4")


class TestSwapIntoPlace:
    """Tests for swap_into_place."""

    def test_new_destination(self, temp_dir: Path):
        """Should copy into an empty destination and keep the source."""
        src = temp_dir / "incoming.mp4"
        src.write_bytes(b"new")
        dst = temp_dir / "lib" / "movie.mp4"
        dst.parent.mkdir()

        result = swap_into_place(src, dst)

        assert result.destination == dst
        assert result.previous is None
        assert dst.read_bytes() == b"new"
        assert src.exists()
        assert not (dst.parent / "movie.mp4.new").exists()

    def test_replaces_and_keeps_old(self, temp_dir: Path):
        """The replaced file should be kept as .old."""
        src = temp_dir / "incoming.mp4"
        src.write_bytes(b"new")
        dst = temp_dir / "movie.mp4"
        dst.write_bytes(b"old")

        result = swap_into_place(src, dst)

        assert result.previous == temp_dir / "movie.mp4.old"
        assert result.previous.read_bytes() == b"old"
        assert dst.read_bytes() == b"new"

    def test_failed_copy_leaves_original(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """If the copy fails the original must stay where it was."""
        src = temp_dir / "incoming.mp4"
        src.write_bytes(b"new")
        dst = temp_dir / "movie.mp4"
        dst.write_bytes(b"old")

        def full_disk(a, b):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(shutil, "copyfile", full_disk)
        with pytest.raises(FileOperationError, match="disk_space"):
            swap_into_place(src, dst)

        assert dst.read_bytes() == b"old"
        assert not (temp_dir / "movie.mp4.old").exists()
