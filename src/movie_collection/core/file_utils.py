"""File system helpers for library discovery."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path


def normalize_suffixes(suffixes: Iterable[str]) -> frozenset[str]:
    """Normalize extensions to lowercase with a leading dot."""
    return frozenset(
        (s if s.startswith(".") else f".{s}").lower() for s in suffixes if s
    )


def walk_directory(root_dir: Path, suffixes: Iterable[str]) -> Iterator[Path]:
    """Recursively yield media files under a directory.

    Hidden directories and files are skipped. Traversal order is
    deterministic (sorted at every level).

    Args:
        root_dir: Directory to scan. A missing directory yields nothing.
        suffixes: Accepted extensions, with or without the leading dot.

    Yields:
        Absolute paths of matching files.
    """
    wanted = normalize_suffixes(suffixes)
    if not root_dir.is_dir():
        return

    for root, dirs, files in os.walk(str(root_dir)):
        root_path = Path(root)
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for file_name in sorted(files):
            if file_name.startswith("."):
                continue
            file_path = root_path / file_name
            if file_path.suffix.lower() in wanted:
                yield file_path.absolute()
