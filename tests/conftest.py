"""Shared test fixtures for the movie collection."""

import shutil
import stat
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from movie_collection.catalog import CatalogStore
from movie_collection.config import (
    EncoderConfig,
    MovieCollectionConfig,
    PathsConfig,
    QueuesConfig,
)
from movie_collection.db import ConnectionPool
from movie_collection.jobs import JobBroker
from movie_collection.queue import QueueIndexEngine

FAKE_ENCODER_SOURCE = """\
#!{python}
import shutil
import sys

args = sys.argv[1:]
src = args[args.index("-i") + 1]
dst = args[args.index("-o") + 1]
preset = args[args.index("--preset") + 1]
print("Encoding " + src + " with preset " + preset, flush=True)
for pct in (0, 50, 100):
    print("Encoding: task 1 of 1, %d.00 %%" % pct, flush=True)
print("warning on stderr", file=sys.stderr, flush=True)
if {exit_code}:
    sys.exit({exit_code})
shutil.copyfile(src, dst)
print("Encode done!", flush=True)
"""

SLOW_ENCODER_SOURCE = """\
#!{python}
import time

print("Starting slow encode", flush=True)
while True:
    time.sleep(0.1)
"""


def _write_script(path: Path, source: str) -> Path:
    path.write_text(source, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def fake_encoder(temp_dir: Path) -> Path:
    """Executable that copies -i to -o and prints encoder-like output."""
    return _write_script(
        temp_dir / "fake_encoder",
        FAKE_ENCODER_SOURCE.format(python=sys.executable, exit_code=0),
    )


@pytest.fixture
def failing_encoder(temp_dir: Path) -> Path:
    """Executable that prints some output and exits with status 3."""
    return _write_script(
        temp_dir / "failing_encoder",
        FAKE_ENCODER_SOURCE.format(python=sys.executable, exit_code=3),
    )


@pytest.fixture
def slow_encoder(temp_dir: Path) -> Path:
    """Executable that never finishes on its own."""
    return _write_script(
        temp_dir / "slow_encoder", SLOW_ENCODER_SOURCE.format(python=sys.executable)
    )


@pytest.fixture
def config(temp_dir: Path, fake_encoder: Path) -> MovieCollectionConfig:
    """Configuration with every library directory under temp_dir."""
    paths = PathsConfig(
        movies_root=temp_dir / "movies",
        television_root=temp_dir / "television",
        unwatched_dir=temp_dir / "television" / "unwatched",
        work_dir=temp_dir / "dvdrip",
        log_archive_dir=temp_dir / "tmp_avi",
    )
    paths.movies_root.mkdir(parents=True)
    paths.television_root.mkdir(parents=True)

    return MovieCollectionConfig(
        database_path=temp_dir / "library.db",
        paths=paths,
        encoder=EncoderConfig(executable=str(fake_encoder), preset="Android 480p30"),
        queues=QueuesConfig(poll_interval=0.05),
    )


@pytest.fixture
def pool(config: MovieCollectionConfig):
    """Initialized connection pool on a file database."""
    connection_pool = ConnectionPool(config.database_path)
    connection_pool.initialize()
    yield connection_pool
    connection_pool.close()


@pytest.fixture
def catalog(pool: ConnectionPool) -> CatalogStore:
    return CatalogStore(pool)


@pytest.fixture
def engine(catalog: CatalogStore) -> QueueIndexEngine:
    return QueueIndexEngine(catalog, list_workers=4)


@pytest.fixture
def broker(pool: ConnectionPool) -> JobBroker:
    return JobBroker(pool, consumer_id="test-host:1")


@pytest.fixture
def make_media(config: MovieCollectionConfig) -> Callable[..., Path]:
    """Factory creating small media files.

    Relative names land in the movies root; absolute paths are used as is.
    """

    def _make(name: str | Path, content: bytes = b"media") -> Path:
        path = Path(name)
        if not path.is_absolute():
            path = config.paths.movies_root / path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make
