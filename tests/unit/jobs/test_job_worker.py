"""Tests for JobWorker."""

import threading
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from movie_collection.config import MovieCollectionConfig
from movie_collection.exceptions import FileOperationError, ProcessError
from movie_collection.executor import EncoderExecutor
from movie_collection.jobs import JobBroker, JobPublisher, JobWorker
from movie_collection.queue import QueueIndexEngine


def _worker(broker, engine, config, **kwargs) -> JobWorker:
    kwargs.setdefault("stop_when_empty", True)
    return JobWorker(broker, engine, config, install_signal_handlers=False, **kwargs)


@pytest.fixture
def publisher(broker: JobBroker, config: MovieCollectionConfig) -> JobPublisher:
    return JobPublisher(broker, config)


class TestRun:
    """Tests for the consume loop."""

    def test_empty_queues(self, broker, engine, config):
        """Should return immediately when asked to stop on empty queues."""
        assert _worker(broker, engine, config).run() == 0

    def test_processes_transcode_then_move(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
    ):
        """Should drain both queues and acknowledge every job."""
        publisher.submit_transcode(make_media(temp_dir / "rips" / "heat.mkv"))
        source = make_media(temp_dir / "incoming" / "house_s01_ep01.mp4")
        make_media("house_s01_ep01.mp4")
        publisher.submit_move(source)

        worker = _worker(broker, engine, config)
        assert worker.run() == 2

        assert (config.paths.movies_root / "heat.mp4").exists()
        moved = config.paths.television_root / "house" / "season1" / "house_s01_ep01.mp4"
        assert moved.exists()
        assert broker.depth(config.queues.transcode, include_reserved=True) == 0
        assert broker.depth(config.queues.move, include_reserved=True) == 0

    def test_max_jobs(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
    ):
        """Should stop after max_jobs jobs."""
        publisher.submit_transcode(make_media(temp_dir / "rips" / "a.mkv"))
        publisher.submit_transcode(make_media(temp_dir / "rips" / "b.mkv"))

        assert _worker(broker, engine, config, max_jobs=1).run() == 1
        assert broker.depth(config.queues.transcode) == 1

    def test_recovers_unacked_on_start(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
    ):
        """A job left reserved by a dead worker should be redone."""
        publisher.submit_transcode(make_media(temp_dir / "rips" / "heat.mkv"))
        assert broker.reserve(config.queues.transcode) is not None

        assert _worker(broker, engine, config).run() == 1
        assert (config.paths.movies_root / "heat.mp4").exists()

    def test_failure_propagates_and_leaves_message(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
        failing_encoder: Path,
    ):
        """A failing job should stop the worker without acknowledging."""
        publisher.submit_transcode(make_media(temp_dir / "rips" / "heat.mkv"))
        worker = _worker(
            broker, engine, config, encoder=EncoderExecutor(str(failing_encoder))
        )

        with pytest.raises(ProcessError):
            worker.run()

        assert broker.depth(config.queues.transcode) == 0
        assert broker.depth(config.queues.transcode, include_reserved=True) == 1
        assert broker.recover_unacked(config.queues.transcode) == 1

    def test_shutdown_from_other_thread(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
    ):
        """request_shutdown should end a polling worker."""
        worker = _worker(broker, engine, config, stop_when_empty=False)
        timer = threading.Timer(0.2, worker.request_shutdown)
        timer.start()
        try:
            assert worker.run() == 0
        finally:
            timer.cancel()


class TestProcessDelivery:
    """Tests for handling a single delivery."""

    def test_malformed_payload_discarded(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
    ):
        """A payload that is not a job should be acknowledged and dropped."""
        broker.publish(config.queues.transcode, "{not a job")
        delivery = broker.reserve(config.queues.transcode)

        assert _worker(broker, engine, config).process_delivery(delivery) is True
        assert broker.depth(config.queues.transcode, include_reserved=True) == 0

    def test_interrupted_job_left_for_redelivery(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
        slow_encoder: Path,
    ):
        """A job killed by shutdown should stay unacknowledged."""
        publisher.submit_transcode(make_media(temp_dir / "rips" / "heat.mkv"))
        worker = _worker(broker, engine, config, encoder=EncoderExecutor(str(slow_encoder)))
        delivery = broker.reserve(config.queues.transcode)

        timer = threading.Timer(0.5, worker.request_shutdown)
        timer.start()
        try:
            assert worker.process_delivery(delivery) is False
        finally:
            timer.cancel()

        assert worker.jobs_processed == 0
        assert broker.depth(config.queues.transcode, include_reserved=True) == 1

    def test_other_errors_propagate(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        publisher: JobPublisher,
        make_media: Callable[..., Path],
        temp_dir: Path,
    ):
        """Errors other than an interrupted encode should propagate."""
        source = make_media(temp_dir / "incoming" / "house_s01_ep01.mp4")
        make_media("house_s01_ep01.mp4")
        publisher.submit_move(source)
        worker = _worker(broker, engine, config)
        worker.move_service = MagicMock()
        worker.move_service.run.side_effect = FileOperationError("disk full")
        delivery = broker.reserve(config.queues.move)

        with pytest.raises(FileOperationError):
            worker.process_delivery(delivery)
        assert broker.depth(config.queues.move, include_reserved=True) == 1
