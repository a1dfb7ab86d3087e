"""Job worker consuming the durable job queues.

A single consumer handles one job at a time, across the transcode and
move queues:
- a message is acknowledged only after its handler returns
- handler exceptions propagate and stop the worker; the message stays
  reserved and is recovered on the next start
- SIGTERM/SIGINT request a graceful shutdown; a running encoder is killed
  and its job is left for redelivery
"""

from __future__ import annotations

import logging
import os
import signal
import threading
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError

from movie_collection.exceptions import ProcessError
from movie_collection.jobs.broker import Delivery, JobBroker
from movie_collection.jobs.models import JobKind, TranscodeJob
from movie_collection.jobs.services import MoveJobService, TranscodeJobService
from movie_collection.logging.context import job_context

if TYPE_CHECKING:
    from movie_collection.config.models import MovieCollectionConfig
    from movie_collection.executor.encoder import EncoderExecutor
    from movie_collection.queue.engine import QueueIndexEngine

logger = logging.getLogger(__name__)


class JobWorker:
    """Worker for processing jobs from the queues."""

    def __init__(
        self,
        broker: JobBroker,
        engine: QueueIndexEngine,
        config: MovieCollectionConfig,
        encoder: EncoderExecutor | None = None,
        *,
        stop_when_empty: bool = False,
        max_jobs: int | None = None,
        install_signal_handlers: bool = True,
    ) -> None:
        """Initialize the job worker.

        Args:
            broker: Broker the queues live in.
            engine: Queue engine used by the post-move resync.
            config: Queue names, poll interval and library paths.
            encoder: Encoder for transcode jobs. Defaults to one from config.
            stop_when_empty: Return once every queue is empty instead of
                polling for more work.
            max_jobs: Maximum jobs to process (None = unlimited).
            install_signal_handlers: Install SIGTERM/SIGINT handlers. Only
                possible from the main thread.
        """
        self.broker = broker
        self.config = config
        self.stop_when_empty = stop_when_empty
        self.max_jobs = max_jobs

        self._shutdown = threading.Event()
        self._jobs_processed = 0

        self.transcode_service = TranscodeJobService(
            config, encoder, cancel_requested=self._shutdown.is_set
        )
        self.move_service = MoveJobService(config, engine)

        if install_signal_handlers:
            self._setup_signal_handlers()

    @property
    def queues(self) -> list[str]:
        """Queues consumed, in the order they are polled."""
        return [self.config.queues.transcode, self.config.queues.move]

    @property
    def jobs_processed(self) -> int:
        return self._jobs_processed

    def _setup_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, skipping signal handlers")
            return
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, requesting shutdown...", sig_name)
        self.request_shutdown()

    def request_shutdown(self) -> None:
        """Stop after the current job; a running encoder is killed."""
        self._shutdown.set()

    def _should_continue(self) -> bool:
        if self._shutdown.is_set():
            return False
        if self.max_jobs is not None and self._jobs_processed >= self.max_jobs:
            logger.info("Reached max jobs limit (%d)", self.max_jobs)
            return False
        return True

    def _reserve_next(self) -> Delivery | None:
        for queue in self.queues:
            delivery = self.broker.reserve(queue)
            if delivery is not None:
                return delivery
        return None

    def process_delivery(self, delivery: Delivery) -> bool:
        """Run the job in a delivery and acknowledge it.

        Returns:
            True if the delivery was acknowledged, False if it was left
            unacknowledged because of a shutdown.

        Raises:
            Any error from the job handler; the delivery stays unacknowledged.
        """
        try:
            job = TranscodeJob.from_json(delivery.payload)
        except ValidationError as e:
            # Redelivering a malformed payload can never succeed
            logger.error(
                "Discarding malformed message %d on %s: %s",
                delivery.message_id,
                delivery.queue,
                e,
            )
            self.broker.ack(delivery)
            return True

        with job_context(job.prefix, job.kind.value):
            logger.info("Processing %s job from %s", job.kind.value, delivery.queue)
            try:
                if job.kind is JobKind.TRANSCODE:
                    self.transcode_service.run(job)
                else:
                    self.move_service.run(job)
            except ProcessError:
                if self._shutdown.is_set():
                    logger.warning("Interrupted by shutdown, left for redelivery")
                    return False
                raise

            self.broker.ack(delivery)
            logger.info("Job complete")

        self._jobs_processed += 1
        return True

    def run(self) -> int:
        """Consume jobs until shutdown, a limit, or (optionally) empty queues.

        Returns:
            Number of jobs processed.
        """
        start_time = time.time()
        self._jobs_processed = 0
        logger.info(
            "Starting job worker: PID=%d, queues=%s, consumer=%s",
            os.getpid(),
            ",".join(self.queues),
            self.broker.consumer_id,
        )

        for queue in self.queues:
            self.broker.recover_unacked(queue)

        while self._should_continue():
            delivery = self._reserve_next()
            if delivery is None:
                if self.stop_when_empty:
                    logger.info("Queue is empty")
                    break
                self._shutdown.wait(self.config.queues.poll_interval)
                continue

            self.process_delivery(delivery)

        logger.info(
            "Worker finished: %d job(s) in %.1f seconds",
            self._jobs_processed,
            time.time() - start_time,
        )
        return self._jobs_processed


def run_worker(
    config: MovieCollectionConfig, *, stop_when_empty: bool = False
) -> int:
    """Open the library database and run a worker in this process.

    Returns:
        Number of jobs processed.
    """
    from movie_collection.catalog.store import CatalogStore
    from movie_collection.db.connection import ConnectionPool
    from movie_collection.logging import configure_logging
    from movie_collection.queue.engine import QueueIndexEngine

    configure_logging(config.logging)
    with ConnectionPool(config.database_path) as pool:
        pool.initialize()
        engine = QueueIndexEngine(
            CatalogStore(pool, config.library.list_workers), config.library.list_workers
        )
        worker = JobWorker(
            JobBroker(pool), engine, config, stop_when_empty=stop_when_empty
        )
        return worker.run()
