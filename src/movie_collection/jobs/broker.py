"""Durable named job queues stored in SQLite.

Delivery is at-least-once with explicit acknowledgement: reserve() hands a
message to this consumer, ack() deletes it. A message reserved by a
consumer that died before acknowledging stays reserved until
recover_unacked() returns it to the queue, which the worker does at start.
"""

from __future__ import annotations

import logging
import os
import socket
from dataclasses import dataclass

from movie_collection.core.datetime_utils import utc_now_iso
from movie_collection.db.connection import ConnectionPool, handle_storage_errors
from movie_collection.db.queries import (
    count_messages,
    delete_message,
    insert_message,
    release_reserved_messages,
    reserve_next_message,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """A reserved message awaiting acknowledgement."""

    message_id: int
    queue: str
    payload: str
    delivery_count: int

    @property
    def redelivered(self) -> bool:
        """True when an earlier delivery of this message was never acked."""
        return self.delivery_count > 1


def default_consumer_id() -> str:
    """Identify this process as ``<hostname>:<pid>``."""
    return f"{socket.gethostname()}:{os.getpid()}"


class JobBroker:
    """Publish, reserve and acknowledge messages on named queues."""

    def __init__(self, pool: ConnectionPool, consumer_id: str | None = None) -> None:
        self._pool = pool
        self.consumer_id = consumer_id or default_consumer_id()

    @handle_storage_errors
    def publish(self, queue: str, payload: str) -> int:
        """Append a message to a queue. Returns the message id."""
        with self._pool.transaction() as conn:
            message_id = insert_message(conn, queue, payload, utc_now_iso())
        logger.debug("Published message %d to %s", message_id, queue)
        return message_id

    @handle_storage_errors
    def reserve(self, queue: str) -> Delivery | None:
        """Reserve the oldest ready message on a queue, or None if empty."""
        with self._pool.transaction() as conn:
            row = reserve_next_message(conn, queue, self.consumer_id, utc_now_iso())
        if row is None:
            return None
        delivery = Delivery(
            message_id=row["id"],
            queue=row["queue"],
            payload=row["payload"],
            delivery_count=row["delivery_count"],
        )
        if delivery.redelivered:
            logger.info(
                "Redelivering message %d from %s (delivery %d)",
                delivery.message_id,
                queue,
                delivery.delivery_count,
            )
        return delivery

    @handle_storage_errors
    def ack(self, delivery: Delivery) -> None:
        """Acknowledge a delivery, removing the message for good."""
        with self._pool.transaction() as conn:
            deleted = delete_message(conn, delivery.message_id)
        if not deleted:
            logger.warning(
                "Acknowledged message %d on %s was no longer reserved",
                delivery.message_id,
                delivery.queue,
            )

    @handle_storage_errors
    def recover_unacked(self, queue: str) -> int:
        """Return every reserved message on a queue to the ready state.

        Only safe while no other consumer is working the queue; the worker
        calls it once at start-up.

        Returns:
            Number of messages recovered.
        """
        with self._pool.transaction() as conn:
            recovered = release_reserved_messages(conn, queue)
        if recovered:
            logger.warning("Recovered %d unacknowledged message(s) on %s", recovered, queue)
        return recovered

    @handle_storage_errors
    def depth(self, queue: str, include_reserved: bool = False) -> int:
        """Number of messages waiting on a queue."""
        with self._pool.read_connection() as conn:
            if include_reserved:
                return count_messages(conn, queue)
            return count_messages(conn, queue, "ready")
