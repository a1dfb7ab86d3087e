"""Ordered playback/processing queue over the catalog."""

from movie_collection.queue.engine import QueueIndexEngine

__all__ = ["QueueIndexEngine"]
