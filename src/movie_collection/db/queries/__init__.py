"""Query functions for the movie collection database.

Every function takes an open sqlite3 connection and leaves transaction
control to the caller.
"""

from movie_collection.db.queries.collection import (
    TRACKED_TABLES,
    delete_collection_entry,
    fix_collection_show_ids,
    get_collection_after,
    get_collection_entry,
    get_collection_index,
    get_collection_index_match,
    get_collection_path,
    get_episode,
    get_episode_keys,
    get_last_modified,
    get_show,
    insert_collection_entry,
    search_collection,
    search_collection_listing,
    upsert_episode,
    upsert_show,
)
from movie_collection.db.queries.messages import (
    count_messages,
    delete_message,
    insert_message,
    release_reserved_messages,
    reserve_next_message,
)
from movie_collection.db.queries.queue import (
    delete_queue_row,
    get_max_queue_index,
    get_queue_after,
    get_queue_positions,
    get_queue_rows,
    insert_queue_row,
    list_queue,
    list_queued_tv_shows,
    shift_queue_positions,
)

__all__ = [
    # Catalog
    "TRACKED_TABLES",
    "delete_collection_entry",
    "fix_collection_show_ids",
    "get_collection_after",
    "get_collection_entry",
    "get_collection_index",
    "get_collection_index_match",
    "get_collection_path",
    "get_last_modified",
    "insert_collection_entry",
    "search_collection",
    "search_collection_listing",
    # Shows / episodes
    "get_episode",
    "get_episode_keys",
    "get_show",
    "upsert_episode",
    "upsert_show",
    # Queue
    "delete_queue_row",
    "get_max_queue_index",
    "get_queue_after",
    "get_queue_positions",
    "get_queue_rows",
    "insert_queue_row",
    "list_queue",
    "list_queued_tv_shows",
    "shift_queue_positions",
    # Job messages
    "count_messages",
    "delete_message",
    "insert_message",
    "release_reserved_messages",
    "reserve_next_message",
]
