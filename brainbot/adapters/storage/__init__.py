"""Storage adapters — JSON files on local disk."""

from brainbot.adapters.storage.json_store import JsonEntryStore, JsonStorage, cosine_similarity

__all__ = [
    "JsonEntryStore",
    "JsonStorage",
    "cosine_similarity",
]
