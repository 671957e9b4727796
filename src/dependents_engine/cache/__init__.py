"""Cache module — durable registry metadata, read-through on miss."""

from dependents_engine.cache.metadata import MetadataCache, gather_bounded
from dependents_engine.cache.store import (
    INDEX_KEY,
    CacheMiss,
    CacheStore,
    DirectoryStore,
    MemoryStore,
)

__all__ = [
    "INDEX_KEY",
    "CacheMiss",
    "CacheStore",
    "DirectoryStore",
    "MemoryStore",
    "MetadataCache",
    "gather_bounded",
]
