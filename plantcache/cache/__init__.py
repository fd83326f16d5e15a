"""Render cache: namespaced storage of artifacts, image maps and access times."""

from plantcache.cache.accessor import RenderCache
from plantcache.cache.base import CacheStore
from plantcache.cache.memory import MemoryCacheStore
from plantcache.cache.models import CacheEntryKey, CacheNamespace, CacheRecord, OutputKind
from plantcache.cache.sqlite_store import SQLiteCacheStore

__all__ = [
    "CacheEntryKey",
    "CacheNamespace",
    "CacheRecord",
    "CacheStore",
    "MemoryCacheStore",
    "OutputKind",
    "RenderCache",
    "SQLiteCacheStore",
]
