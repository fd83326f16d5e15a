"""Namespaced access to a CacheStore for rendered diagrams."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from plantcache.cache.base import CacheStore
from plantcache.cache.models import CacheEntryKey, CacheNamespace, CacheRecord, OutputKind

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RenderCache:
    """Reads and writes artifacts, image maps and access timestamps.

    All three live in the same store under one diagram key, separated by
    :class:`CacheNamespace`.
    """

    def __init__(self, store: CacheStore, clock: Callable[[], int] = _now_ms) -> None:
        self.store = store
        self._clock = clock

    async def _get(self, namespace: CacheNamespace, key: str) -> str | None:
        return await self.store.get(CacheEntryKey(namespace=namespace, key=key).storage_key)

    async def _set(self, namespace: CacheNamespace, key: str, value: str) -> None:
        await self.store.set(CacheEntryKey(namespace=namespace, key=key).storage_key, value)

    async def get_artifact(self, kind: OutputKind, key: str) -> str | None:
        return await self._get(CacheNamespace.for_kind(kind), key)

    async def get_map(self, key: str) -> str | None:
        return await self._get(CacheNamespace.map, key)

    async def get_accessed_at(self, key: str) -> int | None:
        raw = await self._get(CacheNamespace.ts, key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring malformed access timestamp for %s: %r", key, raw)
            return None

    async def lookup(self, kind: OutputKind, key: str) -> CacheRecord | None:
        """Fetch the cached artifact with its PNG map and access time, or None on a miss.

        The returned record may be incomplete: a PNG without its map has
        ``image_map=None``. Callers decide how to treat that.
        """
        artifact = await self.get_artifact(kind, key)
        if not artifact:
            return None
        image_map = await self.get_map(key) if kind is OutputKind.png else None
        return CacheRecord(
            kind=kind,
            key=key,
            artifact=artifact,
            image_map=image_map,
            accessed_at=await self.get_accessed_at(key),
        )

    async def store_render(
        self, kind: OutputKind, key: str, artifact: str, image_map: str | None = None
    ) -> None:
        """Persist a fresh render. The artifact is written before its map."""
        await self._set(CacheNamespace.for_kind(kind), key, artifact)
        if kind is OutputKind.png:
            await self._set(CacheNamespace.map, key, image_map or "")

    async def touch(self, key: str) -> int:
        """Record an access. The stored timestamp never moves backwards."""
        now = self._clock()
        previous = await self.get_accessed_at(key)
        if previous is not None and previous > now:
            now = previous
        await self._set(CacheNamespace.ts, key, str(now))
        return now
