"""Cache store interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Asynchronous string key/value persistence.

    Each call is atomic from the caller's point of view. Nothing spans
    multiple calls.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...
