"""Pydantic models for the render cache."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OutputKind(str, Enum):
    """Artifact formats the renderer can produce."""

    ascii = "ascii"
    png = "png"
    svg = "svg"

    @property
    def flag(self) -> str:
        """Renderer format selector, e.g. ``-tsvg``."""
        return f"-t{self.value}"

    @property
    def is_binary(self) -> bool:
        return self is OutputKind.png


class CacheNamespace(str, Enum):
    """Logical sub-namespaces sharing one cache key."""

    ascii = "ascii"
    png = "png"
    svg = "svg"
    map = "map"
    ts = "ts"

    @classmethod
    def for_kind(cls, kind: OutputKind) -> CacheNamespace:
        return cls(kind.value)


class CacheEntryKey(BaseModel):
    """A cache key tagged with the namespace it addresses."""

    model_config = ConfigDict(frozen=True)

    namespace: CacheNamespace
    key: str

    @property
    def storage_key(self) -> str:
        return f"{self.namespace.value}-{self.key}"


class CacheRecord(BaseModel):
    """Everything cached for one (kind, key) pair."""

    kind: OutputKind
    key: str
    artifact: str
    image_map: str | None = None
    accessed_at: int | None = None  # epoch milliseconds

    @property
    def is_complete(self) -> bool:
        """PNG records need their paired image map to count as a full hit."""
        return self.kind is not OutputKind.png or self.image_map is not None
