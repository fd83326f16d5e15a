import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class RendererSettings(BaseModel):
    # local_jar keeps its "~" so it can be resolved per render
    local_jar: str = ""
    dot_path: str = "dot"
    java_path: str = "java"


class CacheSettings(BaseModel):
    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = Field(default="~/.plantcache/cache.db", validate_default=True)

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cache path cannot be empty or whitespace")
        return os.path.expanduser(v)


class PlantCacheConfig(BaseModel):
    renderer: RendererSettings = Field(default_factory=RendererSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    base_dir: str = "."
    log_level: Literal["debug", "info", "warn", "error"] = "info"

    @field_validator("base_dir")
    @classmethod
    def expand_base_dir(cls, v: str) -> str:
        return os.path.expanduser(v)
