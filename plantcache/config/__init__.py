from .loader import load_config
from .models import (
    CacheSettings,
    PlantCacheConfig,
    RendererSettings,
)

__all__ = [
    "CacheSettings",
    "PlantCacheConfig",
    "RendererSettings",
    "load_config",
]
