"""plantcache — local PlantUML rendering with a persistent, content-keyed cache."""

from plantcache.errors import ConfigurationError, LaunchError, PlantCacheError, RenderError

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "LaunchError",
    "PlantCacheError",
    "RenderError",
    "__version__",
]
