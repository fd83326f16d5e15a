"""Exception hierarchy for plantcache."""

from __future__ import annotations


class PlantCacheError(Exception):
    """Base class for every error raised by plantcache."""


class ConfigurationError(PlantCacheError):
    """The renderer settings do not resolve to a usable executable."""


class LaunchError(PlantCacheError):
    """The renderer process could not be started."""

    def __init__(self, command: str, cause: OSError) -> None:
        self.command = command
        super().__init__(f"failed to launch {command!r}: {cause}")
        self.__cause__ = cause


class RenderError(PlantCacheError):
    """The renderer ran but produced no usable output."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
