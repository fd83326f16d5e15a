"""Build the command line that launches the local PlantUML renderer."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from plantcache.config.models import RendererSettings
from plantcache.errors import ConfigurationError

logger = logging.getLogger(__name__)

HEADLESS_FLAG = "-Djava.awt.headless=true"
# PlantUML finds Graphviz on PATH by itself when left at this value.
DEFAULT_DOT_PATH = "dot"
_BUNDLE_SUFFIX = ".jar"


class RendererCommand(BaseModel):
    """Executable plus the arguments shared by every invocation kind."""

    model_config = ConfigDict(frozen=True)

    executable: str
    args: tuple[str, ...] = ()

    def argv(self, *extra: str) -> list[str]:
        """Full argument vector with per-invocation flags appended."""
        return [self.executable, *self.args, *extra]


def resolve_executable_path(
    configured: str, base_dir: str | Path, home: str | Path | None = None
) -> str:
    """Expand ``~``, pass absolute paths through, resolve relative ones against ``base_dir``."""
    if not configured.strip():
        raise ConfigurationError("Invalid local jar file: no renderer path configured")

    if configured.startswith("~"):
        home_dir = str(home) if home is not None else str(Path.home())
        resolved = home_dir + configured[1:]
    elif os.path.isabs(configured):
        resolved = configured
    else:
        resolved = os.path.abspath(os.path.join(base_dir, configured))

    if not resolved:
        raise ConfigurationError("Invalid local jar file")
    return resolved


def renderer_options(settings: RendererSettings) -> list[str]:
    """Options understood by PlantUML itself, independent of how it is launched."""
    options = ["-charset", "utf-8"]
    dot_path = settings.dot_path
    if dot_path and dot_path.strip() and dot_path != DEFAULT_DOT_PATH:
        options += ["-graphvizdot", dot_path]
    return options


def resolve_command(
    settings: RendererSettings, base_dir: str | Path, home: str | Path | None = None
) -> RendererCommand:
    """Resolve renderer settings into a launchable command.

    Jar files go through the Java runtime; the headless flag is a JVM option
    and must come before ``-jar``.
    """
    path = resolve_executable_path(settings.local_jar, base_dir, home)
    options = renderer_options(settings)

    if path.endswith(_BUNDLE_SUFFIX):
        command = RendererCommand(
            executable=settings.java_path,
            args=(HEADLESS_FLAG, "-jar", path, *options),
        )
    else:
        command = RendererCommand(executable=path, args=(HEADLESS_FLAG, *options))

    logger.debug("Resolved renderer command: %s", command.argv())
    return command
