"""Run the local PlantUML renderer as a child process."""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from pathlib import Path

from plantcache.cache.models import OutputKind
from plantcache.config.models import RendererSettings
from plantcache.errors import LaunchError, RenderError
from plantcache.resolver import RendererCommand, resolve_command

logger = logging.getLogger(__name__)

PIPE_FLAG = "-pipe"
PIPEMAP_FLAG = "-pipemap"


@dataclass
class ProcessResult:
    """Everything a finished renderer process left behind."""

    returncode: int
    stdout: bytes = b""
    stderr: str = ""


def _failure_message(result: ProcessResult, what: str) -> str:
    if result.stderr:
        return result.stderr
    if result.stdout:
        return result.stdout.decode("utf-8", errors="replace")
    return f"{what} exited with code {result.returncode}"


def decode_artifact(result: ProcessResult, kind: OutputKind) -> str:
    """Apply the exit-code policy for artifact renders.

    PNG output is returned even on a non-zero exit: PlantUML draws some
    errors into the image itself.
    """
    if result.returncode == 0:
        if not result.stdout:
            # Usually a missing Graphviz rather than an empty diagram.
            raise RenderError(
                result.stderr or "No output from PlantUML",
                returncode=0,
                stderr=result.stderr,
            )
        return _decode(result.stdout, kind)

    if result.stdout and kind.is_binary:
        logger.warning(
            "PlantUML exited with code %d; using the image it produced", result.returncode
        )
        return _decode(result.stdout, kind)

    raise RenderError(
        _failure_message(result, "PlantUML"),
        returncode=result.returncode,
        stderr=result.stderr,
    )


def decode_map(result: ProcessResult) -> str:
    """Apply the exit-code policy for image-map renders. Empty output is fine."""
    if result.returncode == 0:
        return result.stdout.decode("utf-8", errors="replace")
    raise RenderError(
        _failure_message(result, "PlantUML map generation"),
        returncode=result.returncode,
        stderr=result.stderr,
    )


def _decode(raw: bytes, kind: OutputKind) -> str:
    if kind.is_binary:
        return base64.b64encode(raw).decode("ascii")
    return raw.decode("utf-8", errors="replace")


class RenderInvoker:
    """Spawns PlantUML, feeds it diagram source and collects what it prints.

    The command is re-resolved from settings on every call so configuration
    changes take effect without restarting. Relative renderer paths resolve
    against the working directory the renderer runs in.
    """

    def __init__(self, settings: RendererSettings) -> None:
        self.settings = settings

    def command(self, working_dir: str | Path) -> RendererCommand:
        return resolve_command(self.settings, working_dir)

    async def render_artifact(
        self, source: str, kind: OutputKind, working_dir: str | Path
    ) -> str:
        """Render ``source`` to ``kind``; PNG comes back base64-encoded."""
        argv = self.command(working_dir).argv(kind.flag, PIPE_FLAG)
        result = await self._run(argv, source, working_dir)
        try:
            return decode_artifact(result, kind)
        except RenderError as e:
            logger.warning("PlantUML error (code %s): %s", e.returncode, e)
            raise

    async def render_map(self, source: str, working_dir: str | Path) -> str:
        """Render the clickable image map for ``source``."""
        argv = self.command(working_dir).argv(PIPEMAP_FLAG)
        result = await self._run(argv, source, working_dir)
        try:
            return decode_map(result)
        except RenderError as e:
            logger.warning("PlantUML map generation error (code %s): %s", e.returncode, e)
            raise

    async def _run(
        self, argv: list[str], source: str, working_dir: str | Path
    ) -> ProcessResult:
        command, *args = argv
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(working_dir),
            )
        except OSError as e:
            logger.error("PlantUML execution error: %s", e)
            raise LaunchError(command, e) from e

        try:
            # communicate() writes stdin and drains both pipes concurrently,
            # so a renderer that talks before reading all input cannot deadlock.
            stdout, stderr = await proc.communicate(source.encode("utf-8"))
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise

        return ProcessResult(
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout or b"",
            stderr=(stderr or b"").decode("utf-8", errors="replace"),
        )
