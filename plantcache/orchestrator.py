"""Cache-first rendering of PlantUML diagrams."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from plantcache import encoding
from plantcache.cache.accessor import RenderCache
from plantcache.cache.base import CacheStore
from plantcache.cache.models import OutputKind
from plantcache.config.models import RendererSettings
from plantcache.invoker import RenderInvoker
from plantcache.paths import PathContext
from plantcache.presentation import Presenter, Target

logger = logging.getLogger(__name__)


class RenderResult(BaseModel):
    """The artifact served for one render call."""

    kind: OutputKind
    key: str
    artifact: str
    image_map: str | None = None
    cached: bool = False


class RenderOrchestrator:
    """Serves diagrams from the cache, rendering and storing them on a miss.

    Cache hits are unconditional: a stored artifact is served even if the
    renderer settings changed since it was written. A PNG whose image map
    is missing counts as a miss and is rendered again. Render failures
    propagate unchanged and leave the cache untouched.
    """

    def __init__(
        self,
        store: CacheStore,
        settings: RendererSettings,
        paths: PathContext | None = None,
        presenter: Presenter | None = None,
        invoker: RenderInvoker | None = None,
        cache: RenderCache | None = None,
    ) -> None:
        self.paths = paths or PathContext()
        self.cache = cache or RenderCache(store)
        self.invoker = invoker or RenderInvoker(settings)
        self.presenter = presenter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ascii(
        self, source: str, target: Target | None = None, document: str | Path | None = None
    ) -> RenderResult:
        return await self.render(OutputKind.ascii, source, target, document)

    async def png(
        self, source: str, target: Target | None = None, document: str | Path | None = None
    ) -> RenderResult:
        return await self.render(OutputKind.png, source, target, document)

    async def svg(
        self, source: str, target: Target | None = None, document: str | Path | None = None
    ) -> RenderResult:
        return await self.render(OutputKind.svg, source, target, document)

    async def render(
        self,
        kind: OutputKind,
        source: str,
        target: Target | None = None,
        document: str | Path | None = None,
    ) -> RenderResult:
        key = encoding.encode(source)

        record = await self.cache.lookup(kind, key)
        if record is not None and record.is_complete:
            logger.debug("Cache hit for %s-%s", kind.value, key)
            result = RenderResult(
                kind=kind,
                key=key,
                artifact=record.artifact,
                image_map=record.image_map,
                cached=True,
            )
            self._present(result, target)
            await self.cache.touch(key)
            return result

        if record is not None:
            logger.info("Image map missing for cached PNG %s; rendering again", key)
        else:
            logger.debug("Cache miss for %s-%s", kind.value, key)

        working_dir = self.paths.working_directory(document)
        artifact = await self.invoker.render_artifact(source, kind, working_dir)
        image_map = None
        if kind is OutputKind.png:
            image_map = await self.invoker.render_map(source, working_dir)

        await self.cache.store_render(kind, key, artifact, image_map)
        await self.cache.touch(key)
        logger.info("Rendered and cached %s-%s (%d chars)", kind.value, key, len(artifact))

        result = RenderResult(kind=kind, key=key, artifact=artifact, image_map=image_map)
        self._present(result, target)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _present(self, result: RenderResult, target: Target | None) -> None:
        if self.presenter is None or target is None:
            return
        if result.kind is OutputKind.ascii:
            self.presenter.present_ascii(target, result.artifact)
        elif result.kind is OutputKind.svg:
            self.presenter.present_svg(target, result.artifact)
        else:
            self.presenter.present_image_with_map(
                target, result.artifact, result.image_map or "", result.key
            )
