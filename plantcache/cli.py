"""CLI entry point for plantcache."""

from __future__ import annotations

import asyncio
import base64
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from plantcache import encoding
from plantcache.cache import CacheStore, MemoryCacheStore, OutputKind, RenderCache, SQLiteCacheStore
from plantcache.config import PlantCacheConfig, load_config
from plantcache.config.loader import DEFAULT_CONFIG_TEMPLATE
from plantcache.errors import PlantCacheError
from plantcache.orchestrator import RenderOrchestrator
from plantcache.paths import PathContext
from plantcache.presentation import HtmlPresenter

app = typer.Typer(
    name="plantcache",
    help="Render PlantUML diagrams locally, with a persistent content-keyed cache.",
)

config_app = typer.Typer(help="Manage plantcache configuration.")
app.add_typer(config_app, name="config")

cache_app = typer.Typer(help="Inspect and prune the render cache.")
app.add_typer(cache_app, name="cache")

# Global state
_config: PlantCacheConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> PlantCacheConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to plantcache.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    logging.basicConfig(level=_LOG_LEVELS[_config.log_level])


def _open_store(cfg: PlantCacheConfig) -> CacheStore:
    if cfg.cache.backend == "memory":
        return MemoryCacheStore()
    return SQLiteCacheStore(cfg.cache.path)


def _open_sqlite(cfg: PlantCacheConfig) -> SQLiteCacheStore:
    if cfg.cache.backend != "sqlite":
        rprint("[yellow]The memory cache backend keeps nothing between runs.[/yellow]")
        raise typer.Exit(1)
    return SQLiteCacheStore(cfg.cache.path)


def _parse_kind(fmt: str) -> OutputKind:
    try:
        return OutputKind(fmt.lower())
    except ValueError:
        rprint(f"[red]Error:[/red] Invalid format '{fmt}'. Choose svg, png, or ascii.")
        raise typer.Exit(1)


@app.command()
def render(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="PlantUML source file"),
    fmt: str = typer.Option("svg", "--format", "-f", help="Output format: svg, png, or ascii"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write output here instead of stdout"),
    as_html: bool = typer.Option(False, "--html", help="Emit an HTML fragment instead of the raw artifact"),
) -> None:
    """Render a diagram, serving it from the cache when possible."""
    cfg = _get_config()
    kind = _parse_kind(fmt)
    source = file.read_text(encoding="utf-8")

    store = _open_store(cfg)
    orchestrator = RenderOrchestrator(
        store,
        cfg.renderer,
        paths=PathContext(cfg.base_dir),
        presenter=HtmlPresenter(),
    )
    fragments: list[str] = []
    try:
        result = asyncio.run(
            orchestrator.render(kind, source, target=fragments, document=file.resolve())
        )
    except PlantCacheError as e:
        rprint(f"[red]Render failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        if isinstance(store, SQLiteCacheStore):
            store.close()

    if as_html:
        payload: str | bytes = "\n".join(fragments)
    elif kind.is_binary:
        payload = base64.b64decode(result.artifact)
    else:
        payload = result.artifact

    if output is None:
        if isinstance(payload, bytes):
            rprint("[red]Error:[/red] PNG output needs --output or --html.")
            raise typer.Exit(1)
        typer.echo(payload, nl=False)
        return

    if isinstance(payload, bytes):
        output.write_bytes(payload)
    else:
        output.write_text(payload, encoding="utf-8")
    origin = "cache" if result.cached else "renderer"
    rprint(f"[green]Wrote[/green] {output} [dim](from {origin})[/dim]")


@app.command()
def encode(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="PlantUML source file"),
) -> None:
    """Print the cache key for a diagram."""
    typer.echo(encoding.encode(file.read_text(encoding="utf-8")))


# ---------------------------------------------------------------------------
# cache commands
# ---------------------------------------------------------------------------


@cache_app.command("stats")
def cache_stats() -> None:
    """Show entry counts per cache namespace."""
    cfg = _get_config()
    store = _open_sqlite(cfg)
    try:
        counts = asyncio.run(store.stats())
    finally:
        store.close()

    table = Table(title=f"Render cache ({store.db_path})")
    table.add_column("Namespace", style="cyan")
    table.add_column("Entries", justify="right")
    for namespace, count in counts.items():
        table.add_row(namespace, str(count))
    rprint(table)


@cache_app.command("prune")
def cache_prune(
    older_than_days: int = typer.Option(30, "--older-than-days", min=0, help="Evict entries not accessed for this many days"),
) -> None:
    """Evict diagrams whose last access is older than the cutoff."""
    cfg = _get_config()
    store = _open_sqlite(cfg)
    now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    cutoff_ms = now_ms - older_than_days * 86_400_000
    try:
        evicted = asyncio.run(store.prune(cutoff_ms))
    finally:
        store.close()
    rprint(f"[green]Pruned[/green] {len(evicted)} diagram(s)")


@cache_app.command("get")
def cache_get(
    key: str = typer.Argument(..., help="Cache key (see `plantcache encode`)"),
    fmt: str = typer.Option("svg", "--format", "-f", help="Output format: svg, png, or ascii"),
    show_source: bool = typer.Option(False, "--source", help="Also print the diagram source the key encodes"),
) -> None:
    """Show what the cache holds for a key."""
    cfg = _get_config()
    kind = _parse_kind(fmt)
    store = _open_sqlite(cfg)
    try:
        record = asyncio.run(RenderCache(store).lookup(kind, key))
    finally:
        store.close()

    if record is None:
        rprint(f"[yellow]No cached {kind.value} for[/yellow] {escape(key)}")
        raise typer.Exit(1)

    rprint(f"[bold]{kind.value}[/bold] {escape(key)}: {len(record.artifact)} chars")
    if kind is OutputKind.png:
        state = "missing" if record.image_map is None else f"{len(record.image_map)} chars"
        rprint(f"[dim]Image map:[/dim] {state}")
    if record.accessed_at is not None:
        seen = datetime.fromtimestamp(record.accessed_at / 1000, tz=timezone.utc)
        rprint(f"[dim]Last access:[/dim] {seen.isoformat()}")
    if show_source:
        try:
            source = encoding.decode(key)
        except ValueError as e:
            rprint(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1)
        rprint(Syntax(source, "text"))


# ---------------------------------------------------------------------------
# config commands
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default plantcache.yaml in current directory."""
    target = Path("plantcache.yaml")
    if target.exists() and not force:
        rprint("[yellow]plantcache.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
