"""Shared test fixtures for plantcache."""

import stat
import sys
from pathlib import Path

import pytest

from plantcache.cache.memory import MemoryCacheStore
from plantcache.config.models import PlantCacheConfig, RendererSettings

SAMPLE_SOURCE = "@startuml\nA->B\n@enduml"

# Stands in for the PlantUML executable. Behaviour is steered through
# FAKE_* environment variables; every launch appends its argv and cwd to
# FAKE_LOG so tests can count process launches.
_FAKE_RENDERER = '''\
import os
import sys

args = sys.argv[1:]

# FAKE_CHATTY=N writes N bytes to both stdout and stderr before reading stdin.
chatty = int(os.environ.get("FAKE_CHATTY", "0"))
if chatty:
    sys.stdout.buffer.write(b"#" * chatty)
    sys.stdout.flush()
    sys.stderr.write("!" * chatty)
    sys.stderr.flush()

source = sys.stdin.buffer.read().decode("utf-8")

log = os.environ.get("FAKE_LOG")
if log:
    with open(log, "a", encoding="utf-8") as f:
        f.write(" ".join(args) + "\\t" + os.getcwd() + "\\n")

stderr = os.environ.get("FAKE_STDERR", "")
if stderr:
    sys.stderr.write(stderr)
    sys.stderr.flush()

if os.environ.get("FAKE_EMPTY"):
    out = b""
elif "-pipemap" in args:
    out = b'<map id="plantuml_map" name="plantuml_map">\\n<area shape="rect" href="https://example.com" coords="0,0,10,10">\\n</map>\\n'
elif "-tsvg" in args:
    body = source.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    out = ('<?xml version="1.0" encoding="UTF-8" standalone="no"?><svg xmlns="http://www.w3.org/2000/svg"><text>' + body + "</text></svg>").encode("utf-8")
elif "-tpng" in args:
    out = b"\\x89PNG\\r\\n\\x1a\\n\\x00\\x00\\x00\\rIHDRfake-image-data"
elif "-tascii" in args:
    out = ("     ,-.          ,-.\\n     |A|          |B|\\n     `-'          `-'\\n" + "\\u2500" * 3 + "\\n").encode("utf-8")
else:
    out = b""

sys.stdout.buffer.write(out)
sys.stdout.flush()
sys.exit(int(os.environ.get("FAKE_EXIT", "0")))
'''


@pytest.fixture
def sample_source():
    return SAMPLE_SOURCE


@pytest.fixture
def memory_store():
    return MemoryCacheStore()


@pytest.fixture
def sample_config():
    return PlantCacheConfig()


@pytest.fixture
def fake_renderer(tmp_path) -> Path:
    """An executable script that behaves like ``plantuml -pipe``."""
    script = tmp_path / "bin" / "plantuml"
    script.parent.mkdir()
    script.write_text(f"#!{sys.executable}\n{_FAKE_RENDERER}", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def renderer_log(tmp_path, monkeypatch) -> Path:
    log = tmp_path / "launches.log"
    monkeypatch.setenv("FAKE_LOG", str(log))
    for var in ("FAKE_EXIT", "FAKE_STDERR", "FAKE_EMPTY", "FAKE_CHATTY"):
        monkeypatch.delenv(var, raising=False)
    return log


@pytest.fixture
def fake_settings(fake_renderer) -> RendererSettings:
    return RendererSettings(local_jar=str(fake_renderer))


@pytest.fixture
def launches(renderer_log):
    """Callable returning one ``argv<TAB>cwd`` line per fake renderer launch."""

    def _read() -> list[str]:
        if not renderer_log.exists():
            return []
        return renderer_log.read_text(encoding="utf-8").splitlines()

    return _read
