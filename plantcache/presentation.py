"""Turn rendered artifacts into HTML inserted into a target."""

from __future__ import annotations

import html
import re
from typing import Protocol, runtime_checkable

_XML_DECL = re.compile(r"^\s*<\?xml[^>]*\?>\s*")
_MAP_OPEN = re.compile(r"<map\b[^>]*>", re.IGNORECASE)


@runtime_checkable
class Target(Protocol):
    """Anything rendered HTML can be appended to. A plain list qualifies."""

    def append(self, fragment: str) -> None: ...


@runtime_checkable
class Presenter(Protocol):
    """Displays cached or freshly rendered diagrams."""

    def present_ascii(self, target: Target, text: str) -> None: ...

    def present_svg(self, target: Target, text: str) -> None: ...

    def present_image_with_map(
        self, target: Target, image_base64: str, map_html: str, key: str
    ) -> None: ...


def retarget_map(map_html: str, name: str) -> str:
    """Give the first ``<map>`` element the id/name ``name``.

    PlantUML always names its map ``plantuml_map``; several diagrams on one
    page need distinct names for ``usemap`` to pick the right one.
    """
    return _MAP_OPEN.sub(f'<map id="{name}" name="{name}">', map_html, count=1)


class HtmlPresenter:
    """Presenter that appends HTML fragments to the target."""

    def present_ascii(self, target: Target, text: str) -> None:
        target.append(f'<pre class="plantuml-ascii">{html.escape(text)}</pre>')

    def present_svg(self, target: Target, text: str) -> None:
        target.append(_XML_DECL.sub("", text, count=1))

    def present_image_with_map(
        self, target: Target, image_base64: str, map_html: str, key: str
    ) -> None:
        if not map_html.strip():
            target.append(f'<img src="data:image/png;base64,{image_base64}">')
            return
        target.append(
            f'<img src="data:image/png;base64,{image_base64}" usemap="#{key}">'
        )
        target.append(retarget_map(map_html, key))
