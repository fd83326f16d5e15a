"""Path context for a render: where the renderer runs and where relative settings resolve."""

from __future__ import annotations

import os
from pathlib import Path


class PathContext:
    """Maps a document location to the renderer's working directory.

    ``base_dir`` is the root that relative document paths are resolved
    against (a vault or project root), and the working directory when no
    document is given.
    """

    def __init__(self, base_dir: str | Path = ".") -> None:
        self._base_dir = Path(base_dir).expanduser()

    def base_path(self) -> str:
        return os.path.abspath(self._base_dir)

    def working_directory(self, document: str | Path | None = None) -> str:
        """Directory containing ``document``, so relative ``!include`` lines resolve.

        With no document the base path is used.
        """
        if document is None:
            return self.base_path()
        doc = Path(document).expanduser()
        if not doc.is_absolute():
            doc = Path(self.base_path()) / doc
        if doc.is_dir():
            return os.path.abspath(doc)
        return os.path.abspath(doc.parent)
