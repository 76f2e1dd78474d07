"""
Read-only asset trees for the bundled frontend.
"""

import stat
from pathlib import Path
from typing import Optional, Protocol

from fastapi import Response
from fastapi.staticfiles import StaticFiles
from starlette.types import Scope

from shared.errors import AssetTreeMissingError

ENTRY_DOCUMENT = "index.html"


class AssetTree(Protocol):
    """Anything that can answer for a file of the built SPA by relative path."""

    def resolve(self, path: str, scope: Scope) -> Optional[Response]:
        """Return a response serving the file, or None when the tree has no such file."""
        ...


class DirectoryAssetTree:
    """Serves a built bundle (e.g. ``mdlabels-ui/dist``) from disk.

    Lookups and responses go through Starlette's ``StaticFiles``, so files
    carry ``ETag``/``Last-Modified``, conditional requests get 304 and HEAD
    sends headers only.
    """

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        if not self.root.is_dir() or not (self.root / ENTRY_DOCUMENT).is_file():
            raise AssetTreeMissingError(str(root))
        self._files = StaticFiles(directory=str(self.root))

    def resolve(self, path: str, scope: Scope) -> Optional[Response]:
        # lookup_path refuses anything that escapes the bundle root
        full_path, stat_result = self._files.lookup_path(path.lstrip("/"))
        if stat_result is None or not stat.S_ISREG(stat_result.st_mode):
            return None
        return self._files.file_response(full_path, stat_result, scope)
