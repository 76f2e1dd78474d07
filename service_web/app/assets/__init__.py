"""
Frontend asset serving.

- tree: read-only asset tree abstraction and its on-disk implementation
- server: the SPA responder (dev-server refusal or bundled with fallback)
"""

from .tree import AssetTree, DirectoryAssetTree, ENTRY_DOCUMENT
from .server import StaticAssetServer, build_static_server

__all__ = [
    "AssetTree",
    "DirectoryAssetTree",
    "ENTRY_DOCUMENT",
    "StaticAssetServer",
    "build_static_server",
]
