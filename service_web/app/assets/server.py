"""
Static asset responder with SPA fallback.
"""

from typing import Optional

from fastapi import Response
from starlette.types import Scope

from shared.config import BaseConfig
from shared.logging import get_logger
from shared.errors import NotFoundError
from .tree import AssetTree, DirectoryAssetTree, ENTRY_DOCUMENT


class StaticAssetServer:
    """Serves the single-page app.

    In development the frontend is served by the Vite dev server, so every
    request here is refused with a pointer to it. Otherwise files are looked
    up in the asset tree, and any path the tree does not know resolves to the
    entry document so client-side routing can handle deep links.
    """

    def __init__(self, tree: Optional[AssetTree], development: bool = False,
                 dev_server_origin: str = "http://localhost:5173"):
        if tree is None and not development:
            raise ValueError("an asset tree is required outside development mode")
        self.tree = tree
        self.development = development
        self.dev_server_origin = dev_server_origin
        self.logger = get_logger("web.static")

    def serve(self, path: str, scope: Scope) -> Response:
        if self.development:
            raise NotFoundError(
                f"Frontend runs on {self.dev_server_origin} in development mode",
                details={"path": path}
            )

        name = path.lstrip("/") or ENTRY_DOCUMENT
        response = self.tree.resolve(name, scope)
        if response is None:
            name = ENTRY_DOCUMENT
            response = self.tree.resolve(ENTRY_DOCUMENT, scope)
            if response is None:
                self.logger.error("Entry document missing from asset tree")
                raise NotFoundError(details={"path": path})

        # Browsers must revalidate the entry document to pick up new deploys
        if name == ENTRY_DOCUMENT:
            response.headers["Cache-Control"] = "no-cache"
        return response


def build_static_server(config: BaseConfig) -> StaticAssetServer:
    """Pick the serving mode once, at startup.

    Raises AssetTreeMissingError when production mode has no bundle to serve.
    """
    if config.is_development:
        return StaticAssetServer(None, development=True, dev_server_origin=config.dev_server_origin)
    return StaticAssetServer(DirectoryAssetTree(config.static_dir), dev_server_origin=config.dev_server_origin)
