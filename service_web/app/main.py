"""
Web proxy service for mdlabels.

Forwards the label designer's API calls to MusicBrainz and the Cover Art
Archive and serves the built single-page app.
"""

from typing import Optional

import httpx
from fastapi import Request

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import AssetTreeMissingError
from shared.logging import get_logger
from .adapters import CoverArtClient, MusicBrainzClient, build_user_agent
from .assets import StaticAssetServer, build_static_server
from .domain import ApiHandler
from .ratelimit import RateGate


class WebService(BaseService):
    """API proxy + SPA host.

    Collaborators can be injected for tests: a rate gate, a static server,
    and httpx transports standing in for the two upstream APIs.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        rate_gate: Optional[RateGate] = None,
        static_server: Optional[StaticAssetServer] = None,
        musicbrainz_transport: Optional[httpx.AsyncBaseTransport] = None,
        coverart_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__("web", config)

        self.rate_gate = rate_gate or RateGate(self.config.search_min_interval)
        self.musicbrainz_client = MusicBrainzClient(
            self.config.musicbrainz_url,
            self.rate_gate,
            build_user_agent(self.config.app_version, self.config.musicbrainz_contact),
            timeout=self.config.search_timeout,
            metrics=self.metrics,
            transport=musicbrainz_transport,
        )
        self.coverart_client = CoverArtClient(
            self.config.coverart_url,
            timeout=self.config.artwork_timeout,
            base64_timeout=self.config.artwork_base64_timeout,
            metrics=self.metrics,
            transport=coverart_transport,
        )
        self.api_handler = ApiHandler(self.musicbrainz_client, self.coverart_client, self.build_info)
        self.static_server = static_server or build_static_server(self.config)

        self._setup_web_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.web_service = self

    @property
    def build_info(self):
        return {
            "version": self.config.app_version,
            "buildTime": self.config.build_time,
            "gitCommit": self.config.git_commit,
        }

    def _setup_web_routes(self):
        """API proxy routes, then the static catch-all (must stay last)."""

        @self.app.get("/api/{api_path:path}")
        async def api_proxy(request: Request):
            return await self.api_handler.handle(request)

        # Sync handler: FastAPI runs it in the threadpool, off the event loop
        @self.app.api_route("/{asset_path:path}", methods=["GET", "HEAD"])
        def static_assets(asset_path: str, request: Request):
            return self.static_server.serve(asset_path, request.scope)

    async def on_shutdown(self):
        await self.musicbrainz_client.aclose()
        await self.coverart_client.aclose()


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = WebService(config)
    return service.app


def main():
    config = get_config("web")
    try:
        service = WebService(config)
    except AssetTreeMissingError as exc:
        get_logger("web").critical("Failed to load frontend assets", error=exc.message, **exc.details)
        raise SystemExit(1)

    service.run()
    service.logger.info("Server stopped")


if __name__ == "__main__":
    main()
