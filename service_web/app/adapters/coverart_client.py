"""
Cover Art Archive client.
"""

from typing import Optional
from urllib.parse import quote
import httpx

from shared.metrics import MetricsCollector
from .upstream import UpstreamClient


class CoverArtClient(UpstreamClient):
    """Client for the Cover Art Archive (artwork role)."""

    service = "Cover Art Archive"
    metric_label = "coverart"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        base64_timeout: float = 15.0,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, metrics=metrics, transport=transport)
        self.timeout = timeout
        self.base64_timeout = base64_timeout

    def _release_url(self, mbid: str, suffix: str = "") -> str:
        return f"{self.base_url}/release/{quote(mbid, safe='')}{suffix}"

    async def front_image(self, mbid: str) -> httpx.Response:
        """Full-size front cover."""
        return await self._get(self._release_url(mbid, "/front"), self.timeout, context={"mbid": mbid})

    async def front_thumbnail(self, mbid: str) -> httpx.Response:
        """500px front cover, fetched to be inlined as a data URL."""
        return await self._get(self._release_url(mbid, "/front-500"), self.base64_timeout, context={"mbid": mbid})

    async def release_metadata(self, mbid: str) -> httpx.Response:
        """JSON listing of every image and its thumbnails for a release."""
        return await self._get(self._release_url(mbid), self.timeout, context={"mbid": mbid})
