"""
MusicBrainz release search client.
"""

from typing import Optional
import httpx

from shared.metrics import MetricsCollector
from ..ratelimit import RateGate
from .upstream import UpstreamClient


def build_user_agent(version: str, contact: str) -> str:
    """MusicBrainz rejects anonymous clients; identify the proxy and a contact."""
    return f"mdlabels/{version} ( {contact} )"


class MusicBrainzClient(UpstreamClient):
    """Client for the MusicBrainz web service (search role)."""

    service = "MusicBrainz"
    metric_label = "musicbrainz"

    def __init__(
        self,
        base_url: str,
        rate_gate: RateGate,
        user_agent: str,
        timeout: float = 10.0,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, headers={"User-Agent": user_agent}, metrics=metrics, transport=transport)
        self.rate_gate = rate_gate
        self.timeout = timeout

    async def search(self, query: str, limit: int = 10) -> httpx.Response:
        """Search releases; every call passes through the rate gate first."""
        waited = await self.rate_gate.acquire()
        if self.metrics:
            self.metrics.record_rate_gate_wait(self.metric_label, waited)

        params = {"query": query, "fmt": "json", "limit": str(limit)}
        return await self._get(
            f"{self.base_url}/release/",
            self.timeout,
            params=params,
            context={"query": query},
        )
