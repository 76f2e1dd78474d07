"""
Common plumbing for the upstream HTTP clients.
"""

from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.metrics import MetricsCollector


class UpstreamClient:
    """Owns one connection pool to an upstream API.

    Responses are returned opened in streaming mode; callers (the reshapers)
    decide whether to stream or buffer the body and must close them.
    """

    service = "Upstream"
    metric_label = "upstream"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.metrics = metrics
        self.logger = get_logger(f"web.{self.metric_label}_client")
        # Cover Art Archive redirects image requests to its storage host
        self._client = httpx.AsyncClient(
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    async def _get(self, url: str, timeout: float, params: Optional[Dict[str, Any]] = None,
                   context: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Send a GET and return the response with its body still unread."""
        context = context or {}
        request = self._client.build_request("GET", url, params=params, timeout=timeout)

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            self._record("error")
            self.logger.error(
                f"Error fetching from {self.service}",
                url=str(request.url),
                error=str(exc),
                **context
            )
            raise ExternalServiceError(
                service=self.service,
                message="upstream request failed",
                details=context
            ) from exc

        self._record(str(response.status_code))
        self.logger.debug(
            f"{self.service} responded",
            url=str(request.url),
            status_code=response.status_code,
            **context
        )
        return response

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.record_upstream_request(self.metric_label, status)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
