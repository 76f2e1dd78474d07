"""
Unit tests for the MusicBrainz and Cover Art Archive clients.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_web.app.adapters import CoverArtClient, MusicBrainzClient, build_user_agent
from service_web.app.ratelimit import RateGate
from shared.errors import ExternalServiceError
from shared.metrics import MetricsCollector


MBID = "b84ee12a-09ef-421b-82de-0441a926375b"


class TestMusicBrainzClient:
    """Test cases for MusicBrainzClient."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("web")

    @pytest.fixture
    def rate_gate(self):
        gate = MagicMock(spec=RateGate)
        gate.acquire = AsyncMock(return_value=0.0)
        return gate

    def _client(self, transport, rate_gate, metrics=None):
        return MusicBrainzClient(
            "https://musicbrainz.test/ws/2/",
            rate_gate,
            build_user_agent("1.2.3", "https://mdlabels.test"),
            metrics=metrics,
            transport=transport,
        )

    @pytest.mark.asyncio
    async def test_search_builds_request(self, make_transport, recorded_requests, rate_gate):
        payload = {"count": 1, "releases": [{"id": MBID, "title": "Blue Train"}]}
        client = self._client(make_transport(lambda request: httpx.Response(200, json=payload)), rate_gate)

        response = await client.search("blue train", 5)
        body = await response.aread()
        await response.aclose()

        assert json.loads(body) == payload
        request = recorded_requests[0]
        assert request.method == "GET"
        assert request.url.path == "/ws/2/release/"
        assert request.url.params["query"] == "blue train"
        assert request.url.params["fmt"] == "json"
        assert request.url.params["limit"] == "5"
        assert request.headers["User-Agent"] == "mdlabels/1.2.3 ( https://mdlabels.test )"
        assert request.extensions["timeout"]["read"] == 10.0
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_waits_on_rate_gate(self, make_transport, rate_gate):
        client = self._client(make_transport(lambda request: httpx.Response(200, json={})), rate_gate)

        response = await client.search("miles", 10)
        await response.aclose()

        rate_gate.acquire.assert_awaited_once()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_non_success_status_is_returned_untouched(self, make_transport, rate_gate, metrics):
        client = self._client(make_transport(lambda request: httpx.Response(503)), rate_gate, metrics)

        response = await client.search("miles", 10)
        await response.aclose()

        assert response.status_code == 503
        assert metrics.registry.get_sample_value(
            "upstream_requests_total", {"upstream": "musicbrainz", "status": "503"}
        ) == 1.0
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_raises_external_service_error(self, make_transport, rate_gate, metrics):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(make_transport(fail), rate_gate, metrics)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.search("miles", 10)

        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"query": "miles"}
        assert metrics.registry.get_sample_value(
            "upstream_requests_total", {"upstream": "musicbrainz", "status": "error"}
        ) == 1.0
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_through_real_gate_records_wait(self, make_transport, metrics):
        gate = RateGate(min_interval=0.01)
        client = self._client(make_transport(lambda request: httpx.Response(200, json={})), gate, metrics)

        for _ in range(2):
            response = await client.search("miles", 10)
            await response.aclose()

        assert metrics.registry.get_sample_value(
            "rate_gate_wait_seconds_count", {"upstream": "musicbrainz"}
        ) == 2.0
        await client.aclose()


class TestCoverArtClient:
    """Test cases for CoverArtClient."""

    @pytest.fixture
    def image(self):
        return b"\x89PNG\r\n\x1a\nfake"

    @pytest.mark.asyncio
    async def test_front_image_url_and_timeout(self, make_transport, recorded_requests, image):
        transport = make_transport(
            lambda request: httpx.Response(200, content=image, headers={"Content-Type": "image/png"})
        )
        client = CoverArtClient("https://coverart.test", transport=transport)

        response = await client.front_image(MBID)
        body = await response.aread()
        await response.aclose()

        assert body == image
        assert recorded_requests[0].url.path == f"/release/{MBID}/front"
        assert recorded_requests[0].extensions["timeout"]["read"] == 10.0
        await client.aclose()

    @pytest.mark.asyncio
    async def test_front_thumbnail_uses_longer_timeout(self, make_transport, recorded_requests, image):
        client = CoverArtClient(
            "https://coverart.test",
            transport=make_transport(lambda request: httpx.Response(200, content=image)),
        )

        response = await client.front_thumbnail(MBID)
        await response.aclose()

        assert recorded_requests[0].url.path == f"/release/{MBID}/front-500"
        assert recorded_requests[0].extensions["timeout"]["read"] == 15.0
        await client.aclose()

    @pytest.mark.asyncio
    async def test_release_metadata_url(self, make_transport, recorded_requests):
        client = CoverArtClient(
            "https://coverart.test",
            transport=make_transport(lambda request: httpx.Response(200, json={"images": []})),
        )

        response = await client.release_metadata(MBID)
        await response.aclose()

        assert recorded_requests[0].url.path == f"/release/{MBID}"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_identifier_is_percent_encoded(self, make_transport, recorded_requests):
        client = CoverArtClient(
            "https://coverart.test",
            transport=make_transport(lambda request: httpx.Response(404)),
        )

        response = await client.front_image("a b/c")
        await response.aclose()

        assert recorded_requests[0].url.raw_path == b"/release/a%20b%2Fc/front"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_redirect_to_image_host_is_followed(self, make_transport, recorded_requests, image):
        def handler(request):
            if request.url.host == "coverart.test":
                return httpx.Response(307, headers={"Location": "https://images.test/front.jpg"})
            return httpx.Response(200, content=image, headers={"Content-Type": "image/jpeg"})

        client = CoverArtClient("https://coverart.test", transport=make_transport(handler))

        response = await client.front_image(MBID)
        body = await response.aread()
        await response.aclose()

        assert response.status_code == 200
        assert body == image
        assert [r.url.host for r in recorded_requests] == ["coverart.test", "images.test"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises_external_service_error(self, make_transport):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = CoverArtClient("https://coverart.test", transport=make_transport(slow))

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.front_thumbnail(MBID)

        assert exc_info.value.details == {"mbid": MBID}
        await client.aclose()
