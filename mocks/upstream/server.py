"""
Mock MusicBrainz + Cover Art Archive server.

Point the proxy at it for offline development:

    MUSICBRAINZ_URL=http://localhost:8090/ws/2 COVERART_URL=http://localhost:8090

Every request is counted per endpoint so tests can assert how many calls
reached the upstream.
"""

import base64
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import FastAPI, Query, Response
from fastapi.responses import JSONResponse

from shared.logging import get_logger


# 1x1 transparent PNG
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@dataclass
class MockRelease:
    """Mock MusicBrainz release with optional front cover."""
    id: str
    title: str
    artist: str
    date: str = ""
    image: Optional[bytes] = PLACEHOLDER_PNG
    content_type: str = "image/png"


class MockUpstreamServer:
    """Mock upstream implementation."""

    def __init__(self, releases: Optional[List[MockRelease]] = None, port: int = 8090):
        self.port = port
        self.logger = get_logger("mock.upstream")
        self.app = FastAPI(title="Mock MusicBrainz / Cover Art Archive", version="1.0.0")

        self.releases: Dict[str, MockRelease] = {}
        for release in releases if releases is not None else self._default_releases():
            self.releases[release.id] = release

        # Status to answer every request with, to simulate upstream failures
        self.fail_with: Optional[int] = None
        self.calls: Counter = Counter()

        self._setup_routes()

    def _default_releases(self) -> List[MockRelease]:
        return [
            MockRelease(
                id="b84ee12a-09ef-421b-82de-0441a926375b",
                title="Blue Train",
                artist="John Coltrane",
                date="1957-09",
            ),
            MockRelease(
                id="f5093c06-23e3-404f-aeaa-40f72885ee3a",
                title="Kind of Blue",
                artist="Miles Davis",
                date="1959-08-17",
            ),
            MockRelease(
                id="0e4a6b4c-5b1e-4f50-8b7e-4b1c0c8b7d11",
                title="Untitled Demo",
                artist="Unknown Artist",
                image=None,
            ),
        ]

    def _failure(self) -> Optional[Response]:
        if self.fail_with is not None:
            return Response(status_code=self.fail_with, content=b"mock failure")
        return None

    def _release_json(self, release: MockRelease, score: int = 100) -> Dict:
        return {
            "id": release.id,
            "score": score,
            "title": release.title,
            "date": release.date,
            "artist-credit": [{"name": release.artist, "artist": {"name": release.artist}}],
        }

    def _setup_routes(self):
        """Set up mock routes."""

        @self.app.get("/ws/2/release/")
        async def search_releases(
            query: str = Query(""),
            fmt: str = Query("xml"),
            limit: int = Query(25),
        ):
            self.calls["search"] += 1
            failure = self._failure()
            if failure:
                return failure

            needle = query.lower()
            matches = [
                r for r in self.releases.values()
                if needle in r.title.lower() or needle in r.artist.lower()
            ][:limit]
            return {
                "created": "2024-01-01T00:00:00.000Z",
                "count": len(matches),
                "offset": 0,
                "releases": [self._release_json(r) for r in matches],
            }

        @self.app.get("/release/{mbid}/front")
        async def front(mbid: str):
            self.calls["front"] += 1
            return self._image_response(mbid)

        @self.app.get("/release/{mbid}/front-500")
        async def front_500(mbid: str):
            self.calls["front-500"] += 1
            return self._image_response(mbid)

        @self.app.get("/release/{mbid}")
        async def release_images(mbid: str):
            self.calls["release"] += 1
            failure = self._failure()
            if failure:
                return failure

            release = self.releases.get(mbid)
            if release is None or release.image is None:
                return Response(status_code=404, content=b"Not Found")

            image_url = f"http://localhost:{self.port}/release/{mbid}/front"
            return JSONResponse({
                "release": f"https://musicbrainz.org/release/{mbid}",
                "images": [{
                    "id": "1",
                    "image": image_url,
                    "thumbnails": {
                        "small": f"{image_url}-250",
                        "large": f"{image_url}-500",
                        "250": f"{image_url}-250",
                        "500": f"{image_url}-500",
                        "1200": f"{image_url}-1200",
                    },
                    "types": ["Front"],
                    "front": True,
                }],
            })

        @self.app.get("/_stats")
        async def stats():
            return dict(self.calls)

    def _image_response(self, mbid: str) -> Response:
        failure = self._failure()
        if failure:
            return failure

        release = self.releases.get(mbid)
        if release is None or release.image is None:
            return Response(status_code=404, content=b"Not Found")
        return Response(content=release.image, media_type=release.content_type)


def create_app():
    """Create mock upstream application."""
    server = MockUpstreamServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
