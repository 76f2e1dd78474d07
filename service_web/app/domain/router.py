"""
API path dispatch for the web proxy.

Paths under ``/api/`` are matched in a fixed precedence order; the first
matching rule wins:

1. ``/api/search``               -> release search (rate gated)
2. ``/api/version``              -> build metadata
3. ``.../<mbid>/base64``         -> front cover as a JSON data URL
4. ``.../<mbid>/thumbnails``     -> artwork metadata document
5. ``/api/artwork/<mbid>[/...]`` -> raw front cover
6. anything else                 -> 404
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.errors import NotFoundError, ValidationError
from ..adapters import CoverArtClient, MusicBrainzClient
from . import reshapers

SEARCH_PATH = "/api/search"
VERSION_PATH = "/api/version"
ARTWORK_PREFIX = "/api/artwork/"
BASE64_SUFFIX = "/base64"
THUMBNAILS_SUFFIX = "/thumbnails"

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 100  # MusicBrainz caps search pages at 100


class RouteKind(str, Enum):
    SEARCH = "search"
    VERSION = "version"
    ARTWORK_BASE64 = "artwork_base64"
    ARTWORK_THUMBNAILS = "artwork_thumbnails"
    ARTWORK = "artwork"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ApiRoute:
    kind: RouteKind
    identifier: Optional[str] = None


def _segments(path: str):
    return path.strip("/").split("/")


def _identifier(path: str, index: int, min_segments: int) -> str:
    segments = _segments(path)
    if len(segments) < min_segments or not segments[index]:
        raise ValidationError("Missing MBID", details={"path": path})
    return segments[index]


def resolve_api_route(path: str) -> ApiRoute:
    """Map a request path to a route.

    Raises ValidationError when a route needs an MBID the path does not
    carry, so malformed requests never reach an upstream.
    """
    if path == SEARCH_PATH:
        return ApiRoute(RouteKind.SEARCH)
    if path == VERSION_PATH:
        return ApiRoute(RouteKind.VERSION)
    if path.endswith(BASE64_SUFFIX):
        return ApiRoute(RouteKind.ARTWORK_BASE64, _identifier(path, -2, 4))
    if path.endswith(THUMBNAILS_SUFFIX):
        return ApiRoute(RouteKind.ARTWORK_THUMBNAILS, _identifier(path, -2, 4))
    if path.startswith(ARTWORK_PREFIX):
        return ApiRoute(RouteKind.ARTWORK, _identifier(path, 2, 3))
    return ApiRoute(RouteKind.NOT_FOUND)


def parse_search_limit(raw: Optional[str]) -> int:
    if raw is None or raw == "":
        return DEFAULT_SEARCH_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("Invalid query parameter 'limit'", details={"limit": raw})
    # Out-of-range values are served, just clamped to what MusicBrainz accepts
    return min(max(limit, 1), MAX_SEARCH_LIMIT)


class ApiHandler:
    """Executes resolved API routes against the upstream clients."""

    def __init__(self, musicbrainz: MusicBrainzClient, coverart: CoverArtClient, build_info: Dict[str, str]):
        self.musicbrainz = musicbrainz
        self.coverart = coverart
        self.build_info = dict(build_info)

    async def handle(self, request: Request) -> Response:
        route = resolve_api_route(request.url.path)

        if route.kind is RouteKind.SEARCH:
            return await self.search(request)
        if route.kind is RouteKind.VERSION:
            return self.version()
        if route.kind is RouteKind.ARTWORK_BASE64:
            return await self.artwork_base64(route.identifier)
        if route.kind is RouteKind.ARTWORK_THUMBNAILS:
            return await self.artwork_thumbnails(route.identifier)
        if route.kind is RouteKind.ARTWORK:
            return await self.artwork(route.identifier)

        raise NotFoundError(details={"path": request.url.path})

    async def search(self, request: Request) -> Response:
        query = request.query_params.get("q", "")
        if not query:
            raise ValidationError("Missing query parameter 'q'")
        limit = parse_search_limit(request.query_params.get("limit"))

        upstream = await self.musicbrainz.search(query, limit)
        return await reshapers.passthrough(
            upstream,
            service=self.musicbrainz.service,
            media_type="application/json",
            context={"query": query},
        )

    def version(self) -> Response:
        return JSONResponse(self.build_info)

    async def artwork(self, mbid: str) -> Response:
        upstream = await self.coverart.front_image(mbid)
        return await reshapers.passthrough(
            upstream,
            service=self.coverart.service,
            cache=True,
            not_found_message="Artwork not found",
            context={"mbid": mbid},
        )

    async def artwork_base64(self, mbid: str) -> Response:
        upstream = await self.coverart.front_thumbnail(mbid)
        return await reshapers.base64_envelope(
            upstream,
            service=self.coverart.service,
            context={"mbid": mbid},
        )

    async def artwork_thumbnails(self, mbid: str) -> Response:
        upstream = await self.coverart.release_metadata(mbid)
        return await reshapers.passthrough(
            upstream,
            service=self.coverart.service,
            media_type="application/json",
            cache=True,
            not_found_message="Artwork not found",
            context={"mbid": mbid},
        )
