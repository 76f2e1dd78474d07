"""
Response reshaping policies.

Each policy takes an upstream response opened in streaming mode, validates
its status before anything is written to the caller, and is responsible for
closing it.
"""

import base64
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from shared.logging import get_logger
from shared.errors import NotFoundError, PayloadError, UpstreamStatusError

logger = get_logger("web.reshapers")

CACHE_CONTROL_24H = "public, max-age=86400"
DEFAULT_IMAGE_TYPE = "image/jpeg"
ARTWORK_FIELD = "artworkData"


def to_data_url(data: bytes, content_type: str) -> str:
    """Encode bytes as a ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def _stream_body(upstream: httpx.Response, context: Dict[str, Any]) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    except (httpx.HTTPError, httpx.StreamError) as exc:
        # Headers are already sent; all we can do is cut the body short.
        logger.error("Error copying upstream response", error=str(exc), **context)
    finally:
        await upstream.aclose()


async def translate_status(upstream: httpx.Response, service: str, context: Dict[str, Any],
                           not_found_message: Optional[str] = None) -> None:
    """Close a rejected upstream response and raise the matching error.

    404 becomes ``NotFoundError`` when the route has a not-found message;
    every other status is mirrored through ``UpstreamStatusError``.
    """
    await upstream.aclose()
    status = upstream.status_code

    if status == 404 and not_found_message:
        raise NotFoundError(not_found_message, details=context)

    logger.warning(f"{service} returned status", status_code=status, **context)
    raise UpstreamStatusError(service, status, details=context)


async def passthrough(
    upstream: httpx.Response,
    *,
    service: str,
    media_type: Optional[str] = None,
    cache: bool = False,
    not_found_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> StreamingResponse:
    """Stream the upstream body to the caller byte-for-byte.

    ``media_type`` overrides the upstream content type; ``cache`` adds the
    24 hour public cache directive. Used for search results, raw images and
    the artwork metadata document.
    """
    context = context or {}
    if upstream.status_code != 200:
        await translate_status(upstream, service, context, not_found_message)

    headers = {"Cache-Control": CACHE_CONTROL_24H} if cache else None
    return StreamingResponse(
        _stream_body(upstream, context),
        media_type=media_type or upstream.headers.get("content-type"),
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )


async def base64_envelope(
    upstream: httpx.Response,
    *,
    service: str,
    context: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Buffer an image and return it as ``{"artworkData": "<data URL>"}``.

    A missing image is not an error here: the UI renders an empty cell, so
    upstream 404 becomes ``{"artworkData": ""}`` with status 200.
    """
    context = context or {}

    if upstream.status_code == 404:
        await upstream.aclose()
        return JSONResponse({ARTWORK_FIELD: ""})

    if upstream.status_code != 200:
        await translate_status(upstream, service, context)

    try:
        image = await upstream.aread()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        logger.error("Error reading artwork", error=str(exc), **context)
        raise PayloadError("Failed to read artwork", details=context) from exc
    finally:
        await upstream.aclose()

    content_type = upstream.headers.get("content-type") or DEFAULT_IMAGE_TYPE
    return JSONResponse(
        {ARTWORK_FIELD: to_data_url(image, content_type)},
        headers={"Cache-Control": CACHE_CONTROL_24H},
    )
