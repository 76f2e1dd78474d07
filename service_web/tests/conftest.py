"""
Shared fixtures for web service tests.
"""

import mimetypes
from typing import Dict, List, Optional

import httpx
import pytest
from fastapi import Response

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.config import get_config


INDEX_HTML = b"<!doctype html><html><body><div id=\"root\"></div></body></html>"
APP_JS = b"console.log('mdlabels');"


class MemoryAssetTree:
    """In-memory stand-in for a built frontend bundle."""

    def __init__(self, files: Dict[str, bytes]):
        self.files = dict(files)
        self.lookups: List[str] = []

    def resolve(self, path: str, scope) -> Optional[Response]:
        self.lookups.append(path)
        content = self.files.get(path.lstrip("/"))
        if content is None:
            return None
        media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return Response(content=content, media_type=media_type)


@pytest.fixture
def asset_tree():
    """Bundle with an entry document and one script."""
    return MemoryAssetTree({
        "index.html": INDEX_HTML,
        "assets/app.js": APP_JS,
    })


@pytest.fixture
def make_config():
    """Build a config that ignores the process environment's .env file."""
    def _make(**overrides):
        settings = {
            "mode": "",
            "app_version": "1.2.3",
            "build_time": "2024-05-01T12:00:00Z",
            "git_commit": "abc1234",
            "search_min_interval": 0.0,
            "musicbrainz_url": "https://musicbrainz.test/ws/2",
            "coverart_url": "https://coverart.test",
            "_env_file": None,
        }
        settings.update(overrides)
        return get_config("web", **settings)
    return _make


@pytest.fixture
def recorded_requests():
    """Requests seen by the stub upstream transports."""
    return []


def stub_transport(recorded: List[httpx.Request], handler) -> httpx.MockTransport:
    """MockTransport that records every request before delegating."""
    def _handle(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        return handler(request)
    return httpx.MockTransport(_handle)


@pytest.fixture
def make_transport(recorded_requests):
    def _make(handler):
        return stub_transport(recorded_requests, handler)
    return _make


@pytest.fixture
def bundle_dir(tmp_path):
    """A built bundle on disk, plus a file outside it."""
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_bytes(INDEX_HTML)
    (dist / "assets" / "app.js").write_bytes(APP_JS)
    (tmp_path / "secret.txt").write_text("do not serve")
    return dist


def http_scope(method: str = "GET", headers: Optional[Dict[str, str]] = None) -> Dict:
    """Minimal ASGI scope for calling the asset layer directly."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return {"type": "http", "method": method, "path": "/", "headers": raw_headers}
